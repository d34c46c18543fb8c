"""Operational tooling for ROSA cluster provisioning."""

__version__ = "0.1.0"
