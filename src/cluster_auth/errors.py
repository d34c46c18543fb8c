from __future__ import annotations


class ClusterAuthError(Exception):
    """Base error for cluster authentication."""
