from __future__ import annotations

from cluster_auth.aws.vpc_cleanup import CleanupReport, VpcCleaner, cleanup_vpc

__all__ = ["CleanupReport", "VpcCleaner", "cleanup_vpc"]
