from __future__ import annotations

from cluster_auth.errors import ClusterAuthError


class InvalidRequest(ClusterAuthError):
    """The input object is missing required fields."""


__all__ = ["ClusterAuthError", "InvalidRequest"]
