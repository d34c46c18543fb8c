from __future__ import annotations

from cluster_auth.oauth.base import (
    AuthRequest,
    AuthResult,
    FailureReason,
    OutcomeKind,
    RetrievalOutcome,
    RetryOutcome,
    RetryPolicy,
)
from cluster_auth.oauth.errors import ClusterAuthError, InvalidRequest
from cluster_auth.oauth.service import get_token, run

__all__ = [
    "AuthRequest",
    "AuthResult",
    "FailureReason",
    "OutcomeKind",
    "RetrievalOutcome",
    "RetryOutcome",
    "RetryPolicy",
    "ClusterAuthError",
    "InvalidRequest",
    "get_token",
    "run",
]
