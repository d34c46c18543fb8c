from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


class FailureReason(str, Enum):
    OAUTH_NOT_REACHABLE = "oauth_not_reachable"
    AUTH_FAILED = "auth_failed"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCESS_FORBIDDEN = "access_forbidden"


@dataclass(frozen=True)
class AuthRequest:
    api_url: str
    username: str
    password: str = field(repr=False)
    oauth_url: Optional[str] = None


@dataclass(frozen=True)
class AuthResult:
    """
    Program output. Either a token with no error, or an error with no token.

    Build instances through success() / failure().
    """

    token: str
    authenticated: bool
    error: str

    @classmethod
    def success(cls, token: str) -> "AuthResult":
        if not token:
            raise ValueError("a successful AuthResult needs a token")
        return cls(token=token, authenticated=True, error="")

    @classmethod
    def failure(cls, error: str) -> "AuthResult":
        if not error:
            raise ValueError("a failed AuthResult needs an error message")
        return cls(token="", authenticated=False, error=error)

    def as_payload(self) -> dict[str, str]:
        return {
            "token": self.token,
            "authenticated": "true" if self.authenticated else "false",
            "error": self.error,
        }


@dataclass(frozen=True)
class RetrievalOutcome:
    kind: OutcomeKind
    token: str = field(default="", repr=False)
    reason: Optional[FailureReason] = None

    @classmethod
    def success(cls, token: str) -> "RetrievalOutcome":
        return cls(kind=OutcomeKind.SUCCESS, token=token)

    @classmethod
    def retryable(cls, reason: FailureReason) -> "RetrievalOutcome":
        return cls(kind=OutcomeKind.RETRYABLE, reason=reason)

    @classmethod
    def terminal(cls, reason: FailureReason) -> "RetrievalOutcome":
        return cls(kind=OutcomeKind.TERMINAL, reason=reason)


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int
    initial_wait: int
    max_wait: int

    def schedule(self) -> Iterator[int]:
        """
        Sleeps between attempts: one fewer than max_retries, doubling from
        initial_wait and capped at max_wait.
        """
        wait = self.initial_wait
        for _ in range(max(self.max_retries - 1, 0)):
            yield wait
            wait = min(wait * 2, self.max_wait)

    def total_wait(self) -> int:
        return sum(self.schedule())


@dataclass(frozen=True)
class RetryOutcome:
    outcome: RetrievalOutcome
    attempts: int
    exhausted: bool
