"""
service.py

End-to-end token bootstrap and the external-program contract.

Callers that talk to this module directly use get_token(). The `token`
command uses run(), which reads stdin once, writes exactly one JSON line to
stdout, and always reports success to the shell: failures travel in the
payload so the orchestrator can tell "credentials invalid" from "tool crashed".
"""

from __future__ import annotations

import math
import time
from typing import Callable, Optional, TextIO

import requests

from cluster_auth.banner import exhaustion_banner
from cluster_auth.logger import get_logger
from cluster_auth.oauth.base import (
    AuthRequest,
    AuthResult,
    FailureReason,
    OutcomeKind,
    RetryOutcome,
    RetryPolicy,
)
from cluster_auth.oauth.codec import decode_request, encode_result
from cluster_auth.oauth.discovery import resolve_oauth_url
from cluster_auth.oauth.errors import ClusterAuthError, InvalidRequest
from cluster_auth.oauth.retry import retry_with_backoff
from cluster_auth.oauth.token import TokenRetriever
from cluster_auth.oauth.transport import build_session

logger = get_logger(__name__)

TERMINAL_MESSAGES = {
    FailureReason.INVALID_CREDENTIALS: "invalid credentials",
    FailureReason.ACCESS_FORBIDDEN: "access forbidden",
}


def _approx_minutes(policy: RetryPolicy) -> int:
    return math.ceil(policy.total_wait() / 60)


def exhaustion_message(
    reason: Optional[FailureReason], attempts: int, policy: RetryPolicy
) -> str:
    minutes = _approx_minutes(policy)

    if reason is FailureReason.OAUTH_NOT_REACHABLE:
        return (
            f"oauth server not reachable after {attempts} attempts (~{minutes} min). "
            "OAuth may still be reconciling - re-run terraform apply to retry."
        )
    if reason is FailureReason.AUTH_FAILED:
        return (
            f"authentication failed after {attempts} attempts (~{minutes} min). "
            "IDP may still be initializing - re-run terraform apply to retry."
        )
    detail = reason.value if reason else "unknown"
    return (
        f"authentication failed after {attempts} attempts (~{minutes} min): "
        f"{detail}. Re-run terraform apply to retry."
    )


def to_result(retry: RetryOutcome, policy: RetryPolicy) -> AuthResult:
    outcome = retry.outcome

    if outcome.kind is OutcomeKind.SUCCESS:
        return AuthResult.success(outcome.token)

    if outcome.kind is OutcomeKind.TERMINAL and outcome.reason in TERMINAL_MESSAGES:
        return AuthResult.failure(TERMINAL_MESSAGES[outcome.reason])

    return AuthResult.failure(exhaustion_message(outcome.reason, retry.attempts, policy))


def get_token(
    request: AuthRequest,
    policy: RetryPolicy,
    *,
    session: Optional[requests.Session] = None,
    request_timeout: float = 30,
    sleep: Callable[[float], None] = time.sleep,
) -> AuthResult:
    owns_session = session is None
    session = session or build_session()

    try:
        oauth_url = resolve_oauth_url(session, request.api_url, request.oauth_url)

        logger.info("API URL: %s", request.api_url)
        logger.info("OAuth URL: %s", oauth_url)
        logger.info("Username: %s", request.username)
        logger.info(
            "Attempting OAuth token retrieval (max %d attempts, wait %ds..%ds)",
            policy.max_retries,
            policy.initial_wait,
            policy.max_wait,
        )

        retriever = TokenRetriever(
            session,
            oauth_url,
            request.username,
            request.password,
            request_timeout=request_timeout,
        )
        started = time.monotonic()
        retry = retry_with_backoff(retriever, policy, sleep=sleep)
        logger.debug("Retry loop finished after %.1fs", time.monotonic() - started)
    finally:
        if owns_session:
            session.close()

    if retry.exhausted:
        last = retry.outcome.reason.value if retry.outcome.reason else "unknown"
        exhaustion_banner(attempts=retry.attempts, last_error=last)

    return to_result(retry, policy)


def run(
    stdin: TextIO,
    stdout: TextIO,
    policy: RetryPolicy,
    *,
    verify_tls: bool = False,
    request_timeout: float = 30,
    sleep: Callable[[float], None] = time.sleep,
    session: Optional[requests.Session] = None,
) -> int:
    decode_error: Optional[str] = None
    try:
        text = stdin.read()
    except UnicodeDecodeError as e:
        logger.warning("Could not decode stdin: %s", e)
        text, decode_error = "", f"could not decode input: {e}"
    except (OSError, ValueError) as e:
        logger.warning("Could not read stdin: %s", e)
        text = ""

    logger.info("Input received (length: %d)", len(text))

    owns_session = session is None
    http = session or build_session(verify_tls)

    try:
        if decode_error:
            raise InvalidRequest(decode_error)
        request = decode_request(text)
        result = get_token(
            request,
            policy,
            session=http,
            request_timeout=request_timeout,
            sleep=sleep,
        )
    except ClusterAuthError as e:
        result = AuthResult.failure(str(e) or type(e).__name__)
    except Exception as e:
        logger.exception("Unexpected error during token bootstrap")
        result = AuthResult.failure(f"unexpected error: {e}")
    finally:
        if owns_session:
            http.close()

    stdout.write(encode_result(result))
    stdout.flush()
    return 0
