"""
token.py

One attempt of OpenShift's challenging-client token flow.

The server answers a successful Basic-auth challenge with a 302 whose
Location carries `access_token=...`. Redirects must not be followed or the
token is lost.
"""

from __future__ import annotations

import base64
import re
from typing import Mapping, Optional
from urllib.parse import unquote

import requests

from cluster_auth.logger import get_logger
from cluster_auth.oauth.base import FailureReason, RetrievalOutcome
from cluster_auth.oauth.transport import LIVENESS_TIMEOUT, probe

logger = get_logger(__name__)

AUTHORIZE_PATH = (
    "/oauth/authorize?response_type=token&client_id=openshift-challenging-client"
)

_ACCESS_TOKEN = re.compile(r"access_token=([^&]+)")


def basic_auth_header(username: str, password: str) -> str:
    raw = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def extract_token(location: str) -> Optional[str]:
    match = _ACCESS_TOKEN.search(location or "")
    if not match:
        return None
    token = unquote(match.group(1)).strip()
    return token or None


def classify_response(status_code: int, headers: Mapping[str, str]) -> RetrievalOutcome:
    token = extract_token(headers.get("Location", ""))
    if token:
        return RetrievalOutcome.success(token)

    if status_code == 401:
        return RetrievalOutcome.terminal(FailureReason.INVALID_CREDENTIALS)

    if status_code == 403:
        return RetrievalOutcome.terminal(FailureReason.ACCESS_FORBIDDEN)

    return RetrievalOutcome.retryable(FailureReason.AUTH_FAILED)


class TokenRetriever:
    """Callable performing exactly one retrieval attempt per call."""

    def __init__(
        self,
        session: requests.Session,
        oauth_url: str,
        username: str,
        password: str,
        *,
        request_timeout: float = 30,
    ) -> None:
        self._session = session
        self._oauth_url = oauth_url.rstrip("/")
        self._headers = {
            "Authorization": basic_auth_header(username, password),
            "X-CSRF-Token": "1",
        }
        self._timeout = (LIVENESS_TIMEOUT[0], request_timeout)

    @property
    def authorize_url(self) -> str:
        return self._oauth_url + AUTHORIZE_PATH

    def __call__(self) -> RetrievalOutcome:
        if not probe(self._session, self._oauth_url, LIVENESS_TIMEOUT):
            return RetrievalOutcome.retryable(FailureReason.OAUTH_NOT_REACHABLE)

        try:
            response = self._session.get(
                self.authorize_url,
                headers=self._headers,
                timeout=self._timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            logger.debug("Authorize request failed: %s", e)
            return RetrievalOutcome.retryable(FailureReason.AUTH_FAILED)

        outcome = classify_response(response.status_code, response.headers)
        logger.debug(
            "Authorize responded HTTP %s -> %s", response.status_code, outcome.kind.value
        )
        return outcome
