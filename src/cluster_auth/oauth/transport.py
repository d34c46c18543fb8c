from __future__ import annotations

from typing import Tuple

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from cluster_auth.logger import get_logger

logger = get_logger(__name__)

Timeout = Tuple[float, float]

# (connect, read) in seconds
DISCOVERY_TIMEOUT: Timeout = (15, 30)
PROBE_TIMEOUT: Timeout = (5, 10)
LIVENESS_TIMEOUT: Timeout = (10, 30)


def build_session(verify_tls: bool = False) -> requests.Session:
    """
    Session shared by every request of one invocation.

    Freshly installed clusters serve self-signed certificates, so TLS
    verification is off unless explicitly requested.
    """
    session = requests.Session()
    session.verify = verify_tls
    if not verify_tls:
        urllib3.disable_warnings(InsecureRequestWarning)
    return session


def is_reachable(session: requests.Session, url: str, timeout: Timeout) -> bool:
    """
    True when url answers with any HTTP response, whatever the status.
    """
    try:
        response = session.get(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        logger.debug("No response from %s: %s", url, e)
        return False
    response.close()
    return True


def probe(session: requests.Session, base_url: str, timeout: Timeout) -> bool:
    """Liveness check: `<base>/healthz`, then the bare base URL."""
    base = base_url.rstrip("/")
    return is_reachable(session, f"{base}/healthz", timeout) or is_reachable(
        session, base, timeout
    )
