"""
discovery.py

Resolve the OAuth authorization server that belongs to an API endpoint.

Order:
1. Explicit override, used verbatim.
2. `{api_url}/.well-known/oauth-authorization-server` -> `issuer`.
3. Probe the HCP (`https://oauth.<domain>`) and classic
   (`https://oauth-openshift.apps.<domain>`) patterns, first reachable wins.
4. Classic pattern when nothing answered.

Never raises; reachability problems surface later, during token retrieval.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

import requests

from cluster_auth.logger import get_logger
from cluster_auth.oauth.codec import extract_json_value
from cluster_auth.oauth.transport import DISCOVERY_TIMEOUT, PROBE_TIMEOUT, probe

logger = get_logger(__name__)

WELL_KNOWN_PATH = "/.well-known/oauth-authorization-server"


@dataclass(frozen=True)
class OAuthCandidates:
    classic: str
    hcp: str


def cluster_domain(api_url: str) -> str:
    """
    `https://api.mycluster.abcd.p1.openshiftapps.com:6443` ->
    `mycluster.abcd.p1.openshiftapps.com`
    """
    parts = urlsplit(api_url if "://" in api_url else f"https://{api_url}")
    host = parts.hostname or api_url
    if host.startswith("api."):
        host = host[len("api."):]
    return host


def derive_candidates(api_url: str) -> OAuthCandidates:
    domain = cluster_domain(api_url)
    return OAuthCandidates(
        classic=f"https://oauth-openshift.apps.{domain}",
        hcp=f"https://oauth.{domain}",
    )


def parse_issuer(body: str) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return extract_json_value("issuer", body)
    if isinstance(data, dict) and isinstance(data.get("issuer"), str):
        return data["issuer"]
    return ""


def discover_issuer(session: requests.Session, api_url: str) -> Optional[str]:
    url = api_url.rstrip("/") + WELL_KNOWN_PATH
    logger.info("Discovering OAuth URL from %s", url)

    try:
        response = session.get(url, timeout=DISCOVERY_TIMEOUT, allow_redirects=True)
    except requests.RequestException as e:
        logger.info("No well-known response from API: %s", e)
        return None

    body = response.text or ""
    if not body:
        logger.info("Empty well-known response from API (HTTP %s)", response.status_code)
        return None

    logger.debug("Well-known response received (length: %d)", len(body))
    issuer = parse_issuer(body).strip()
    if issuer:
        logger.info("Discovered OAuth URL: %s", issuer)
        return issuer
    return None


def probe_candidates(session: requests.Session, candidates: OAuthCandidates) -> str:
    logger.info("Trying HCP pattern: %s", candidates.hcp)
    if probe(session, candidates.hcp, PROBE_TIMEOUT):
        logger.info("HCP OAuth reachable: %s", candidates.hcp)
        return candidates.hcp

    logger.info(
        "HCP pattern not reachable, trying Classic pattern: %s", candidates.classic
    )
    if probe(session, candidates.classic, PROBE_TIMEOUT):
        logger.info("Classic OAuth reachable: %s", candidates.classic)
        return candidates.classic

    logger.warning(
        "Neither pattern probed. Defaulting to Classic: %s", candidates.classic
    )
    return candidates.classic


def resolve_oauth_url(
    session: requests.Session,
    api_url: str,
    override: Optional[str] = None,
) -> str:
    if override:
        logger.info("Using provided OAuth URL: %s", override)
        return override

    issuer = discover_issuer(session, api_url)
    if issuer:
        return issuer

    logger.info("Discovery failed, probing OAuth URL patterns...")
    return probe_candidates(session, derive_candidates(api_url))
