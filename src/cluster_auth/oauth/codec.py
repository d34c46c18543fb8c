"""
codec.py

Request/response codec for the external-program contract.

Input is a single JSON object read from stdin:
    {"api_url": ..., "oauth_url": ..., "username": ..., "password": ...}

Output is a single flat JSON object with three string values:
    {"token": ..., "authenticated": "true"|"false", "error": ...}

Decoding never raises. Malformed input falls back to a permissive
`"key": "value"` scan, and missing fields surface as InvalidRequest from
build_request().
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from cluster_auth.logger import get_logger
from cluster_auth.oauth.base import AuthRequest, AuthResult
from cluster_auth.oauth.errors import InvalidRequest

logger = get_logger(__name__)

REQUEST_KEYS = ("api_url", "oauth_url", "username", "password")

MISSING_API_URL = "api_url not provided in input"
MISSING_CREDENTIALS = "username and password are required"


def extract_json_value(key: str, text: str) -> str:
    """First `"key": "value"` pair in text, or "" when absent."""
    pattern = re.compile(r'"%s"\s*:\s*"([^"]*)"' % re.escape(key))
    match = pattern.search(text)
    return match.group(1) if match else ""


def _structured(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def decode_fields(text: str) -> Dict[str, str]:
    """
    Decode the request keys from raw stdin text.

    Non-string values (null, numbers, nested objects) count as missing.
    """
    data = _structured(text)
    if data is not None:
        logger.debug("Decoded input with the JSON parser")
        fields: Dict[str, str] = {}
        for key in REQUEST_KEYS:
            value = data.get(key)
            fields[key] = value if isinstance(value, str) else ""
        return fields

    logger.debug("Input is not a JSON object, using key/value scan")
    return {key: extract_json_value(key, text) for key in REQUEST_KEYS}


def build_request(fields: Dict[str, str]) -> AuthRequest:
    api_url = fields.get("api_url", "").strip()
    username = fields.get("username", "")
    password = fields.get("password", "")

    if not api_url:
        raise InvalidRequest(MISSING_API_URL)
    if not username or not password:
        raise InvalidRequest(MISSING_CREDENTIALS)

    return AuthRequest(
        api_url=api_url,
        oauth_url=fields.get("oauth_url", "").strip() or None,
        username=username,
        password=password,
    )


def decode_request(text: str) -> AuthRequest:
    fields = decode_fields(text)
    logger.info(
        "Parsed input: api_url=%r username=%r password length=%d",
        fields.get("api_url", ""),
        fields.get("username", ""),
        len(fields.get("password", "")),
    )
    return build_request(fields)


def encode_result(result: AuthResult) -> str:
    """One line of JSON, newline-terminated."""
    return json.dumps(result.as_payload()) + "\n"
