from __future__ import annotations

import argparse
import sys

from cluster_auth.cli.common import add_output_flags, non_negative_int
from cluster_auth.env import ConfigError, get_env
from cluster_auth.logger import get_logger
from cluster_auth.oauth import AuthResult, RetryPolicy, run
from cluster_auth.oauth.codec import encode_result


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_token_parser(subparsers: argparse._SubParsersAction) -> None:
    token = subparsers.add_parser(
        "token",
        help="Fetch an OAuth bearer token (JSON on stdin, JSON on stdout)",
        description=(
            "Reads {api_url, oauth_url?, username, password} from stdin and "
            "writes {token, authenticated, error} to stdout. Always exits 0."
        ),
    )
    add_output_flags(token)

    token.add_argument(
        "--bootstrap",
        action="store_true",
        help="Use the longer bootstrap retry budget (default 10 attempts)",
    )
    token.add_argument(
        "--max-retries",
        type=non_negative_int,
        default=None,
        help="Attempts before giving up (env: OAUTH_MAX_RETRIES)",
    )
    token.add_argument(
        "--initial-wait",
        type=non_negative_int,
        default=None,
        help="First backoff in seconds (env: OAUTH_INITIAL_WAIT)",
    )
    token.add_argument(
        "--max-wait",
        type=non_negative_int,
        default=None,
        help="Backoff cap in seconds (env: OAUTH_MAX_WAIT)",
    )
    token.add_argument(
        "--request-timeout",
        type=non_negative_int,
        default=None,
        help="Authorize request timeout in seconds (env: OAUTH_REQUEST_TIMEOUT)",
    )
    token.add_argument(
        "--verify-tls",
        action="store_true",
        default=None,
        help="Verify TLS certificates (env: OAUTH_VERIFY_TLS)",
    )

    token.set_defaults(action="token")


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------


def policy_from_args(args: argparse.Namespace) -> RetryPolicy:
    env = get_env(bootstrap=bool(getattr(args, "bootstrap", False)))

    max_retries = env.max_retries if args.max_retries is None else args.max_retries
    if max_retries < 1:
        raise ConfigError("max retries must be at least 1")

    return RetryPolicy(
        max_retries=max_retries,
        initial_wait=env.initial_wait if args.initial_wait is None else args.initial_wait,
        max_wait=env.max_wait if args.max_wait is None else args.max_wait,
    )


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def handle_token(args: argparse.Namespace) -> int:
    logger = get_logger("cluster_auth.token")
    env = get_env(bootstrap=bool(args.bootstrap))

    try:
        policy = policy_from_args(args)
    except ConfigError as e:
        logger.error("Invalid retry configuration: %s", e)
        sys.stdout.write(encode_result(AuthResult.failure(str(e))))
        sys.stdout.flush()
        return 0

    timeout = env.request_timeout if args.request_timeout is None else args.request_timeout
    verify_tls = env.verify_tls if args.verify_tls is None else args.verify_tls

    return run(
        sys.stdin,
        sys.stdout,
        policy,
        verify_tls=verify_tls,
        request_timeout=max(timeout, 1),
    )
