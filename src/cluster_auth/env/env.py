from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from cluster_auth.env.paths import logs_dir
from cluster_auth.errors import ClusterAuthError

# ------------------------------------------------------------
# Errors / helpers
# ------------------------------------------------------------


class ConfigError(ClusterAuthError, RuntimeError):
    pass


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_retention: int
    verbose: bool
    quiet: bool
    logs_dir: Optional[str]


def get_logging_env() -> LoggingEnvironment:
    log_level = os.environ.get("LOG_LEVEL", "INFO")
    log_retention = _as_int(os.environ.get("LOG_RETENTION", "30"), 30)

    verbose = _as_bool(os.environ.get("CLUSTER_AUTH_VERBOSE", "0"))
    quiet = _as_bool(os.environ.get("CLUSTER_AUTH_QUIET", "0"))
    configured_logs = logs_dir()

    return LoggingEnvironment(
        log_level=log_level,
        log_retention=log_retention,
        verbose=verbose,
        quiet=quiet,
        logs_dir=str(configured_logs) if configured_logs else None,
    )


# ------------------------------------------------------------
# OAuth retry environment
# ------------------------------------------------------------

DEFAULT_MAX_RETRIES = 6
BOOTSTRAP_MAX_RETRIES = 10
DEFAULT_INITIAL_WAIT = 10
DEFAULT_MAX_WAIT = 30
DEFAULT_REQUEST_TIMEOUT = 30


class Environment:
    def __init__(self, *, bootstrap: bool = False):
        # Logging snapshot (immutable)
        self._logging = get_logging_env()
        self.bootstrap = bootstrap

        # ---- OAUTH RETRY ----
        default_retries = BOOTSTRAP_MAX_RETRIES if bootstrap else DEFAULT_MAX_RETRIES
        self.max_retries = max(
            1, _as_int(os.environ.get("OAUTH_MAX_RETRIES", ""), default_retries)
        )
        self.initial_wait = max(
            0, _as_int(os.environ.get("OAUTH_INITIAL_WAIT", ""), DEFAULT_INITIAL_WAIT)
        )
        self.max_wait = max(
            0, _as_int(os.environ.get("OAUTH_MAX_WAIT", ""), DEFAULT_MAX_WAIT)
        )

        # ---- HTTP ----
        self.request_timeout = max(
            1,
            _as_int(
                os.environ.get("OAUTH_REQUEST_TIMEOUT", ""), DEFAULT_REQUEST_TIMEOUT
            ),
        )
        self.verify_tls = _as_bool(os.environ.get("OAUTH_VERIFY_TLS", "0"))

        # ---- AWS ----
        self.aws_region = os.environ.get("AWS_REGION") or os.environ.get(
            "AWS_DEFAULT_REGION"
        )

    def as_dict(self) -> dict:
        return {
            "Logging": {
                "log_level": self.log_level,
                "log_retention": self.log_retention,
                "verbose": self.verbose,
                "quiet": self.quiet,
                "logs_dir": self._logging.logs_dir or "(console only)",
            },
            "OAuth": {
                "bootstrap_budget": self.bootstrap,
                "max_retries": self.max_retries,
                "initial_wait": self.initial_wait,
                "max_wait": self.max_wait,
                "request_timeout": self.request_timeout,
                "verify_tls": self.verify_tls,
            },
            "AWS": {
                "region": self.aws_region or "(boto3 default chain)",
            },
        }

    # ---- logging passthrough ----
    @property
    def log_level(self) -> str:
        return self._logging.log_level

    @property
    def log_retention(self) -> int:
        return self._logging.log_retention

    @property
    def verbose(self) -> bool:
        return self._logging.verbose

    @property
    def quiet(self) -> bool:
        return self._logging.quiet


_ENV: dict[bool, Environment] = {}


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    _ENV.clear()


def get_env(*, bootstrap: bool = False) -> Environment:
    if bootstrap not in _ENV:
        _ENV[bootstrap] = Environment(bootstrap=bootstrap)
    return _ENV[bootstrap]
