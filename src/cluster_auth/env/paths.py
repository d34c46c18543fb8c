from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


def _resolve_dir(env_var: str) -> Optional[Path]:
    """
    Resolve an optional directory from an environment variable.
    Pure lookup: creating the directory is left to the caller.
    """
    raw = os.environ.get(env_var)
    if not raw:
        return None
    return Path(raw).expanduser().resolve()


# ---------------------------------------------------------------------
# Public paths
# ---------------------------------------------------------------------


def logs_dir() -> Optional[Path]:
    # File logging is opt-in; Terraform runs the tool from the module dir.
    return _resolve_dir("CLUSTER_AUTH_LOGS_DIR")


def env_file() -> Path:
    raw = os.environ.get("CLUSTER_AUTH_ENV_FILE")
    return Path(raw).expanduser() if raw else Path.cwd() / ".env"


def command_logs_dir(command: str) -> Optional[Path]:
    base = logs_dir()
    if base is None:
        return None
    return base / command
