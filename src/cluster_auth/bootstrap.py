"""bootstrap.py

Process bootstrap for cluster-auth.

Rules:
1) Only bootstrap is allowed to *mutate* os.environ for shared run context.
2) Call bootstrap_base_env() exactly once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().

Everything else treats environment variables as the source of truth.
"""

from __future__ import annotations

import os
from datetime import datetime

from dotenv import load_dotenv

from cluster_auth.env import env_file, reset_env_caches


_BOOTSTRAPPED = False


def bootstrap_base_env() -> None:
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return

    dotenv_path = env_file()
    if dotenv_path.is_file():
        # Variables set by the caller (Terraform, CI) always win.
        load_dotenv(dotenv_path, override=False)

    os.environ.setdefault(
        "CLUSTER_AUTH_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True


def bootstrap_run_context(
    *,
    command: str,
    verbose: bool | None = None,
    quiet: bool | None = None,
) -> None:
    """Establish run-scoped context used by logging and commands."""

    os.environ["CLUSTER_AUTH_COMMAND"] = command

    if verbose is not None:
        os.environ["CLUSTER_AUTH_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["CLUSTER_AUTH_QUIET"] = "1" if quiet else "0"

    # Context changes must invalidate cached env views.
    reset_env_caches()
