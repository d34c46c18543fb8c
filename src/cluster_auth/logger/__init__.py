from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from cluster_auth.env import command_logs_dir, get_logging_env
from .console import build_console_handler
from .retention import enforce_retention
from . import state as _state

FILE_FORMAT = "%(asctime)s | [%(levelname)s] | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _level_to_int(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def _ensure_run_id() -> str:
    run_id = os.environ.get("CLUSTER_AUTH_RUN_ID")
    if not run_id:
        run_id = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        os.environ["CLUSTER_AUTH_RUN_ID"] = run_id
    return run_id


def _target_logfile() -> Path | None:
    command = os.environ.get("CLUSTER_AUTH_COMMAND") or "cluster-auth"
    log_dir = command_logs_dir(command)
    if log_dir is None:
        return None
    return log_dir / f"{command}-{_ensure_run_id()}.log"


def _build_file_handler(logfile: Path, keep: int) -> logging.FileHandler:
    logfile.parent.mkdir(parents=True, exist_ok=True)
    enforce_retention(logfile.parent, keep)
    handler = logging.FileHandler(logfile, encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _squelch_noisy_loggers() -> None:
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


def init_logging() -> None:
    """
    Initialize logging for the entire process.

    - Handlers are attached ONLY to the root logger.
    - Console output goes to stderr; stdout is reserved for command results.
    - A file handler is added only when CLUSTER_AUTH_LOGS_DIR is set.
      An unusable logs dir downgrades to console-only with a warning.
    - Safe to call multiple times; handlers are replaced, not stacked.
    """
    env = get_logging_env()
    _squelch_noisy_loggers()

    root = logging.getLogger()
    logfile = _target_logfile()

    # Base level from env, but verbose forces DEBUG everywhere.
    root_level = logging.DEBUG if env.verbose else _level_to_int(env.log_level)

    if _state.INITIALIZED and _state.LOG_FILE_PATH == logfile:
        root.setLevel(root_level)
        return

    for h in list(root.handlers):
        root.removeHandler(h)
        if isinstance(h, logging.FileHandler):
            h.close()
    root.setLevel(root_level)

    file_error: OSError | None = None
    if logfile is not None:
        try:
            root.addHandler(_build_file_handler(logfile, int(env.log_retention)))
        except OSError as e:
            file_error = e
            logfile = None

    if not env.quiet:
        root.addHandler(build_console_handler())

    # Quiet and no file: keep logging's last-resort handler off stderr.
    if not root.handlers:
        root.addHandler(logging.NullHandler())

    _state.INITIALIZED = True
    _state.RUN_ID = os.environ.get("CLUSTER_AUTH_RUN_ID")
    _state.LOG_FILE_PATH = logfile

    if file_error is not None:
        get_logger(__name__).warning(
            "File logging disabled, could not open logs dir: %s", file_error
        )
