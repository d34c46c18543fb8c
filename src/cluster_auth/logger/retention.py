from __future__ import annotations

import logging
from pathlib import Path

_log = logging.getLogger(__name__)


def enforce_retention(log_dir: Path, keep: int) -> None:
    """Keep only the newest `keep` log files in log_dir."""
    if keep <= 0:
        return

    logs = sorted(
        log_dir.glob("*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    for old in logs[keep:]:
        try:
            old.unlink()
        except OSError as e:
            _log.debug("Could not prune old log file %s: %s", old, e)
