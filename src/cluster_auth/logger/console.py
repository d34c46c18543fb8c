from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from cluster_auth.env import get_logging_env


def stderr_console() -> Console:
    # Resolved per call so pytest's capsys/capfd swaps of sys.stderr are honoured.
    return Console(file=sys.stderr, soft_wrap=True)


class ConsoleGateFilter(logging.Filter):
    """
    Drop console records when quiet mode is enabled.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return not get_logging_env().quiet


def build_console_handler() -> logging.Handler:
    handler = RichHandler(
        console=stderr_console(),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
    )

    # RichHandler renders the level column; the formatter must not repeat it.
    handler.setFormatter(logging.Formatter("%(message)s"))

    handler.addFilter(ConsoleGateFilter())
    return handler
