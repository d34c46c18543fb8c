from __future__ import annotations

from typing import Iterable

from rich.panel import Panel
from rich.text import Text

from cluster_auth.env import get_logging_env
from cluster_auth.logger.console import stderr_console

# --------------------------------------------------
# Layout constants
# --------------------------------------------------

DEFAULT_WIDTH = 72


def _emit(renderable) -> None:
    if get_logging_env().quiet:
        return
    stderr_console().print(renderable)


# --------------------------------------------------
# Headers / sections
# --------------------------------------------------


def section_header(title: str, details: Iterable[tuple[str, str]] = ()) -> None:
    body = Text()
    for i, (label, value) in enumerate(details):
        if i:
            body.append("\n")
        body.append(f"{label + ':':<9}", style="bold")
        body.append(str(value))

    _emit(
        Panel(
            body,
            title=Text(title.strip(), style="bold cyan"),
            width=DEFAULT_WIDTH,
        )
    )


def section_end(message: str) -> None:
    _emit(Panel(Text(message, style="green"), width=DEFAULT_WIDTH))


# --------------------------------------------------
# Remediation
# --------------------------------------------------


def exhaustion_banner(*, attempts: int, last_error: str) -> None:
    body = Text()
    body.append(f"All {attempts} attempts exhausted. Last error: {last_error}\n\n")
    body.append("The OAuth server may still be reconciling after IDP changes.\n")
    body.append("This is common during initial cluster setup or after adding\n")
    body.append("the htpasswd identity provider.\n\n")
    body.append("To resolve:\n", style="bold")
    body.append("  1. Wait a few minutes for OAuth to finish reconciling\n")
    body.append("  2. Re-run: terraform apply -var-file=<your>.tfvars\n\n")
    body.append("To verify manually:\n", style="bold")
    body.append("  curl -sk <api_url>/.well-known/oauth-authorization-server")

    _emit(
        Panel(
            body,
            title=Text("OAuth token retrieval timed out", style="bold red"),
            border_style="red",
            width=DEFAULT_WIDTH,
        )
    )
