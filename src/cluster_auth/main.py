#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from typing import Optional

from cluster_auth import __version__
from cluster_auth.bootstrap import bootstrap_base_env, bootstrap_run_context


def _dispatch_help(argv: list[str]) -> int:
    # Support:
    #   cluster-auth help
    #   cluster-auth help token
    if argv and argv[0] == "help":
        argv = argv[1:]

    try:
        build_parser().parse_args(argv + ["--help"])
    except SystemExit:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cluster-auth",
        description="ROSA cluster bootstrap helpers for Terraform",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from cluster_auth.cli.cli_env import build_env_parser
    from cluster_auth.cli.cli_token import build_token_parser
    from cluster_auth.cli.cli_vpc import build_vpc_cleanup_parser

    build_token_parser(sub)
    build_vpc_cleanup_parser(sub)
    build_env_parser(sub)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    bootstrap_base_env()

    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "_help", False):
        return _dispatch_help(argv)

    bootstrap_run_context(
        command=args.command,
        verbose=bool(getattr(args, "verbose", False)),
        quiet=bool(getattr(args, "quiet", False)),
    )

    # Initialize logging AFTER run-context env stamping
    from cluster_auth.logger import get_logger, init_logging

    init_logging()
    log = get_logger(__name__)
    log.debug("Command: %s", args.command)

    if args.command == "token":
        from cluster_auth.cli.cli_token import handle_token

        return handle_token(args)

    if args.command == "vpc-cleanup":
        from cluster_auth.cli.cli_vpc import handle_vpc_cleanup

        return handle_vpc_cleanup(args)

    if args.command == "env":
        from cluster_auth.cli.cli_env import handle_env

        return handle_env(args)

    raise RuntimeError(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
