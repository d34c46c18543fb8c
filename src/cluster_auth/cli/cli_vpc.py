from __future__ import annotations

import argparse

from botocore.exceptions import BotoCoreError, ClientError

from cluster_auth.aws import cleanup_vpc
from cluster_auth.aws.vpc_cleanup import DEFAULT_SETTLE_SECONDS
from cluster_auth.banner import section_end, section_header
from cluster_auth.cli.common import add_output_flags, non_negative_int
from cluster_auth.env import get_env
from cluster_auth.logger import get_logger


def build_vpc_cleanup_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "vpc-cleanup",
        help="Remove orphaned ENIs and security groups after cluster destroy",
    )
    add_output_flags(p)

    p.add_argument("vpc_id", help="VPC that hosted the cluster")
    p.add_argument("cluster_name", help="Cluster name used in resource names/tags")
    p.add_argument(
        "--region",
        default=None,
        help="AWS region (default: AWS_REGION / AWS_DEFAULT_REGION / profile)",
    )
    p.add_argument(
        "--settle-seconds",
        type=non_negative_int,
        default=DEFAULT_SETTLE_SECONDS,
        help=f"Wait before cleanup starts (default: {DEFAULT_SETTLE_SECONDS})",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be deleted without deleting",
    )

    p.set_defaults(action="vpc-cleanup")


def handle_vpc_cleanup(args: argparse.Namespace) -> int:
    logger = get_logger("cluster_auth.vpc_cleanup")

    section_header(
        f"VPC Cleanup: {args.cluster_name}",
        [("VPC", args.vpc_id), ("Cluster", args.cluster_name)],
    )

    try:
        report = cleanup_vpc(
            args.vpc_id,
            args.cluster_name,
            region=args.region or get_env().aws_region,
            dry_run=args.dry_run,
            settle_seconds=args.settle_seconds,
        )
    except (BotoCoreError, ClientError) as e:
        logger.error("VPC cleanup failed: %s", e)
        return 1

    prefix = "Dry run" if report.dry_run else "VPC Cleanup"
    section_end(
        f"{prefix} complete: {len(report.deleted_enis)} ENI(s), "
        f"{len(report.deleted_sgs)} security group(s)"
        + (f", {len(report.skipped_in_use)} still in use" if report.skipped_in_use else "")
    )
    return 0
