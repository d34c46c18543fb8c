"""
vpc_cleanup.py

Remove AWS network leftovers of a destroyed ROSA cluster so that the VPC
and its subnets can be deleted.

Order:
1. Available (unattached) ENIs whose description names the cluster.
2. Cluster-scoped security groups: Name tag `*<cluster>*` or group name
   `<cluster>-*`.
3. Any other non-default security group in the VPC with no ENI attached.
   The uninstaller strips identifying tags from some groups during
   teardown, and these block VPC deletion.

A security group is only ever deleted when no ENI references it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

import boto3
from botocore.exceptions import ClientError

from cluster_auth.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SETTLE_SECONDS = 120
PASS_ATTEMPTS = 3
PASS_WAIT_SECONDS = 10


@dataclass
class CleanupReport:
    vpc_id: str
    cluster_name: str
    dry_run: bool = False
    deleted_enis: List[str] = field(default_factory=list)
    deleted_cluster_sgs: List[str] = field(default_factory=list)
    deleted_orphan_sgs: List[str] = field(default_factory=list)
    skipped_in_use: Dict[str, str] = field(default_factory=dict)

    @property
    def deleted_sgs(self) -> List[str]:
        return self.deleted_cluster_sgs + self.deleted_orphan_sgs


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


class VpcCleaner:
    def __init__(
        self,
        ec2: Any,
        vpc_id: str,
        cluster_name: str,
        *,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
        pass_wait: float = PASS_WAIT_SECONDS,
    ) -> None:
        self.ec2 = ec2
        self.vpc_id = vpc_id
        self.cluster_name = cluster_name
        self.dry_run = dry_run
        self._sleep = sleep
        self._pass_wait = pass_wait
        self.report = CleanupReport(vpc_id, cluster_name, dry_run=dry_run)

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    def _paginate(self, operation: str, key: str, **kwargs) -> List[Dict[str, Any]]:
        try:
            paginator = self.ec2.get_paginator(operation)
            items: List[Dict[str, Any]] = []
            for page in paginator.paginate(**kwargs):
                items.extend(page.get(key, []))
            return items
        except ClientError as e:
            logger.warning("%s failed (%s): %s", operation, _error_code(e), e)
            return []

    def _vpc_filter(self) -> Dict[str, Any]:
        return {"Name": "vpc-id", "Values": [self.vpc_id]}

    def orphaned_enis(self) -> List[str]:
        enis = self._paginate(
            "describe_network_interfaces",
            "NetworkInterfaces",
            Filters=[self._vpc_filter(), {"Name": "status", "Values": ["available"]}],
        )
        return [
            eni["NetworkInterfaceId"]
            for eni in enis
            if self.cluster_name in (eni.get("Description") or "")
        ]

    def security_groups(self, *extra_filters: Dict[str, Any]) -> Dict[str, str]:
        """GroupId -> GroupName for non-default groups in the VPC."""
        groups = self._paginate(
            "describe_security_groups",
            "SecurityGroups",
            Filters=[self._vpc_filter(), *extra_filters],
        )
        return {
            sg["GroupId"]: sg.get("GroupName", "")
            for sg in groups
            if sg.get("GroupName") != "default"
        }

    def cluster_security_groups(self) -> Dict[str, str]:
        tagged = self.security_groups(
            {"Name": "tag:Name", "Values": [f"*{self.cluster_name}*"]}
        )
        named = self.security_groups(
            {"Name": "group-name", "Values": [f"{self.cluster_name}-*"]}
        )
        return {**tagged, **named}

    def attached_eni(self, group_id: str) -> Optional[str]:
        """First ENI still using the group, or None when it is unused."""
        try:
            resp = self.ec2.describe_network_interfaces(
                Filters=[{"Name": "group-id", "Values": [group_id]}]
            )
        except ClientError as e:
            logger.warning(
                "Could not check ENI attachments for %s (%s)", group_id, _error_code(e)
            )
            return None
        enis = resp.get("NetworkInterfaces", [])
        return enis[0]["NetworkInterfaceId"] if enis else None

    # -----------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------

    @property
    def _verb(self) -> str:
        return "Would delete" if self.dry_run else "Deleting"

    def _delete_eni(self, eni_id: str) -> bool:
        logger.info("%s ENI: %s", self._verb, eni_id)
        if self.dry_run:
            return True
        try:
            self.ec2.delete_network_interface(NetworkInterfaceId=eni_id)
            return True
        except ClientError as e:
            logger.warning("Could not delete ENI %s (%s)", eni_id, _error_code(e))
            return False

    def _delete_security_group(self, group_id: str) -> bool:
        if self.dry_run:
            return True
        try:
            self.ec2.delete_security_group(GroupId=group_id)
            return True
        except ClientError as e:
            logger.warning("Could not delete SG %s (%s)", group_id, _error_code(e))
            return False

    # -----------------------------------------------------------------
    # Passes
    # -----------------------------------------------------------------

    def cleanup_enis(self) -> List[str]:
        logger.info("Checking for orphaned ENIs (cluster: %s)...", self.cluster_name)
        for attempt in range(1, PASS_ATTEMPTS + 1):
            enis = [e for e in self.orphaned_enis() if e not in self.report.deleted_enis]
            if not enis:
                logger.info("No orphaned ENIs found for cluster '%s'.", self.cluster_name)
                break

            logger.info("Found orphaned ENIs (attempt %d): %s", attempt, " ".join(enis))
            for eni_id in enis:
                if self._delete_eni(eni_id):
                    self.report.deleted_enis.append(eni_id)
            self._sleep(self._pass_wait)
        return self.report.deleted_enis

    def _delete_if_unused(self, group_id: str, name: str) -> bool:
        in_use = self.attached_eni(group_id)
        if in_use:
            logger.info("SG %s still in use by ENI %s, skipping.", group_id, in_use)
            self.report.skipped_in_use[group_id] = in_use
            return False

        logger.info(
            "%s unused SG: %s (name: %s)", self._verb, group_id, name or "unknown"
        )
        if not self._delete_security_group(group_id):
            return False
        self.report.skipped_in_use.pop(group_id, None)
        return True

    def cleanup_cluster_security_groups(self) -> List[str]:
        logger.info(
            "Checking for orphaned security groups (cluster: %s)...", self.cluster_name
        )
        deleted = self.report.deleted_cluster_sgs
        for attempt in range(1, PASS_ATTEMPTS + 1):
            groups = {
                gid: name
                for gid, name in self.cluster_security_groups().items()
                if gid not in deleted
            }
            if not groups:
                logger.info("No cluster-scoped security groups found.")
                break

            logger.info(
                "Found cluster-scoped security groups (attempt %d): %s",
                attempt,
                " ".join(sorted(groups)),
            )
            for gid in sorted(groups):
                if self._delete_if_unused(gid, groups[gid]):
                    deleted.append(gid)
            self._sleep(self._pass_wait)
        return deleted

    def cleanup_orphan_security_groups(self, skip: Iterable[str] = ()) -> List[str]:
        logger.info("Checking for untagged orphan security groups...")
        skipped: Set[str] = set(skip)
        groups = self.security_groups()
        if not groups:
            logger.info("No non-default security groups remain in VPC.")
            return self.report.deleted_orphan_sgs

        for gid in sorted(groups):
            if gid in skipped:
                continue
            if self._delete_if_unused(gid, groups[gid]):
                self.report.deleted_orphan_sgs.append(gid)

        count = len(self.report.deleted_orphan_sgs)
        if count:
            logger.info("Removed %d orphan security group(s).", count)
        else:
            logger.info("No untagged orphan security groups found.")
        return self.report.deleted_orphan_sgs

    def run(self, settle_seconds: float = DEFAULT_SETTLE_SECONDS) -> CleanupReport:
        if settle_seconds > 0:
            logger.info(
                "Waiting %ds for AWS to clean up cluster resources...", settle_seconds
            )
            self._sleep(settle_seconds)

        self.cleanup_enis()
        cluster_sgs = self.cleanup_cluster_security_groups()
        self.cleanup_orphan_security_groups(skip=cluster_sgs)
        return self.report


def cleanup_vpc(
    vpc_id: str,
    cluster_name: str,
    *,
    region: Optional[str] = None,
    dry_run: bool = False,
    settle_seconds: float = DEFAULT_SETTLE_SECONDS,
    ec2: Any = None,
    sleep: Callable[[float], None] = time.sleep,
) -> CleanupReport:
    if ec2 is None:
        ec2 = boto3.client("ec2", region_name=region)

    logger.info(
        "Starting VPC cleanup",
        extra={"vpc_id": vpc_id, "cluster_name": cluster_name, "dry_run": dry_run},
    )
    cleaner = VpcCleaner(ec2, vpc_id, cluster_name, dry_run=dry_run, sleep=sleep)
    return cleaner.run(settle_seconds=settle_seconds)
