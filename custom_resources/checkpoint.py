# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Checkpoint codec for physical resource IDs.

A custom resource's PhysicalResourceId is handed back to us on every later
Update and Delete. Handlers whose Create has irreversible sub-steps store which
steps completed inside that ID, so that the Delete CloudFormation issues after
a failed Create removes exactly what exists.

Formats:
- Cluster:          arn:<partition>:ecs:<region>:<account>:cluster/<name>
- Metric filters:   custom:metric-filters:<logGroupName>:<suffix>[/<suffix>...]
- Queue permission: custom:queue-permission:<statementId>:<queueUrl>

decode() never raises. An ID of the wrong shape (for instance the log stream
name CloudFormation falls back to when Create failed before recording
anything) decodes to None, which callers treat as "nothing to clean up".
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

METRIC_FILTERS_PREFIX = "custom:metric-filters"
QUEUE_PERMISSION_PREFIX = "custom:queue-permission"

METRIC_FILTER_SUFFIXES = ("memory", "warns", "errors")


@dataclass(frozen=True)
class ClusterCheckpoint:
    """ECS cluster identified by its ARN."""

    partition: str
    region: str
    account_id: str
    cluster_name: str

    RESOURCE_PREFIX = "cluster/"

    def encode(self) -> str:
        return (
            f"arn:{self.partition}:ecs:{self.region}:{self.account_id}:"
            f"{self.RESOURCE_PREFIX}{self.cluster_name}"
        )

    @classmethod
    def decode(cls, physical_resource_id: str) -> Optional["ClusterCheckpoint"]:
        parts = (physical_resource_id or "").split(":", 5)
        if len(parts) != 6 or parts[0] != "arn" or parts[2] != "ecs":
            return None
        resource = parts[5]
        if not resource.startswith(cls.RESOURCE_PREFIX):
            return None
        cluster_name = resource[len(cls.RESOURCE_PREFIX):]
        if not cluster_name:
            return None
        return cls(
            partition=parts[1],
            region=parts[3],
            account_id=parts[4],
            cluster_name=cluster_name,
        )


@dataclass(frozen=True)
class MetricFiltersCheckpoint:
    """Log group plus the suffixes of the metric filters created on it, in creation order."""

    log_group_name: str
    suffixes: Tuple[str, ...] = field(default_factory=tuple)

    def append(self, suffix: str) -> "MetricFiltersCheckpoint":
        """Return a new checkpoint that also records suffix."""
        return MetricFiltersCheckpoint(self.log_group_name, self.suffixes + (suffix,))

    def encode(self) -> str:
        """
        Encode as a physical resource ID.

        With no completed steps there is nothing to name, so the empty string
        is returned and the Lambda log stream name is reported instead.
        """
        if not self.suffixes:
            return ""
        return f"{METRIC_FILTERS_PREFIX}:{self.log_group_name}:{'/'.join(self.suffixes)}"

    @classmethod
    def decode(cls, physical_resource_id: str) -> Optional["MetricFiltersCheckpoint"]:
        # Log group names cannot contain ':', so a well-formed ID has exactly 4 fields
        parts = (physical_resource_id or "").split(":")
        if len(parts) != 4 or f"{parts[0]}:{parts[1]}" != METRIC_FILTERS_PREFIX:
            return None
        log_group_name = parts[2]
        suffixes = tuple(suffix for suffix in parts[3].split("/") if suffix)
        if not log_group_name or not suffixes:
            return None
        unknown = [suffix for suffix in suffixes if suffix not in METRIC_FILTER_SUFFIXES]
        if unknown:
            logger.warning("Unknown metric filter suffixes in %s: %s", physical_resource_id, unknown)
            return None
        return cls(log_group_name=log_group_name, suffixes=suffixes)


@dataclass(frozen=True)
class QueuePermissionCheckpoint:
    """A policy statement written to one SQS queue."""

    statement_id: str
    queue_url: str

    def encode(self) -> str:
        return f"{QUEUE_PERMISSION_PREFIX}:{self.statement_id}:{self.queue_url}"

    @classmethod
    def decode(cls, physical_resource_id: str) -> Optional["QueuePermissionCheckpoint"]:
        # The queue URL contains ':' itself, so split only up to it
        parts = (physical_resource_id or "").split(":", 3)
        if len(parts) != 4 or f"{parts[0]}:{parts[1]}" != QUEUE_PERMISSION_PREFIX:
            return None
        statement_id, queue_url = parts[2], parts[3]
        if not statement_id or not queue_url:
            return None
        return cls(statement_id=statement_id, queue_url=queue_url)


def lambda_name_from_log_group(log_group_name: str) -> str:
    """
    Function name used as the metric filter name prefix.

    "/aws/lambda/panther-alert-delivery" => "panther-alert-delivery"
    """
    return log_group_name.split("/")[-1]


def metric_filter_names(checkpoint: MetricFiltersCheckpoint) -> List[str]:
    """Filter names recorded by a checkpoint, in creation order."""
    prefix = lambda_name_from_log_group(checkpoint.log_group_name)
    return [f"{prefix}-{suffix}" for suffix in checkpoint.suffixes]
