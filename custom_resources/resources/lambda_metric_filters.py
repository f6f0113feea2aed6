# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Lambda Metric Filters custom resource (Custom::LambdaMetricFilters).

Adds three metric filters to a Lambda function's CloudWatch log group:
- <function>-memory: max memory used, parsed from the REPORT line
- <function>-warns:  count of logged warnings
- <function>-errors: count of logged errors

The warning and error patterns depend on the function's runtime log format.

Filters are created one at a time and the suffix of each successful filter is
appended to the physical resource ID. If a later filter fails, CloudFormation
rolls back and requests deletion of the resource; the ID then names exactly
the filters that exist.
"""

import logging
from dataclasses import dataclass
from typing import List

from ..checkpoint import MetricFiltersCheckpoint, lambda_name_from_log_group, metric_filter_names
from ..errors import CreateFailed, DeleteFailed
from ..helpers.aws_clients import AWS_ERRORS, client_error_code
from ..models import CustomResourceResult
from ..properties import ResourceProperties
from .base import ResourceHandler

logger = logging.getLogger(__name__)

METRIC_NAMESPACE = "Panther"

MEMORY_FILTER = '[ report_label="REPORT", ..., label="Used:", max_memory_used_value, unit="MB" ]'
WARN_FILTERS = {
    "Go": '{ $.level = "warn" }',
    "Python": '[ level="[WARN]" ]',
}
ERROR_FILTERS = {
    "Go": '{ $.level = "error" }',
    "Python": '[ level="[ERROR]" ]',
}

SUPPORTED_RUNTIMES = ("Go", "Python")


@dataclass
class LambdaMetricFiltersProperties(ResourceProperties):
    LambdaRuntime: str
    LogGroupName: str

    def validate(self) -> List[str]:
        problems = []
        if self.LambdaRuntime not in SUPPORTED_RUNTIMES:
            problems.append(
                f"LambdaRuntime must be one of {', '.join(SUPPORTED_RUNTIMES)}, got {self.LambdaRuntime}"
            )
        if ":" in self.LogGroupName:
            problems.append(f"LogGroupName must not contain ':', got {self.LogGroupName}")
        return problems


class LambdaMetricFiltersHandler(ResourceHandler):
    """Creates the memory, warning and error metric filters for one Lambda function."""

    RESOURCE_TYPE = "Custom::LambdaMetricFilters"
    PROPERTIES = LambdaMetricFiltersProperties

    def create(self, properties: LambdaMetricFiltersProperties) -> CustomResourceResult:
        log_group_name = properties.LogGroupName
        lambda_name = lambda_name_from_log_group(log_group_name)
        steps = [
            ("memory", MEMORY_FILTER, "$max_memory_used_value"),
            ("warns", WARN_FILTERS[properties.LambdaRuntime], "1"),
            ("errors", ERROR_FILTERS[properties.LambdaRuntime], "1"),
        ]

        checkpoint = MetricFiltersCheckpoint(log_group_name)
        for suffix, filter_pattern, metric_value in steps:
            filter_name = f"{lambda_name}-{suffix}"
            try:
                self._put_metric_filter(log_group_name, filter_pattern, filter_name, metric_value)
            except AWS_ERRORS as e:
                logger.error(
                    "Failed to put metric filter: log_group=%s, filter=%s, error_code=%s, completed=%s",
                    log_group_name,
                    filter_name,
                    client_error_code(e),
                    list(checkpoint.suffixes)
                )
                raise CreateFailed(
                    f"failed to put {filter_name} metric filter",
                    resource_type=self.RESOURCE_TYPE,
                    resource_name=log_group_name,
                    cause=e,
                    physical_resource_id=checkpoint.encode()
                ) from e
            checkpoint = checkpoint.append(suffix)

        return CustomResourceResult(physical_resource_id=checkpoint.encode())

    def update(self, physical_resource_id: str, properties: LambdaMetricFiltersProperties) -> CustomResourceResult:
        logger.info("Update is a no-op for metric filters: physical_resource_id=%s", physical_resource_id)
        return CustomResourceResult(physical_resource_id=physical_resource_id)

    def delete(self, physical_resource_id: str) -> CustomResourceResult:
        checkpoint = MetricFiltersCheckpoint.decode(physical_resource_id)
        if checkpoint is None:
            # Create failed before any filter was written
            logger.warning("Invalid physical resource ID - skipping delete: %s", physical_resource_id)
            return CustomResourceResult(physical_resource_id=physical_resource_id)

        log_group_name = checkpoint.log_group_name
        for filter_name in metric_filter_names(checkpoint):
            logger.info("Deleting metric filter: log_group=%s, filter=%s", log_group_name, filter_name)
            try:
                self.clients.logs.delete_metric_filter(
                    logGroupName=log_group_name,
                    filterName=filter_name
                )
            except AWS_ERRORS as e:
                error_code = client_error_code(e)
                if error_code != "ResourceNotFoundException":
                    logger.error(
                        "Failed to delete metric filter: log_group=%s, filter=%s, error_code=%s",
                        log_group_name,
                        filter_name,
                        error_code
                    )
                    raise DeleteFailed(
                        f"failed to delete {log_group_name} metric filter {filter_name}",
                        resource_type=self.RESOURCE_TYPE,
                        resource_name=log_group_name,
                        cause=e,
                        physical_resource_id=physical_resource_id
                    ) from e
                logger.info("Metric filter has already been deleted: filter=%s", filter_name)

        return CustomResourceResult(physical_resource_id=physical_resource_id)

    def _put_metric_filter(
        self,
        log_group_name: str,
        filter_pattern: str,
        metric_name: str,
        metric_value: str
    ) -> None:
        logger.info("Creating metric filter: log_group=%s, metric_name=%s", log_group_name, metric_name)
        self.clients.logs.put_metric_filter(
            logGroupName=log_group_name,
            filterName=metric_name,
            filterPattern=filter_pattern,
            metricTransformations=[
                {
                    "metricName": metric_name,
                    "metricNamespace": METRIC_NAMESPACE,
                    "metricValue": metric_value,
                    "defaultValue": 0.0,
                }
            ]
        )
