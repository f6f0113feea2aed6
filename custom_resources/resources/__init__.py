# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Custom resource handlers, one module per resource type.
"""

from .base import ResourceHandler
from .ecs_cluster import EcsClusterHandler
from .lambda_metric_filters import LambdaMetricFiltersHandler
from .sqs_queue_permission import SqsQueuePermissionHandler

ALL_HANDLERS = (
    EcsClusterHandler,
    LambdaMetricFiltersHandler,
    SqsQueuePermissionHandler,
)

__all__ = [
    "ResourceHandler",
    "EcsClusterHandler",
    "LambdaMetricFiltersHandler",
    "SqsQueuePermissionHandler",
    "ALL_HANDLERS",
]
