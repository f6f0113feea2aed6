# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
ECS Cluster custom resource (Custom::ECS-Cluster).

The physical resource ID is the cluster ARN, rebuilt from configuration after
CreateCluster succeeds so that Delete can always recover the cluster name.
"""

import logging
from dataclasses import dataclass

from ..checkpoint import ClusterCheckpoint
from ..errors import CreateFailed, DeleteFailed
from ..helpers.aws_clients import AWS_ERRORS, client_error_code
from ..models import CustomResourceResult
from ..properties import ResourceProperties
from .base import ResourceHandler

logger = logging.getLogger(__name__)

CLUSTER_TAGS = [
    {"key": "Application", "value": "Panther"},
]


@dataclass
class EcsClusterProperties(ResourceProperties):
    ClusterName: str


class EcsClusterHandler(ResourceHandler):
    """Creates and deletes a tagged ECS cluster."""

    RESOURCE_TYPE = "Custom::ECS-Cluster"
    PROPERTIES = EcsClusterProperties

    def create(self, properties: EcsClusterProperties) -> CustomResourceResult:
        name = properties.ClusterName
        logger.info("Creating ECS cluster: name=%s", name)
        try:
            # Resolve the ARN first so a created cluster always gets an ID Delete can parse
            checkpoint = ClusterCheckpoint(
                partition=self.clients.partition,
                region=self.clients.region,
                account_id=self.clients.account_id,
                cluster_name=name,
            )
            self.clients.ecs.create_cluster(clusterName=name, tags=CLUSTER_TAGS)
        except AWS_ERRORS as e:
            logger.error(
                "Failed to create ECS cluster: name=%s, error_code=%s",
                name,
                client_error_code(e)
            )
            raise CreateFailed(
                f"failed to create ECS cluster {name}",
                resource_type=self.RESOURCE_TYPE,
                resource_name=name,
                cause=e
            ) from e

        physical_resource_id = checkpoint.encode()
        logger.info("ECS cluster created: arn=%s", physical_resource_id)
        return CustomResourceResult(physical_resource_id=physical_resource_id)

    def update(self, physical_resource_id: str, properties: EcsClusterProperties) -> CustomResourceResult:
        # Property changes that need a new cluster are handled by CloudFormation as replacement
        logger.info("Update is a no-op for ECS clusters: physical_resource_id=%s", physical_resource_id)
        return CustomResourceResult(physical_resource_id=physical_resource_id)

    def delete(self, physical_resource_id: str) -> CustomResourceResult:
        checkpoint = ClusterCheckpoint.decode(physical_resource_id)
        if checkpoint is None:
            # Create failed before the cluster existed
            logger.warning(
                "Physical resource ID is not an ECS cluster ARN - skipping delete: %s",
                physical_resource_id
            )
            return CustomResourceResult(physical_resource_id=physical_resource_id)

        name = checkpoint.cluster_name
        logger.info("Deleting ECS cluster: name=%s", name)
        try:
            self.clients.ecs.delete_cluster(cluster=name)
        except AWS_ERRORS as e:
            error_code = client_error_code(e)
            if error_code != "ClusterNotFoundException":
                logger.error("Failed to delete ECS cluster: name=%s, error_code=%s", name, error_code)
                raise DeleteFailed(
                    f"failed to delete ECS cluster {name}",
                    resource_type=self.RESOURCE_TYPE,
                    resource_name=name,
                    cause=e,
                    physical_resource_id=physical_resource_id
                ) from e
            logger.info("ECS cluster has already been deleted: name=%s", name)

        return CustomResourceResult(physical_resource_id=physical_resource_id)
