# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
SQS Queue Permission custom resource (Custom::SQSQueuePermission).

Allows another AWS account to send messages to a queue by adding one statement
to the queue policy. Other statements in the policy are left untouched.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List

from ..checkpoint import QueuePermissionCheckpoint
from ..errors import CreateFailed, DeleteFailed, UpdateFailed
from ..helpers.aws_clients import AWS_ERRORS, client_error_code
from ..helpers.sqs_policy import (
    QueuePolicyError,
    get_queue_policy,
    queue_arn_from_url,
    set_queue_policy,
)
from ..models import CustomResourceResult
from ..properties import ResourceProperties
from .base import ResourceHandler

logger = logging.getLogger(__name__)

ACCOUNT_ID_PATTERN = re.compile(r"^\d{12}$")

QUEUE_NOT_FOUND_CODES = (
    "AWS.SimpleQueueService.NonExistentQueue",
    "QueueDoesNotExist",
)

# ValueError: queue URL that cannot be turned into an ARN
GRANT_ERRORS = AWS_ERRORS + (QueuePolicyError, ValueError)


@dataclass
class SqsQueuePermissionProperties(ResourceProperties):
    QueueUrl: str
    PrincipalAccountId: str

    def validate(self) -> List[str]:
        problems = []
        if not ACCOUNT_ID_PATTERN.match(self.PrincipalAccountId):
            problems.append(f"PrincipalAccountId must be a 12 digit account ID, got {self.PrincipalAccountId}")
        if not self.QueueUrl.startswith("https://"):
            problems.append(f"QueueUrl must be an https URL, got {self.QueueUrl}")
        return problems

    @property
    def statement_id(self) -> str:
        return f"SendMessageFrom{self.PrincipalAccountId}"


class SqsQueuePermissionHandler(ResourceHandler):
    """Grants sqs:SendMessage on a queue to a principal account."""

    RESOURCE_TYPE = "Custom::SQSQueuePermission"
    PROPERTIES = SqsQueuePermissionProperties

    def create(self, properties: SqsQueuePermissionProperties) -> CustomResourceResult:
        try:
            return self._grant(properties)
        except GRANT_ERRORS as e:
            raise CreateFailed(
                f"failed to grant {properties.PrincipalAccountId} access to queue",
                resource_type=self.RESOURCE_TYPE,
                resource_name=properties.QueueUrl,
                cause=e
            ) from e

    def update(self, physical_resource_id: str, properties: SqsQueuePermissionProperties) -> CustomResourceResult:
        # A changed queue or account yields a new ID; CloudFormation then deletes the old one
        try:
            result = self._grant(properties)
        except GRANT_ERRORS as e:
            raise UpdateFailed(
                f"failed to grant {properties.PrincipalAccountId} access to queue",
                resource_type=self.RESOURCE_TYPE,
                resource_name=properties.QueueUrl,
                cause=e,
                physical_resource_id=physical_resource_id
            ) from e
        if result.physical_resource_id != physical_resource_id:
            logger.info(
                "Queue permission replaced: old=%s, new=%s",
                physical_resource_id,
                result.physical_resource_id
            )
        return result

    def delete(self, physical_resource_id: str) -> CustomResourceResult:
        checkpoint = QueuePermissionCheckpoint.decode(physical_resource_id)
        if checkpoint is None:
            logger.warning("Invalid physical resource ID - skipping delete: %s", physical_resource_id)
            return CustomResourceResult(physical_resource_id=physical_resource_id)

        queue_url = checkpoint.queue_url
        try:
            policy = get_queue_policy(self.clients.sqs, queue_url)
            remaining = [
                statement for statement in policy.statements
                if statement.get("Sid") != checkpoint.statement_id
            ]
            if len(remaining) == len(policy.statements):
                logger.info(
                    "Queue policy statement has already been removed: queue_url=%s, sid=%s",
                    queue_url,
                    checkpoint.statement_id
                )
                return CustomResourceResult(physical_resource_id=physical_resource_id)

            policy.statements = remaining
            set_queue_policy(self.clients.sqs, queue_url, policy)
        except AWS_ERRORS as e:
            if client_error_code(e) in QUEUE_NOT_FOUND_CODES:
                logger.info("Queue has already been deleted: queue_url=%s", queue_url)
                return CustomResourceResult(physical_resource_id=physical_resource_id)
            raise DeleteFailed(
                f"failed to remove statement {checkpoint.statement_id} from queue policy",
                resource_type=self.RESOURCE_TYPE,
                resource_name=queue_url,
                cause=e,
                physical_resource_id=physical_resource_id
            ) from e
        except QueuePolicyError as e:
            raise DeleteFailed(
                f"failed to remove statement {checkpoint.statement_id} from queue policy",
                resource_type=self.RESOURCE_TYPE,
                resource_name=queue_url,
                cause=e,
                physical_resource_id=physical_resource_id
            ) from e

        logger.info("Removed queue policy statement: queue_url=%s, sid=%s", queue_url, checkpoint.statement_id)
        return CustomResourceResult(physical_resource_id=physical_resource_id)

    def _grant(self, properties: SqsQueuePermissionProperties) -> CustomResourceResult:
        """Add the statement for properties unless the policy already has it."""
        queue_url = properties.QueueUrl
        statement_id = properties.statement_id
        checkpoint = QueuePermissionCheckpoint(statement_id=statement_id, queue_url=queue_url)

        policy = get_queue_policy(self.clients.sqs, queue_url)
        if statement_id in policy.statement_ids():
            logger.info("Queue policy statement already present: queue_url=%s, sid=%s", queue_url, statement_id)
            return CustomResourceResult(physical_resource_id=checkpoint.encode())

        policy.statements.append(self._build_statement(properties))
        set_queue_policy(self.clients.sqs, queue_url, policy)
        logger.info("Added queue policy statement: queue_url=%s, sid=%s", queue_url, statement_id)
        return CustomResourceResult(physical_resource_id=checkpoint.encode())

    def _build_statement(self, properties: SqsQueuePermissionProperties) -> Dict[str, Any]:
        partition = self.clients.partition
        return {
            "Sid": properties.statement_id,
            "Effect": "Allow",
            "Principal": {"AWS": f"arn:{partition}:iam::{properties.PrincipalAccountId}:root"},
            "Action": "sqs:SendMessage",
            "Resource": queue_arn_from_url(properties.QueueUrl, partition, self.clients.region),
        }
