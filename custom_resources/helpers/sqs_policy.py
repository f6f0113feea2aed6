# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
SQS Queue Policy Helper

Reads and writes the Policy attribute of an SQS queue. Writes replace the whole
document; callers merge statements before writing so that statements owned by
other actors are preserved.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from .aws_clients import AWS_ERRORS, client_error_code

logger = logging.getLogger(__name__)

POLICY_ATTRIBUTE_NAME = "Policy"
DEFAULT_POLICY_VERSION = "2008-10-17"


class QueuePolicyError(Exception):
    """Raised when a queue policy document cannot be parsed or serialized."""

    def __init__(self, message: str, queue_url: str = "", cause: Optional[Exception] = None):
        super().__init__(message)
        self.queue_url = queue_url
        self.cause = cause


@dataclass
class QueuePolicy:
    """
    Policy document of an SQS queue.

    Statements are kept as plain mappings so statements written by others
    round-trip untouched, whatever keys they use.
    """

    version: str = DEFAULT_POLICY_VERSION
    statements: List[Dict[str, Any]] = field(default_factory=list)
    policy_id: Optional[str] = None

    def statement_ids(self) -> List[str]:
        return [statement.get("Sid", "") for statement in self.statements]

    def to_json(self) -> str:
        document: Dict[str, Any] = {"Version": self.version}
        if self.policy_id:
            document["Id"] = self.policy_id
        document["Statement"] = self.statements
        return json.dumps(document)

    @classmethod
    def from_json(cls, value: str) -> "QueuePolicy":
        document = json.loads(value)
        statements = document.get("Statement", [])
        # A single statement may be written as an object instead of a list
        if isinstance(statements, dict):
            statements = [statements]
        return cls(
            version=document.get("Version", DEFAULT_POLICY_VERSION),
            statements=list(statements),
            policy_id=document.get("Id"),
        )


def get_queue_policy(sqs_client: Any, queue_url: str) -> QueuePolicy:
    """
    Fetch the policy of a queue.

    A queue without a policy yields an empty default document rather than an
    error.

    Raises:
        ClientError, BotoCoreError: If the attribute cannot be read
        QueuePolicyError: If the stored policy is not valid JSON
    """
    logger.info("Reading queue policy: queue_url=%s", queue_url)
    try:
        response = sqs_client.get_queue_attributes(
            QueueUrl=queue_url,
            AttributeNames=[POLICY_ATTRIBUTE_NAME]
        )
    except AWS_ERRORS as e:
        logger.error(
            "Failed to get queue attributes: queue_url=%s, error_code=%s",
            queue_url,
            client_error_code(e)
        )
        raise

    policy_attribute = response.get("Attributes", {}).get(POLICY_ATTRIBUTE_NAME)
    if not policy_attribute:
        logger.info("Queue has no policy, using empty default: queue_url=%s", queue_url)
        return QueuePolicy()

    try:
        return QueuePolicy.from_json(policy_attribute)
    except (ValueError, AttributeError) as e:
        raise QueuePolicyError(
            f"Failed to unmarshal queue policy for {queue_url}",
            queue_url=queue_url,
            cause=e
        ) from e


def set_queue_policy(sqs_client: Any, queue_url: str, policy: QueuePolicy) -> None:
    """
    Replace the policy of a queue.

    An empty statement list clears the attribute instead of writing a document
    with no statements.

    Raises:
        ClientError, BotoCoreError: If the attribute cannot be written
    """
    policy_attribute = ""
    if policy.statements:
        policy_attribute = policy.to_json()

    logger.info(
        "Writing queue policy: queue_url=%s, statements=%d",
        queue_url,
        len(policy.statements)
    )
    try:
        sqs_client.set_queue_attributes(
            QueueUrl=queue_url,
            Attributes={POLICY_ATTRIBUTE_NAME: policy_attribute}
        )
    except AWS_ERRORS as e:
        logger.error(
            "Failed to set queue attributes: queue_url=%s, error_code=%s",
            queue_url,
            client_error_code(e)
        )
        raise


def queue_arn_from_url(queue_url: str, partition: str, default_region: Optional[str] = None) -> str:
    """
    Build the ARN of a queue from its URL.

    "https://sqs.us-east-1.amazonaws.com/123456789012/alerts"
        => "arn:aws:sqs:us-east-1:123456789012:alerts"

    Raises:
        ValueError: If the URL does not contain an account ID and queue name
    """
    parsed = urlparse(queue_url)
    path_parts = [part for part in parsed.path.split("/") if part]
    if len(path_parts) != 2:
        raise ValueError(f"Not an SQS queue URL: {queue_url}")
    account_id, queue_name = path_parts

    region = default_region
    host_parts = (parsed.hostname or "").split(".")
    if len(host_parts) > 2 and host_parts[0] == "sqs":
        region = host_parts[1]
    if not region:
        raise ValueError(f"Cannot determine region of queue URL: {queue_url}")

    return f"arn:{partition}:sqs:{region}:{account_id}:{queue_name}"
