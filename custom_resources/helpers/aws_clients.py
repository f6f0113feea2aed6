# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
AWS Client Helper

Holds the boto3 session and service clients shared by every resource handler.
One AwsClients instance is created per Lambda container and reused across
invocations; handlers only read from it.
"""

import logging
import os
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

DEFAULT_PARTITION = "aws"

# Service errors plus transport/credential failures raised inside botocore
AWS_ERRORS = (ClientError, BotoCoreError)


def client_error_code(error: Exception) -> str:
    """
    Extract the AWS error code from a ClientError.

    Errors raised before a response arrived (BotoCoreError and its subclasses)
    have no code; their class name is returned instead.
    """
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "Unknown")
    return type(error).__name__


class AwsClients:
    """
    Lazily created boto3 clients plus the region, account and partition used
    to build resource ARNs.

    Attributes:
        session: boto3 session all clients are created from
        region: AWS region for clients and ARNs
        partition: AWS partition for ARNs
    """

    def __init__(
        self,
        session: Optional[boto3.Session] = None,
        region: Optional[str] = None,
        account_id: Optional[str] = None,
        partition: Optional[str] = None,
    ) -> None:
        """
        Initialize the client holder.

        Args:
            session: boto3 session. A new one is created if not provided.
            region: AWS region. Falls back to AWS_REGION, then the session region.
            account_id: AWS account ID. Falls back to AWS_ACCOUNT_ID, then STS.
            partition: AWS partition. Falls back to AWS_PARTITION, then "aws".
        """
        self.session = session or boto3.Session()
        self.region = region or os.getenv("AWS_REGION") or self.session.region_name
        self.partition = partition or os.getenv("AWS_PARTITION") or DEFAULT_PARTITION
        self._account_id = account_id or os.getenv("AWS_ACCOUNT_ID")
        self._config = Config(
            retries={
                "max_attempts": 3,
                "mode": "standard"
            },
            connect_timeout=5,
            read_timeout=30
        )
        self._clients = {}

        logger.info(
            "Initialized AWS clients: region=%s, partition=%s, account_id=%s",
            self.region,
            self.partition,
            self._account_id or "<from STS>"
        )

    def client(self, service_name: str) -> Any:
        """Get or create the client for service_name."""
        if service_name not in self._clients:
            self._clients[service_name] = self.session.client(
                service_name,
                region_name=self.region,
                config=self._config
            )
            logger.info("Created new %s client", service_name)
        return self._clients[service_name]

    @property
    def account_id(self) -> str:
        """AWS account ID, resolved through STS the first time it is needed."""
        if not self._account_id:
            identity = self.client("sts").get_caller_identity()
            self._account_id = identity["Account"]
            logger.info("Resolved account ID from STS: %s", self._account_id)
        return self._account_id

    @property
    def ecs(self) -> Any:
        return self.client("ecs")

    @property
    def logs(self) -> Any:
        return self.client("logs")

    @property
    def sqs(self) -> Any:
        return self.client("sqs")
