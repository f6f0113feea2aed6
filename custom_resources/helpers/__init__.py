# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Helper modules for the custom resource Lambda.

This package contains:
- aws_clients: shared boto3 session and service clients
- sqs_policy: read/write access to SQS queue policies
"""

from .aws_clients import AWS_ERRORS, AwsClients, client_error_code
from .sqs_policy import QueuePolicy, QueuePolicyError, get_queue_policy, set_queue_policy

__all__ = [
    "AWS_ERRORS",
    "AwsClients",
    "client_error_code",
    "QueuePolicy",
    "QueuePolicyError",
    "get_queue_policy",
    "set_queue_policy",
]
