# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Custom Resource Lambda Handler

This Lambda function handles CloudFormation custom resource events for
resources CloudFormation cannot express natively:
- Custom::ECS-Cluster: a tagged ECS cluster
- Custom::LambdaMetricFilters: memory/warning/error metric filters on a Lambda log group
- Custom::SQSQueuePermission: a cross-account SendMessage statement on a queue policy

Each event is reconciled synchronously and the outcome is reported to
CloudFormation through the pre-signed ResponseURL.
"""

import json
import logging
import os
import urllib.error
import urllib.request
from typing import Any, Dict, Optional

from .helpers.aws_clients import AwsClients
from .models import CustomResourceEvent, CustomResourceResult
from .reconciler import Reconciler

# Environment Variables
LOGGING_LEVEL = os.getenv("LOGGING_LEVEL", "INFO")

logging.basicConfig(
    level=LOGGING_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(funcName)s() - %(message)s",
    force=True
)
logger = logging.getLogger(__name__)

# Suppress noisy third-party library debug logs
for noisy_logger in ("botocore", "boto3", "urllib3"):
    logging.getLogger(noisy_logger).setLevel(logging.WARNING)

# CloudFormation response status constants
SUCCESS = "SUCCESS"
FAILED = "FAILED"

# Global reconciler for Lambda warm start optimization
_reconciler: Optional[Reconciler] = None


def get_reconciler() -> Reconciler:
    """
    Get or create the reconciler shared across Lambda invocations.

    The boto3 session and clients it holds are created once per container.
    """
    global _reconciler
    if _reconciler is None:
        _reconciler = Reconciler(AwsClients())
        logger.info(
            "Created reconciler for resource types: %s",
            ", ".join(_reconciler.registry.resource_types())
        )
    return _reconciler


def send_cfn_response(
    event: CustomResourceEvent,
    context: Any,
    status: str,
    data: Optional[Dict[str, Any]] = None,
    physical_resource_id: Optional[str] = None,
    reason: Optional[str] = None
) -> None:
    """
    Send response to CloudFormation via the pre-signed S3 URL.

    Args:
        event: Custom resource event containing ResponseURL
        context: Lambda execution context
        status: Response status (SUCCESS or FAILED)
        data: Optional response data dictionary
        physical_resource_id: Physical resource identifier for CloudFormation.
            Falls back to the log stream name when empty.
        reason: Optional reason string for failures
    """
    if not event.response_url:
        logger.error("No ResponseURL found in event - cannot send response to CloudFormation")
        return

    response_body = {
        "Status": status,
        "Reason": reason or f"See CloudWatch Log Stream: {context.log_stream_name}",
        "PhysicalResourceId": physical_resource_id or context.log_stream_name,
        "StackId": event.stack_id,
        "RequestId": event.request_id,
        "LogicalResourceId": event.logical_resource_id,
        "Data": data or {}
    }

    json_body = json.dumps(response_body, default=str).encode("utf-8")

    logger.info(
        "Sending CloudFormation response: status=%s, physical_resource_id=%s",
        status,
        response_body["PhysicalResourceId"]
    )
    logger.debug("Response body: %s", json.dumps(response_body, default=str, indent=2))

    try:
        request = urllib.request.Request(
            event.response_url,
            data=json_body,
            headers={
                "Content-Type": "",
                "Content-Length": str(len(json_body))
            },
            method="PUT"
        )

        with urllib.request.urlopen(request, timeout=30) as response:
            logger.info(
                "CloudFormation response sent successfully: status_code=%d",
                response.status
            )

    except urllib.error.URLError as e:
        logger.error("Failed to send CloudFormation response: %s", str(e))
    except Exception as e:
        logger.exception("Unexpected error sending CloudFormation response: %s", str(e))


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for CloudFormation custom resources.

    Args:
        event: CloudFormation custom resource event
        context: Lambda execution context

    Returns:
        Dict containing the operation result (for direct Lambda invocation testing)
    """
    logger.info("Received CloudFormation custom resource event")
    logger.info("Event: %s", json.dumps(event, default=str, indent=2))

    cfn_event = CustomResourceEvent.from_dict(event)

    try:
        result = get_reconciler().handle(cfn_event)
    except Exception as e:
        # Always answer CloudFormation, or the stack waits for the full timeout
        logger.exception(
            "Unexpected error during %s %s: %s",
            cfn_event.resource_type,
            cfn_event.request_type,
            str(e)
        )
        result = CustomResourceResult(physical_resource_id=cfn_event.physical_resource_id)
        status = FAILED
        reason = f"Unexpected error: {str(e)}"
        data = {
            "Error": str(e),
            "ErrorType": type(e).__name__
        }
    else:
        if result.success:
            status = SUCCESS
            reason = None
            data = result.outputs
        else:
            status = FAILED
            reason = str(result.error)
            data = result.error.to_dict()

    send_cfn_response(
        event=cfn_event,
        context=context,
        status=status,
        data=data,
        physical_resource_id=result.physical_resource_id,
        reason=reason
    )

    return {
        "Status": status,
        "PhysicalResourceId": result.physical_resource_id or context.log_stream_name,
        "Data": data,
        "Reason": reason
    }
