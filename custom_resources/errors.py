# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Error classes for custom resource operations.

Every failure reported back to CloudFormation is one of these types. Each error
carries the resource type and name it concerns, the underlying exception (if
any), and the partial physical resource ID a failed Create managed to record.
"""

from typing import Any, Dict, Optional


class CustomResourceError(Exception):
    """Base exception for custom resource operations."""

    def __init__(
        self,
        message: str,
        resource_type: str = "",
        resource_name: str = "",
        cause: Optional[Exception] = None,
        physical_resource_id: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.cause = cause
        self.physical_resource_id = physical_resource_id

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary for the CloudFormation response Data."""
        result = {
            "Error": str(self),
            "ErrorType": type(self).__name__,
        }
        if self.resource_type:
            result["ResourceType"] = self.resource_type
        if self.resource_name:
            result["ResourceName"] = self.resource_name
        return result


class UnknownResourceType(CustomResourceError):
    """No handler is registered for the event's ResourceType."""


class UnknownRequestType(CustomResourceError):
    """RequestType is not one of Create, Update or Delete."""


class ValidationFailed(CustomResourceError):
    """ResourceProperties are missing or malformed."""


class CreateFailed(CustomResourceError):
    """A Create lifecycle call failed."""


class UpdateFailed(CustomResourceError):
    """An Update lifecycle call failed."""


class DeleteFailed(CustomResourceError):
    """A Delete lifecycle call failed."""
