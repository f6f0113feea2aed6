# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Event and result types for CloudFormation custom resource requests.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import CustomResourceError


class RequestType(Enum):
    """CloudFormation custom resource request types."""
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"

    def __str__(self) -> str:
        return self.value


@dataclass
class CustomResourceEvent:
    """
    A single CloudFormation custom resource request.

    RequestType is kept as the raw string so that an unsupported value can be
    reported by the reconciler instead of failing while parsing the event.

    Attributes:
        resource_type: Tag selecting the handler (e.g. "Custom::ECS-Cluster")
        request_type: "Create", "Update" or "Delete"
        resource_properties: Handler-specific properties from the template
        physical_resource_id: Empty on Create, set on Update and Delete
        old_resource_properties: Previous properties (Update only)
        response_url: Pre-signed URL the outcome is reported to
        stack_id: ARN of the owning stack
        request_id: Unique ID of this request
        logical_resource_id: Template logical ID of the resource
    """
    resource_type: str
    request_type: str
    resource_properties: Dict[str, Any] = field(default_factory=dict)
    physical_resource_id: str = ""
    old_resource_properties: Dict[str, Any] = field(default_factory=dict)
    response_url: str = ""
    stack_id: str = ""
    request_id: str = ""
    logical_resource_id: str = ""

    @classmethod
    def from_dict(cls, event: Dict[str, Any]) -> "CustomResourceEvent":
        """Build an event from the raw Lambda payload."""
        return cls(
            resource_type=event.get("ResourceType", ""),
            request_type=event.get("RequestType", ""),
            resource_properties=event.get("ResourceProperties") or {},
            physical_resource_id=event.get("PhysicalResourceId") or "",
            old_resource_properties=event.get("OldResourceProperties") or {},
            response_url=event.get("ResponseURL", ""),
            stack_id=event.get("StackId", ""),
            request_id=event.get("RequestId", ""),
            logical_resource_id=event.get("LogicalResourceId", ""),
        )

    def changed_properties(self) -> List[str]:
        """Names of properties whose value differs from OldResourceProperties."""
        names = set(self.resource_properties) | set(self.old_resource_properties)
        return sorted(
            name for name in names
            if self.resource_properties.get(name) != self.old_resource_properties.get(name)
        )


@dataclass
class CustomResourceResult:
    """Outcome of one lifecycle call."""

    physical_resource_id: str = ""
    outputs: Dict[str, Any] = field(default_factory=dict)
    error: Optional[CustomResourceError] = None

    @property
    def success(self) -> bool:
        return self.error is None
