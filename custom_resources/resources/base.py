# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Base class for custom resource handlers.
"""

from abc import ABC, abstractmethod
from typing import Any, Type

from ..helpers.aws_clients import AwsClients
from ..models import CustomResourceResult
from ..properties import ResourceProperties


class ResourceHandler(ABC):
    """
    Create/Update/Delete contract for one custom resource type.

    Subclasses set RESOURCE_TYPE (the "Custom::..." tag they answer to) and
    PROPERTIES (the dataclass ResourceProperties are validated into before
    create() or update() is called). delete() only gets the physical resource
    ID: everything needed to clean up has to be recoverable from it.

    Lifecycle methods raise errors from custom_resources.errors. A failed
    Create that left something behind sets physical_resource_id on the error.
    """

    RESOURCE_TYPE: str = ""
    PROPERTIES: Type[ResourceProperties] = ResourceProperties

    def __init__(self, clients: AwsClients) -> None:
        self.clients = clients

    @abstractmethod
    def create(self, properties: Any) -> CustomResourceResult:
        """Create the resource."""

    @abstractmethod
    def update(self, physical_resource_id: str, properties: Any) -> CustomResourceResult:
        """Update the resource identified by physical_resource_id."""

    @abstractmethod
    def delete(self, physical_resource_id: str) -> CustomResourceResult:
        """Delete the resource identified by physical_resource_id."""
