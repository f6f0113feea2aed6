# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Custom resource reconciler.

Dispatches one CloudFormation custom resource event to the handler registered
for its ResourceType and returns the handler's result. The reconciler keeps no
state between events, performs no retries, and only shares the read-only
AWS client holder it was constructed with.
"""

import logging
from typing import Iterable, Optional, Type

from .errors import CustomResourceError, UnknownRequestType, UnknownResourceType
from .helpers.aws_clients import AwsClients
from .models import CustomResourceEvent, CustomResourceResult, RequestType
from .registry import HandlerRegistry
from .resources import ALL_HANDLERS
from .resources.base import ResourceHandler

logger = logging.getLogger(__name__)


def build_registry(
    clients: AwsClients,
    handler_types: Iterable[Type[ResourceHandler]] = ALL_HANDLERS
) -> HandlerRegistry:
    """Create a registry with one handler instance per handler type."""
    registry = HandlerRegistry()
    for handler_type in handler_types:
        registry.register(handler_type(clients))
    return registry


class Reconciler:
    """
    Dispatch core for custom resource events.

    Attributes:
        registry: Handlers by resource type
    """

    def __init__(self, clients: AwsClients, registry: Optional[HandlerRegistry] = None) -> None:
        self.clients = clients
        self.registry = registry or build_registry(clients)

    def handle(self, event: CustomResourceEvent) -> CustomResourceResult:
        """
        Process one event.

        Errors from the custom resource taxonomy are returned in result.error,
        together with any partial physical resource ID the handler recorded
        (or the event's existing ID for Update and Delete).
        Anything else propagates to the caller.
        """
        logger.info(
            "Reconciling: resource_type=%s, request_type=%s, physical_resource_id=%s",
            event.resource_type,
            event.request_type,
            event.physical_resource_id
        )
        try:
            result = self._dispatch(event)
        except CustomResourceError as e:
            logger.error(
                "%s %s failed: %s",
                event.resource_type,
                event.request_type,
                e
            )
            physical_resource_id = e.physical_resource_id
            if not physical_resource_id and event.request_type != RequestType.CREATE.value:
                # A failed Update or Delete still refers to the existing resource
                physical_resource_id = event.physical_resource_id
            return CustomResourceResult(physical_resource_id=physical_resource_id, error=e)

        logger.info(
            "%s %s completed: physical_resource_id=%s",
            event.resource_type,
            event.request_type,
            result.physical_resource_id
        )
        return result

    def _dispatch(self, event: CustomResourceEvent) -> CustomResourceResult:
        handler = self.registry.get(event.resource_type)
        if handler is None:
            raise UnknownResourceType(
                f"unknown custom resource type {event.resource_type}",
                resource_type=event.resource_type
            )

        try:
            request_type = RequestType(event.request_type)
        except ValueError:
            raise UnknownRequestType(
                f"unknown request type {event.request_type}",
                resource_type=event.resource_type
            ) from None

        if request_type is RequestType.DELETE:
            return handler.delete(event.physical_resource_id)

        properties = handler.PROPERTIES.parse(event.resource_properties, resource_type=event.resource_type)
        if request_type is RequestType.CREATE:
            return handler.create(properties)
        logger.info(
            "Changed properties: resource_type=%s, properties=%s",
            event.resource_type,
            event.changed_properties()
        )
        return handler.update(event.physical_resource_id, properties)
