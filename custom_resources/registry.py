# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Registry mapping custom resource types to their handlers.
"""

import logging
from typing import Dict, List, Optional

from .resources.base import ResourceHandler

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Maps a ResourceType tag such as "Custom::ECS-Cluster" to a handler."""

    def __init__(self) -> None:
        self._handlers: Dict[str, ResourceHandler] = {}

    def register(self, handler: ResourceHandler) -> None:
        resource_type = handler.RESOURCE_TYPE
        if not resource_type:
            raise ValueError(f"{type(handler).__name__} does not declare a RESOURCE_TYPE")
        if resource_type in self._handlers:
            raise ValueError(f"A handler is already registered for {resource_type}")
        self._handlers[resource_type] = handler
        logger.debug("Registered handler %s for %s", type(handler).__name__, resource_type)

    def get(self, resource_type: str) -> Optional[ResourceHandler]:
        return self._handlers.get(resource_type)

    def resource_types(self) -> List[str]:
        return sorted(self._handlers)
