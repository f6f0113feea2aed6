# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Typed ResourceProperties schemas.

CloudFormation delivers ResourceProperties as an untyped mapping (every scalar
arrives as a string). Each resource handler declares a dataclass subclassing
ResourceProperties; the reconciler parses the raw mapping into it once, before
the handler runs, so handler bodies only ever see validated fields.
"""

import logging
from dataclasses import MISSING, fields
from typing import Any, Dict, List, Type, TypeVar

from .errors import ValidationFailed

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ResourceProperties")


class ResourceProperties:
    """
    Base class for property dataclasses.

    Dataclass fields without a default are required and must be non-empty
    strings. Fields with a default are optional. Unknown keys (ServiceToken
    and friends) are ignored.
    """

    @classmethod
    def parse(cls: Type[T], raw: Dict[str, Any], resource_type: str = "") -> T:
        """
        Parse and validate a raw ResourceProperties mapping.

        Raises:
            ValidationFailed: If a required property is missing or a value
                fails the subclass validate() hook
        """
        values: Dict[str, Any] = {}
        missing_params: List[str] = []

        for schema_field in fields(cls):
            value = raw.get(schema_field.name)
            required = schema_field.default is MISSING and schema_field.default_factory is MISSING
            if value is None or (isinstance(value, str) and not value.strip()):
                if required:
                    missing_params.append(schema_field.name)
                continue
            if not isinstance(value, str):
                raise ValidationFailed(
                    f"Property {schema_field.name} must be a string, got {type(value).__name__}",
                    resource_type=resource_type,
                )
            values[schema_field.name] = value.strip()

        if missing_params:
            error_msg = f"Missing required parameters: {', '.join(missing_params)}"
            logger.error(error_msg)
            raise ValidationFailed(error_msg, resource_type=resource_type)

        properties = cls(**values)
        problems = properties.validate()
        if problems:
            error_msg = f"Invalid properties: {'; '.join(problems)}"
            logger.error(error_msg)
            raise ValidationFailed(error_msg, resource_type=resource_type)

        return properties

    def validate(self) -> List[str]:
        """Return a list of problems with the parsed values."""
        return []
