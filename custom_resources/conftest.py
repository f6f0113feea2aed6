# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Shared pytest fixtures for the custom resource tests.
"""

from typing import Dict
from unittest.mock import MagicMock

import pytest

from custom_resources.helpers.aws_clients import AwsClients


@pytest.fixture
def service_clients() -> Dict[str, MagicMock]:
    """One mock per AWS service client."""
    return {
        "ecs": MagicMock(name="ecs"),
        "logs": MagicMock(name="logs"),
        "sqs": MagicMock(name="sqs"),
        "sts": MagicMock(name="sts"),
    }


@pytest.fixture
def clients(service_clients) -> AwsClients:
    """AwsClients backed by a mock session handing out the service mocks."""
    session = MagicMock()
    session.client.side_effect = lambda service_name, **kwargs: service_clients[service_name]
    return AwsClients(
        session=session,
        region="us-east-1",
        account_id="123456789012",
        partition="aws"
    )


@pytest.fixture
def mock_context():
    """Create a mock Lambda context object."""
    context = MagicMock()
    context.function_name = "custom-resources"
    context.aws_request_id = "test-request-id-12345"
    context.log_group_name = "/aws/lambda/custom-resources"
    context.log_stream_name = "2024/01/01/[$LATEST]abcdef123456"
    context.get_remaining_time_in_millis = MagicMock(return_value=300000)
    return context
