# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for the AWS client helper.
"""

from unittest.mock import MagicMock

from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError

from custom_resources.helpers.aws_clients import AWS_ERRORS, AwsClients, client_error_code


class TestClientErrorCode:

    def test_client_error(self):
        error = ClientError({"Error": {"Code": "ClusterNotFoundException", "Message": "gone"}}, "DeleteCluster")
        assert client_error_code(error) == "ClusterNotFoundException"

    def test_client_error_without_code(self):
        assert client_error_code(ClientError({}, "DeleteCluster")) == "Unknown"

    def test_transport_error_uses_class_name(self):
        error = EndpointConnectionError(endpoint_url="https://ecs.us-east-1.amazonaws.com")
        assert client_error_code(error) == "EndpointConnectionError"

    def test_aws_errors_cover_botocore_failures(self):
        assert isinstance(NoCredentialsError(), AWS_ERRORS)
        assert isinstance(EndpointConnectionError(endpoint_url="https://x"), AWS_ERRORS)


class TestAwsClients:

    def test_clients_are_cached(self):
        session = MagicMock()
        clients = AwsClients(session=session, region="us-east-1", account_id="123456789012")

        assert clients.ecs is clients.ecs
        session.client.assert_called_once()
        assert session.client.call_args.args == ("ecs",)
        assert session.client.call_args.kwargs["region_name"] == "us-east-1"

    def test_partition_from_environment(self, monkeypatch):
        monkeypatch.setenv("AWS_PARTITION", "aws-us-gov")
        clients = AwsClients(session=MagicMock(), region="us-gov-west-1", account_id="123456789012")

        assert clients.partition == "aws-us-gov"
