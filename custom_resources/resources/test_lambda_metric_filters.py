# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for the Lambda metric filters custom resource.
"""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from custom_resources.errors import CreateFailed, DeleteFailed, ValidationFailed
from custom_resources.resources.lambda_metric_filters import (
    ERROR_FILTERS,
    MEMORY_FILTER,
    WARN_FILTERS,
    LambdaMetricFiltersHandler,
    LambdaMetricFiltersProperties,
)

LOG_GROUP = "/aws/lambda/fn"
FULL_ID = "custom:metric-filters:/aws/lambda/fn:memory/warns/errors"


def make_client_error(code, operation):
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)


@pytest.fixture
def handler(clients):
    return LambdaMetricFiltersHandler(clients)


@pytest.fixture
def logs(service_clients):
    return service_clients["logs"]


def put_calls(logs):
    return [c.kwargs for c in logs.put_metric_filter.call_args_list]


def deleted_filters(logs):
    return [c.kwargs["filterName"] for c in logs.delete_metric_filter.call_args_list]


class TestLambdaMetricFiltersProperties:

    def test_parse(self):
        properties = LambdaMetricFiltersProperties.parse(
            {"LogGroupName": LOG_GROUP, "LambdaRuntime": "Python"}
        )
        assert properties == LambdaMetricFiltersProperties(LambdaRuntime="Python", LogGroupName=LOG_GROUP)

    def test_missing_properties_are_all_reported(self):
        with pytest.raises(ValidationFailed) as exc_info:
            LambdaMetricFiltersProperties.parse({})
        assert "LambdaRuntime" in str(exc_info.value)
        assert "LogGroupName" in str(exc_info.value)

    def test_unsupported_runtime(self):
        with pytest.raises(ValidationFailed, match="LambdaRuntime"):
            LambdaMetricFiltersProperties.parse({"LogGroupName": LOG_GROUP, "LambdaRuntime": "Node"})


class TestLambdaMetricFiltersCreate:

    @pytest.mark.parametrize("runtime", ["Go", "Python"])
    def test_create_puts_three_filters_in_order(self, handler, logs, runtime):
        result = handler.create(LambdaMetricFiltersProperties(LambdaRuntime=runtime, LogGroupName=LOG_GROUP))

        assert result.physical_resource_id == FULL_ID
        calls = put_calls(logs)
        assert [c["filterName"] for c in calls] == ["fn-memory", "fn-warns", "fn-errors"]
        assert [c["filterPattern"] for c in calls] == [MEMORY_FILTER, WARN_FILTERS[runtime], ERROR_FILTERS[runtime]]
        assert all(c["logGroupName"] == LOG_GROUP for c in calls)

    def test_metric_transformations(self, handler, logs):
        handler.create(LambdaMetricFiltersProperties(LambdaRuntime="Go", LogGroupName=LOG_GROUP))

        memory, warns, _ = put_calls(logs)
        assert memory["metricTransformations"] == [{
            "metricName": "fn-memory",
            "metricNamespace": "Panther",
            "metricValue": "$max_memory_used_value",
            "defaultValue": 0.0,
        }]
        assert warns["metricTransformations"][0]["metricValue"] == "1"

    def test_python_runtime_patterns(self, handler, logs):
        handler.create(LambdaMetricFiltersProperties(LambdaRuntime="Python", LogGroupName=LOG_GROUP))

        patterns = [c["filterPattern"] for c in put_calls(logs)]
        assert patterns[1] == '[ level="[WARN]" ]'
        assert patterns[2] == '[ level="[ERROR]" ]'

    def test_first_step_failure_has_no_checkpoint(self, handler, logs):
        logs.put_metric_filter.side_effect = make_client_error("ResourceNotFoundException", "PutMetricFilter")

        with pytest.raises(CreateFailed) as exc_info:
            handler.create(LambdaMetricFiltersProperties(LambdaRuntime="Go", LogGroupName=LOG_GROUP))

        assert exc_info.value.physical_resource_id == ""
        assert logs.put_metric_filter.call_count == 1

    def test_third_step_failure_records_first_two(self, handler, logs):
        logs.put_metric_filter.side_effect = [
            {},
            {},
            make_client_error("LimitExceededException", "PutMetricFilter"),
        ]

        with pytest.raises(CreateFailed) as exc_info:
            handler.create(LambdaMetricFiltersProperties(LambdaRuntime="Go", LogGroupName=LOG_GROUP))

        error = exc_info.value
        assert error.physical_resource_id == "custom:metric-filters:/aws/lambda/fn:memory/warns"
        assert "fn-errors" in str(error)
        logs.delete_metric_filter.assert_not_called()

    def test_second_step_failure_stops_immediately(self, handler, logs):
        logs.put_metric_filter.side_effect = [
            {},
            make_client_error("ServiceUnavailableException", "PutMetricFilter"),
        ]

        with pytest.raises(CreateFailed) as exc_info:
            handler.create(LambdaMetricFiltersProperties(LambdaRuntime="Go", LogGroupName=LOG_GROUP))

        assert exc_info.value.physical_resource_id == "custom:metric-filters:/aws/lambda/fn:memory"
        assert logs.put_metric_filter.call_count == 2

    def test_connection_failure_keeps_checkpoint(self, handler, logs):
        logs.put_metric_filter.side_effect = [
            {},
            {},
            EndpointConnectionError(endpoint_url="https://logs.us-east-1.amazonaws.com"),
        ]

        with pytest.raises(CreateFailed) as exc_info:
            handler.create(LambdaMetricFiltersProperties(LambdaRuntime="Go", LogGroupName=LOG_GROUP))

        error = exc_info.value
        assert error.physical_resource_id == "custom:metric-filters:/aws/lambda/fn:memory/warns"
        assert isinstance(error.cause, EndpointConnectionError)


class TestLambdaMetricFiltersUpdate:

    def test_update_is_noop(self, handler, logs):
        result = handler.update(FULL_ID, LambdaMetricFiltersProperties(LambdaRuntime="Python", LogGroupName=LOG_GROUP))

        assert result.physical_resource_id == FULL_ID
        assert logs.method_calls == []


class TestLambdaMetricFiltersDelete:

    def test_delete_all_filters_in_order(self, handler, logs):
        result = handler.delete(FULL_ID)

        assert result.physical_resource_id == FULL_ID
        assert [c.kwargs for c in logs.delete_metric_filter.call_args_list] == [
            {"logGroupName": LOG_GROUP, "filterName": "fn-memory"},
            {"logGroupName": LOG_GROUP, "filterName": "fn-warns"},
            {"logGroupName": LOG_GROUP, "filterName": "fn-errors"},
        ]

    def test_delete_partial_checkpoint(self, handler, logs):
        handler.delete("custom:metric-filters:/aws/lambda/fn:memory/warns")

        assert deleted_filters(logs) == ["fn-memory", "fn-warns"]

    def test_delete_is_idempotent(self, handler, logs):
        """The second Delete sees ResourceNotFoundException for every filter and still succeeds."""
        not_found = make_client_error("ResourceNotFoundException", "DeleteMetricFilter")
        logs.delete_metric_filter.side_effect = [{}, {}, {}, not_found, not_found, not_found]

        assert handler.delete(FULL_ID).physical_resource_id == FULL_ID
        assert handler.delete(FULL_ID).physical_resource_id == FULL_ID
        assert logs.delete_metric_filter.call_count == 6

    @pytest.mark.parametrize("physical_resource_id", [
        "",
        "error",
        "2024/01/01/[$LATEST]abcdef123456",
        "custom:metric-filters:/aws/lambda/fn",
    ])
    def test_malformed_id_makes_no_calls(self, handler, logs, physical_resource_id):
        result = handler.delete(physical_resource_id)

        assert result.physical_resource_id == physical_resource_id
        logs.delete_metric_filter.assert_not_called()

    def test_delete_failure_aborts_remaining(self, handler, logs):
        logs.delete_metric_filter.side_effect = [
            {},
            make_client_error("AccessDeniedException", "DeleteMetricFilter"),
        ]

        with pytest.raises(DeleteFailed) as exc_info:
            handler.delete(FULL_ID)

        assert "fn-warns" in str(exc_info.value)
        assert exc_info.value.physical_resource_id == FULL_ID
        assert deleted_filters(logs) == ["fn-memory", "fn-warns"]

    def test_delete_connection_failure_is_not_treated_as_deleted(self, handler, logs):
        logs.delete_metric_filter.side_effect = EndpointConnectionError(
            endpoint_url="https://logs.us-east-1.amazonaws.com"
        )

        with pytest.raises(DeleteFailed) as exc_info:
            handler.delete(FULL_ID)

        assert exc_info.value.physical_resource_id == FULL_ID
        assert deleted_filters(logs) == ["fn-memory"]
