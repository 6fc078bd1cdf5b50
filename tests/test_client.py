"""Tests for CloudFormationClient."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from stackevents.aws.client import CloudFormationClient
from stackevents.models import (
    MissingRequiredField,
    ResourceStatus,
    StackDriftInformation,
    StackDriftStatus,
    StackEvent,
)
from tests.conftest import SIMPLE_TEMPLATE, make_raw_event


def _client_with_pages(operation_pages):
    """Build a client whose boto3 paginators return the given pages per operation."""
    mock_boto = MagicMock()

    def get_paginator(name):
        paginator = MagicMock()
        paginator.paginate.return_value = operation_pages[name]
        return paginator

    mock_boto.get_paginator.side_effect = get_paginator
    client = CloudFormationClient(region="us-east-1")
    client._client = mock_boto
    return client, mock_boto


@mock_aws
def test_list_stacks_returns_all(aws_credentials):
    """list_stacks returns all live stacks when no filters provided."""
    boto_cfn = boto3.client("cloudformation", region_name="us-east-1")
    boto_cfn.create_stack(StackName="stack-a", TemplateBody=SIMPLE_TEMPLATE)
    boto_cfn.create_stack(StackName="stack-b", TemplateBody=SIMPLE_TEMPLATE)

    client = CloudFormationClient(region="us-east-1")
    stacks = client.list_stacks()

    names = [s.stack_name for s in stacks]
    assert "stack-a" in names
    assert "stack-b" in names
    assert all(isinstance(s.drift_information, StackDriftInformation) for s in stacks)


@mock_aws
def test_list_stacks_prefix_filter(aws_credentials):
    """list_stacks filters by prefix."""
    boto_cfn = boto3.client("cloudformation", region_name="us-east-1")
    boto_cfn.create_stack(StackName="prod-api", TemplateBody=SIMPLE_TEMPLATE)
    boto_cfn.create_stack(StackName="dev-api", TemplateBody=SIMPLE_TEMPLATE)

    client = CloudFormationClient(region="us-east-1")
    stacks = client.list_stacks(prefix="prod-")

    assert [s.stack_name for s in stacks] == ["prod-api"]


@mock_aws
def test_list_stacks_specific_names(aws_credentials):
    """list_stacks filters by explicit stack names."""
    boto_cfn = boto3.client("cloudformation", region_name="us-east-1")
    boto_cfn.create_stack(StackName="stack-a", TemplateBody=SIMPLE_TEMPLATE)
    boto_cfn.create_stack(StackName="stack-b", TemplateBody=SIMPLE_TEMPLATE)
    boto_cfn.create_stack(StackName="stack-c", TemplateBody=SIMPLE_TEMPLATE)

    client = CloudFormationClient(region="us-east-1")
    stacks = client.list_stacks(stack_names=["stack-a", "stack-c"])

    assert sorted(s.stack_name for s in stacks) == ["stack-a", "stack-c"]


def test_list_stacks_decodes_drift_information(aws_credentials):
    checked = datetime(2026, 2, 25, 12, 0, 0, tzinfo=UTC)
    client, _ = _client_with_pages(
        {
            "describe_stacks": [
                {
                    "Stacks": [
                        {
                            "StackName": "drifted",
                            "StackId": "arn:drifted",
                            "StackStatus": "UPDATE_COMPLETE",
                            "DriftInformation": {
                                "StackDriftStatus": "DRIFTED",
                                "LastCheckTimestamp": checked,
                            },
                        },
                        {
                            "StackName": "gone",
                            "StackId": "arn:gone",
                            "StackStatus": "DELETE_COMPLETE",
                        },
                        {
                            "StackName": "unchecked",
                            "StackId": "arn:unchecked",
                            "StackStatus": "CREATE_COMPLETE",
                        },
                    ]
                }
            ]
        }
    )

    stacks = client.list_stacks()

    assert [s.stack_name for s in stacks] == ["drifted", "unchecked"]
    assert stacks[0].drift_information.stack_drift_status == StackDriftStatus.DRIFTED
    assert stacks[0].drift_information.last_check_timestamp == checked
    assert stacks[1].drift_information.stack_drift_status is None


@mock_aws
def test_get_stack_events_from_moto(aws_credentials):
    boto_cfn = boto3.client("cloudformation", region_name="us-east-1")
    boto_cfn.create_stack(StackName="stack-a", TemplateBody=SIMPLE_TEMPLATE)

    client = CloudFormationClient(region="us-east-1")
    events = client.get_stack_events("stack-a")

    assert events
    assert all(isinstance(e, StackEvent) for e in events)
    assert all(e.stack_name == "stack-a" for e in events)
    assert any(
        e.is_stack_event and e.resource_status == ResourceStatus.CREATE_COMPLETE for e in events
    )


def test_get_stack_events_across_pages(aws_credentials):
    client, mock_boto = _client_with_pages(
        {
            "describe_stack_events": [
                {"StackEvents": [make_raw_event(EventId="e3"), make_raw_event(EventId="e2")]},
                {"StackEvents": [make_raw_event(EventId="e1")]},
            ]
        }
    )

    events = client.get_stack_events("my-stack")

    assert [e.event_id for e in events] == ["e3", "e2", "e1"]
    mock_boto.get_paginator.assert_called_once_with("describe_stack_events")


def test_get_stack_events_stops_at_limit(aws_credentials):
    client, _ = _client_with_pages(
        {
            "describe_stack_events": [
                {"StackEvents": [make_raw_event(EventId="e3"), make_raw_event(EventId="e2")]},
                {"StackEvents": [make_raw_event(EventId="e1")]},
            ]
        }
    )

    events = client.get_stack_events("my-stack", limit=2)

    assert [e.event_id for e in events] == ["e3", "e2"]


def test_get_stack_events_propagates_missing_field(aws_credentials):
    bad = make_raw_event()
    del bad["Timestamp"]
    client, _ = _client_with_pages({"describe_stack_events": [{"StackEvents": [bad]}]})

    with pytest.raises(MissingRequiredField, match="Timestamp"):
        client.get_stack_events("my-stack")


def test_get_drift_information(aws_credentials):
    mock_boto = MagicMock()
    mock_boto.describe_stacks.return_value = {
        "Stacks": [
            {
                "StackName": "my-stack",
                "StackId": "arn:aws:cloudformation:us-east-1:123:stack/my-stack/uuid",
                "DriftInformation": {"StackDriftStatus": "IN_SYNC"},
            }
        ]
    }

    client = CloudFormationClient(region="us-east-1")
    client._client = mock_boto

    drift = client.get_drift_information("my-stack")

    assert drift.stack_drift_status == StackDriftStatus.IN_SYNC
    assert drift.last_check_timestamp is None
    mock_boto.describe_stacks.assert_called_once_with(StackName="my-stack")


def test_get_drift_information_from_moto(cfn_client):
    cfn_client.create_stack(StackName="stack-a", TemplateBody=SIMPLE_TEMPLATE)

    client = CloudFormationClient(region="us-east-1")
    drift = client.get_drift_information("stack-a")

    assert drift.stack_drift_status in (None, StackDriftStatus.NOT_CHECKED)
