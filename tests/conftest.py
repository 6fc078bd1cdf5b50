"""Shared test fixtures."""

from datetime import UTC, datetime

import boto3
import pytest
from moto import mock_aws


@pytest.fixture
def aws_credentials(monkeypatch):
    """Set dummy AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def cfn_client(aws_credentials):
    """Create a moto-mocked CloudFormation boto3 client."""
    with mock_aws():
        yield boto3.client("cloudformation", region_name="us-east-1")


def make_raw_event(**overrides):
    """A DescribeStackEvents item as boto3 returns it."""
    event = {
        "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/my-stack/uuid",
        "EventId": "MyQueue-CREATE_COMPLETE-2026-02-25T13:30:00.000Z",
        "StackName": "my-stack",
        "LogicalResourceId": "MyQueue",
        "PhysicalResourceId": "https://sqs.us-east-1.amazonaws.com/123456789012/my-test-queue",
        "ResourceType": "AWS::SQS::Queue",
        "Timestamp": datetime(2026, 2, 25, 13, 30, 0, tzinfo=UTC),
        "ResourceStatus": "CREATE_COMPLETE",
        "ClientRequestToken": "token-1",
    }
    event.update(overrides)
    return event


SIMPLE_TEMPLATE = """{
    "AWSTemplateFormatVersion": "2010-09-09",
    "Resources": {
        "MyQueue": {
            "Type": "AWS::SQS::Queue",
            "Properties": {
                "QueueName": "my-test-queue"
            }
        }
    }
}"""
