"""Thin boto3 wrapper for CloudFormation stack and stack event API calls."""

import logging

import boto3

from stackevents.models import StackDriftInformation, StackEvent, StackSummary

logger = logging.getLogger(__name__)


class CloudFormationClient:
    """Wraps boto3 CloudFormation calls and returns stackevents dataclasses."""

    def __init__(self, region: str | None = None):
        self._client = boto3.client("cloudformation", **({"region_name": region} if region else {}))

    def list_stacks(
        self,
        stack_names: list[str] | None = None,
        prefix: str | None = None,
    ) -> list[StackSummary]:
        """List live CloudFormation stacks, optionally filtered by name or prefix."""
        paginator = self._client.get_paginator("describe_stacks")
        results = []
        for page in paginator.paginate():
            for stack in page["Stacks"]:
                name = stack["StackName"]
                if stack.get("StackStatus") == "DELETE_COMPLETE":
                    continue

                if stack_names and name not in stack_names:
                    continue

                if prefix and not name.startswith(prefix):
                    continue

                results.append(
                    StackSummary(
                        stack_name=name,
                        stack_id=stack["StackId"],
                        stack_status=stack.get("StackStatus", ""),
                        drift_information=StackDriftInformation.create(
                            stack.get("DriftInformation", {})
                        ),
                    )
                )

        return results

    def get_drift_information(self, stack_name: str) -> StackDriftInformation:
        """Fetch the last known drift status of a stack."""
        desc = self._client.describe_stacks(StackName=stack_name)
        return StackDriftInformation.create(desc["Stacks"][0].get("DriftInformation", {}))

    def get_stack_events(self, stack_name: str, limit: int | None = None) -> list[StackEvent]:
        """Fetch stack events, newest first.

        Stops paging once ``limit`` events have been collected.
        """
        paginator = self._client.get_paginator("describe_stack_events")
        events: list[StackEvent] = []
        for page in paginator.paginate(StackName=stack_name):
            for item in page["StackEvents"]:
                events.append(StackEvent.create(item))
                if limit is not None and len(events) >= limit:
                    logger.debug("Reached event limit %d for %s", limit, stack_name)
                    return events

        logger.debug("Fetched %d events for %s", len(events), stack_name)
        return events
