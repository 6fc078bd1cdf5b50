"""Groups stack events into operations and picks out failures."""

from dataclasses import dataclass
from datetime import datetime

from stackevents.models import ResourceStatus, StackEvent


@dataclass(frozen=True)
class Operation:
    """Events that share one client request token, newest first."""

    client_request_token: str | None
    events: list[StackEvent]
    failures: list[StackEvent]
    started_at: datetime
    finished_at: datetime
    status: ResourceStatus | None

    @property
    def failed(self) -> bool:
        return bool(self.failures)


def filter_events(
    events: list[StackEvent],
    client_request_token: str | None = None,
    failed_only: bool = False,
) -> list[StackEvent]:
    """Keep events matching the token and, optionally, only failures."""
    return [
        e
        for e in events
        if (client_request_token is None or e.client_request_token == client_request_token)
        and (not failed_only or e.is_failure)
    ]


def group_operations(events: list[StackEvent]) -> list[Operation]:
    """Group events by client request token, in order of first appearance.

    Events without a token all land in a single group keyed None.
    """
    groups: dict[str | None, list[StackEvent]] = {}
    for event in events:
        groups.setdefault(event.client_request_token, []).append(event)

    operations = []
    for token, grouped in groups.items():
        timestamps = [e.timestamp for e in grouped]
        latest_stack_event = max(
            (e for e in grouped if e.is_stack_event and e.resource_status is not None),
            key=lambda e: e.timestamp,
            default=None,
        )
        operations.append(
            Operation(
                client_request_token=token,
                events=grouped,
                failures=[e for e in grouped if e.is_failure],
                started_at=min(timestamps),
                finished_at=max(timestamps),
                status=latest_stack_event.resource_status if latest_stack_event else None,
            )
        )
    return operations
