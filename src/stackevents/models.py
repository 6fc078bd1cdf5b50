"""Core data models for CloudFormation stack events and drift information."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

STACK_RESOURCE_TYPE = "AWS::CloudFormation::Stack"


class MissingRequiredField(ValueError):
    """A service response is missing a field the record cannot be built without."""

    def __init__(self, field: str):
        super().__init__(f'Missing required field "{field}".')
        self.field = field


class ServiceEnum(StrEnum):
    """String enum that keeps values unknown to this client instead of failing.

    An unknown value decodes to a pseudo-member whose value is the raw wire
    string and whose ``recognized`` is False.
    """

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        logger.debug("Unrecognized %s value %r", cls.__name__, value)
        member = str.__new__(cls, value)
        member._name_ = "UNRECOGNIZED"
        member._value_ = value
        return member

    @property
    def recognized(self) -> bool:
        return self._value_ in type(self)._value2member_map_


class StackDriftStatus(ServiceEnum):
    """Overall stack drift status."""

    DRIFTED = "DRIFTED"
    IN_SYNC = "IN_SYNC"
    UNKNOWN = "UNKNOWN"
    NOT_CHECKED = "NOT_CHECKED"


class ResourceStatus(ServiceEnum):
    """Status of a stack or resource as reported on a stack event."""

    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_FAILED = "CREATE_FAILED"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_FAILED = "DELETE_FAILED"
    DELETE_COMPLETE = "DELETE_COMPLETE"
    DELETE_SKIPPED = "DELETE_SKIPPED"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_FAILED = "UPDATE_FAILED"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    UPDATE_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS"
    IMPORT_FAILED = "IMPORT_FAILED"
    IMPORT_COMPLETE = "IMPORT_COMPLETE"
    IMPORT_IN_PROGRESS = "IMPORT_IN_PROGRESS"
    IMPORT_ROLLBACK_IN_PROGRESS = "IMPORT_ROLLBACK_IN_PROGRESS"
    IMPORT_ROLLBACK_FAILED = "IMPORT_ROLLBACK_FAILED"
    IMPORT_ROLLBACK_COMPLETE = "IMPORT_ROLLBACK_COMPLETE"
    UPDATE_ROLLBACK_IN_PROGRESS = "UPDATE_ROLLBACK_IN_PROGRESS"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"
    UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_ROLLBACK_FAILED = "UPDATE_ROLLBACK_FAILED"
    ROLLBACK_IN_PROGRESS = "ROLLBACK_IN_PROGRESS"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    REVIEW_IN_PROGRESS = "REVIEW_IN_PROGRESS"


class HookStatus(ServiceEnum):
    """Status of a hook invocation."""

    HOOK_IN_PROGRESS = "HOOK_IN_PROGRESS"
    HOOK_COMPLETE_SUCCEEDED = "HOOK_COMPLETE_SUCCEEDED"
    HOOK_COMPLETE_FAILED = "HOOK_COMPLETE_FAILED"
    HOOK_FAILED = "HOOK_FAILED"


class HookInvocationPoint(ServiceEnum):
    """Point in provisioning logic where a hook runs."""

    PRE_PROVISION = "PRE_PROVISION"


class HookFailureMode(ServiceEnum):
    """What a hook does with a non-compliant resource."""

    FAIL = "FAIL"
    WARN = "WARN"


class DetailedStatus(ServiceEnum):
    """Detailed status of a stack event."""

    CONFIGURATION_COMPLETE = "CONFIGURATION_COMPLETE"
    VALIDATION_FAILED = "VALIDATION_FAILED"


FAILED_HOOK_STATUSES = frozenset({HookStatus.HOOK_COMPLETE_FAILED, HookStatus.HOOK_FAILED})


def _optional_enum(enum_cls: type[ServiceEnum], value: Any) -> Any:
    return None if value is None else enum_cls(value)


@dataclass(frozen=True)
class StackDriftInformation:
    """Whether a stack's live configuration differs from its template.

    ``last_check_timestamp`` is None when drift detection has never run.
    """

    stack_drift_status: StackDriftStatus | None = None
    last_check_timestamp: datetime | None = None

    @classmethod
    def create(cls, data: "Mapping[str, Any] | StackDriftInformation") -> "StackDriftInformation":
        """Build from a DescribeStacks ``DriftInformation`` mapping.

        An existing instance is returned as is.
        """
        if isinstance(data, cls):
            return data
        return cls(
            stack_drift_status=_optional_enum(StackDriftStatus, data.get("StackDriftStatus")),
            last_check_timestamp=data.get("LastCheckTimestamp"),
        )

    @property
    def has_drifted(self) -> bool:
        return self.stack_drift_status == StackDriftStatus.DRIFTED


@dataclass(frozen=True)
class StackEvent:
    """One event in a stack's provisioning lifecycle.

    All events produced by one stack operation share a ``client_request_token``.
    ``resource_properties`` is the opaque property blob the resource was
    provisioned with.
    """

    stack_id: str
    event_id: str
    stack_name: str
    timestamp: datetime
    logical_resource_id: str | None = None
    physical_resource_id: str | None = None
    resource_type: str | None = None
    resource_status: ResourceStatus | None = None
    resource_status_reason: str | None = None
    resource_properties: str | None = None
    client_request_token: str | None = None
    hook_type: str | None = None
    hook_status: HookStatus | None = None
    hook_status_reason: str | None = None
    hook_invocation_point: HookInvocationPoint | None = None
    hook_failure_mode: HookFailureMode | None = None
    detailed_status: DetailedStatus | None = None

    @classmethod
    def create(cls, data: "Mapping[str, Any] | StackEvent") -> "StackEvent":
        """Build from a DescribeStackEvents ``StackEvents`` item.

        Raises MissingRequiredField if StackId, EventId, StackName or
        Timestamp is absent. An existing instance is returned as is.
        """
        if isinstance(data, cls):
            return data
        for key in ("StackId", "EventId", "StackName", "Timestamp"):
            if data.get(key) is None:
                raise MissingRequiredField(key)
        return cls(
            stack_id=data["StackId"],
            event_id=data["EventId"],
            stack_name=data["StackName"],
            timestamp=data["Timestamp"],
            logical_resource_id=data.get("LogicalResourceId"),
            physical_resource_id=data.get("PhysicalResourceId"),
            resource_type=data.get("ResourceType"),
            resource_status=_optional_enum(ResourceStatus, data.get("ResourceStatus")),
            resource_status_reason=data.get("ResourceStatusReason"),
            resource_properties=data.get("ResourceProperties"),
            client_request_token=data.get("ClientRequestToken"),
            hook_type=data.get("HookType"),
            hook_status=_optional_enum(HookStatus, data.get("HookStatus")),
            hook_status_reason=data.get("HookStatusReason"),
            hook_invocation_point=_optional_enum(
                HookInvocationPoint, data.get("HookInvocationPoint")
            ),
            hook_failure_mode=_optional_enum(HookFailureMode, data.get("HookFailureMode")),
            detailed_status=_optional_enum(DetailedStatus, data.get("DetailedStatus")),
        )

    @property
    def is_stack_event(self) -> bool:
        """True when the event is about the stack itself rather than a resource."""
        return (
            self.resource_type == STACK_RESOURCE_TYPE
            and self.logical_resource_id == self.stack_name
        )

    @property
    def is_failure(self) -> bool:
        if self.resource_status is not None and self.resource_status.endswith("_FAILED"):
            return True
        if self.hook_status in FAILED_HOOK_STATUSES:
            return True
        return self.detailed_status == DetailedStatus.VALIDATION_FAILED


@dataclass(frozen=True)
class StackSummary:
    """A live stack as listed by DescribeStacks."""

    stack_name: str
    stack_id: str
    stack_status: str
    drift_information: StackDriftInformation
