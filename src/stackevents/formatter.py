"""Output formatters for stack events and drift information."""

import json
import re

from rich.console import Console
from rich.markup import escape
from rich.text import Text
from rich.tree import Tree

from stackevents.analyzer import Operation
from stackevents.models import StackDriftInformation, StackEvent, StackSummary

REDACTED = "[REDACTED]"
NO_EVENTS = "No stack events found."
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _escape_md_cell(value: str) -> str:
    """Escape characters that break markdown table cells."""
    return value.replace("|", "\\|").replace("\n", " ")


def _md_code(value: str) -> str:
    """Wrap a value in a markdown code span long enough to hold its own backticks."""
    longest = max((len(run) for run in re.findall(r"`+", value)), default=0)
    fence = "`" * (longest + 1)
    if longest:
        return f"{fence} {value} {fence}"
    return f"{fence}{value}{fence}"


def _value(enum_or_str) -> str | None:
    return None if enum_or_str is None else str(enum_or_str)


def _event_style(event: StackEvent) -> str:
    if event.is_failure:
        return "red"
    status = event.resource_status or ""
    if status.endswith("_IN_PROGRESS"):
        return "yellow"
    if status.endswith("_COMPLETE"):
        return "green"
    return "dim"


def _drift_label(drift: StackDriftInformation) -> str:
    status = drift.stack_drift_status or "NOT_CHECKED"
    if drift.last_check_timestamp is None:
        return status
    return f"{status} (checked {drift.last_check_timestamp:{TIME_FORMAT}})"


def _event_to_dict(event: StackEvent, redact: bool) -> dict:
    properties = event.resource_properties
    if redact and properties is not None:
        properties = REDACTED
    return {
        "event_id": event.event_id,
        "timestamp": event.timestamp.isoformat(),
        "logical_resource_id": event.logical_resource_id,
        "physical_resource_id": event.physical_resource_id,
        "resource_type": event.resource_type,
        "resource_status": _value(event.resource_status),
        "resource_status_reason": event.resource_status_reason,
        "resource_properties": properties,
        "hook_type": event.hook_type,
        "hook_status": _value(event.hook_status),
        "hook_status_reason": event.hook_status_reason,
        "hook_invocation_point": _value(event.hook_invocation_point),
        "hook_failure_mode": _value(event.hook_failure_mode),
        "detailed_status": _value(event.detailed_status),
        "failed": event.is_failure,
    }


def format_json(
    stack_name: str,
    drift: StackDriftInformation,
    operations: list[Operation],
    *,
    redact: bool = False,
) -> str:
    """Format events as JSON."""
    return json.dumps(
        {
            "stack_name": stack_name,
            "drift": {
                "status": _value(drift.stack_drift_status),
                "last_check_timestamp": (
                    drift.last_check_timestamp.isoformat() if drift.last_check_timestamp else None
                ),
            },
            "summary": {
                "operations": len(operations),
                "events": sum(len(op.events) for op in operations),
                "failures": sum(len(op.failures) for op in operations),
            },
            "operations": [
                {
                    "client_request_token": op.client_request_token,
                    "status": _value(op.status),
                    "started_at": op.started_at.isoformat(),
                    "finished_at": op.finished_at.isoformat(),
                    "events": [_event_to_dict(e, redact) for e in op.events],
                }
                for op in operations
            ],
        },
        indent=2,
    )


def format_markdown(
    stack_name: str,
    drift: StackDriftInformation,
    operations: list[Operation],
    *,
    redact: bool = False,
) -> str:
    """Format events as Markdown."""
    if not operations:
        return NO_EVENTS

    failures = sum(len(op.failures) for op in operations)
    lines = [
        f"## Stack Events — {_escape_md_cell(stack_name)}",
        "",
        f"Drift: {_drift_label(drift)} · {failures} failed event(s)",
        "",
    ]

    for op in operations:
        token = _escape_md_cell(op.client_request_token or "no client request token")
        status = f" — {op.status}" if op.status else ""
        lines.append(f"### {token}{status}")
        lines.append("")
        lines.append("| Time | Resource | Type | Status | Reason | Properties |")
        lines.append("|------|----------|------|--------|--------|------------|")
        for e in op.events:
            reason = e.resource_status_reason or e.hook_status_reason or "—"
            status_cell = e.resource_status or e.hook_status or "—"
            if e.resource_properties is None:
                properties = "—"
            else:
                properties = (
                    REDACTED if redact else _md_code(_escape_md_cell(e.resource_properties))
                )
            lines.append(
                f"| {e.timestamp:{TIME_FORMAT}} "
                f"| {_escape_md_cell(e.logical_resource_id or '—')} "
                f"| {_escape_md_cell(e.resource_type or '—')} "
                f"| {status_cell} | {_escape_md_cell(reason)} | {properties} |"
            )
        lines.append("")

    return "\n".join(lines)


def format_table(
    stack_name: str,
    drift: StackDriftInformation,
    operations: list[Operation],
    *,
    redact: bool = False,
) -> str:
    """Format events as a Rich tree view, returned as a string."""
    if not operations:
        return NO_EVENTS

    console = Console(record=True, width=120)
    drift_style = "red" if drift.has_drifted else "green"
    tree = Tree(
        Text.from_markup(
            f"[bold]{escape(stack_name)}[/bold]"
            f" — drift: [{drift_style}]{_drift_label(drift)}[/{drift_style}]"
        )
    )

    for op in operations:
        token = op.client_request_token or "no client request token"
        status = f" — {op.status}" if op.status else ""
        op_branch = tree.add(Text.from_markup(f"[bold]{escape(token)}[/bold]{status}"))

        for e in op.events:
            style = _event_style(e)
            label = e.resource_status or e.hook_status or ""
            event_branch = op_branch.add(
                Text.from_markup(
                    f"{e.timestamp:{TIME_FORMAT}} [{style}]{escape(e.logical_resource_id or '')}"
                    f"[/{style}] ({escape(e.resource_type or '')}) — {label}"
                )
            )
            if e.resource_status_reason:
                event_branch.add(Text(e.resource_status_reason))
            if e.hook_type:
                event_branch.add(
                    Text(
                        f"hook {e.hook_type}: {e.hook_status or ''} "
                        f"{e.hook_status_reason or ''}".rstrip()
                    )
                )
            if e.resource_properties:
                event_branch.add(Text(REDACTED if redact else e.resource_properties))

    console.print(tree)
    return console.export_text()


def format_stacks(stacks: list[StackSummary]) -> str:
    """Format a stack listing with drift status as a Rich tree view."""
    if not stacks:
        return "No stacks found."

    console = Console(record=True, width=120)
    tree = Tree("[bold]Stacks[/bold]")
    for s in stacks:
        style = "red" if s.drift_information.has_drifted else "green"
        tree.add(
            Text.from_markup(
                f"[{style}]{escape(s.stack_name)}[/{style}] — {s.stack_status}"
                f" — drift: {_drift_label(s.drift_information)}"
            )
        )

    console.print(tree)
    return console.export_text()
