"""CLI entrypoint for stackevents."""

import logging
import os
import sys

import click
from botocore.exceptions import ClientError

from stackevents.analyzer import filter_events, group_operations
from stackevents.aws.client import CloudFormationClient
from stackevents.formatter import format_json, format_markdown, format_stacks, format_table
from stackevents.integrations.slack import post_to_slack
from stackevents.models import MissingRequiredField


@click.group()
@click.option("--region", default=None, help="AWS region.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx, region, verbose):
    """Inspect CloudFormation stack events and drift status."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s"
        )
    ctx.obj = CloudFormationClient(region=region)


@main.command()
@click.argument("stack_name")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Max events to fetch.")
@click.option("--token", default=None, help="Only show events with this client request token.")
@click.option("--failed-only", is_flag=True, help="Show only failed events.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "markdown"]),
    default="table",
    help="Output format.",
)
@click.option("--redact", is_flag=True, help="Hide resource property blobs in the output.")
@click.option("--post-slack", is_flag=True, help="Post report to Slack webhook.")
@click.pass_obj
def events(client, stack_name, limit, token, failed_only, output_format, redact, post_slack):
    """Show the event history of STACK_NAME, grouped by operation."""
    try:
        drift = client.get_drift_information(stack_name)
        stack_events = client.get_stack_events(stack_name, limit=limit)
    except (ClientError, MissingRequiredField) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    stack_events = filter_events(
        stack_events, client_request_token=token, failed_only=failed_only
    )
    operations = group_operations(stack_events)

    formatters = {
        "table": format_table,
        "json": format_json,
        "markdown": format_markdown,
    }
    output = formatters[output_format](stack_name, drift, operations, redact=redact)
    click.echo(output)

    has_failures = any(op.failed for op in operations)

    if post_slack:
        webhook_url = os.environ.get("STACKEVENTS_SLACK_WEBHOOK")
        if not webhook_url:
            click.echo("Error: STACKEVENTS_SLACK_WEBHOOK env var not set.", err=True)
            sys.exit(2)
        md_output = format_markdown(stack_name, drift, operations, redact=redact)
        post_to_slack(
            stack_name=stack_name,
            report=md_output,
            webhook_url=webhook_url,
            failed=has_failures,
        )

    sys.exit(1 if has_failures else 0)


@main.command()
@click.option("--stack", multiple=True, help="Specific stack name(s) to list.")
@click.option("--prefix", default=None, help="Filter stacks by name prefix.")
@click.option("--drifted-only", is_flag=True, help="Show only drifted stacks.")
@click.pass_obj
def stacks(client, stack, prefix, drifted_only):
    """List live stacks with their last known drift status."""
    try:
        summaries = client.list_stacks(stack_names=list(stack) or None, prefix=prefix)
    except ClientError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if drifted_only:
        summaries = [s for s in summaries if s.drift_information.has_drifted]

    click.echo(format_stacks(summaries))

    has_drift = any(s.drift_information.has_drifted for s in summaries)
    sys.exit(1 if has_drift else 0)
