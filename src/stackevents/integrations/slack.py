"""Send stack event reports to a Slack incoming webhook."""

import logging
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

SLACK_WEBHOOK_HOSTS = {"hooks.slack.com", "hooks.slack-gov.com"}
# Slack truncates message text beyond this length.
SLACK_TEXT_LIMIT = 40000
TRUNCATED_SUFFIX = "\n…(report truncated, rerun `stackevents events` for the full history)"


def build_event_message(stack_name: str, report: str, failed: bool = False) -> dict:
    """Build the webhook payload for a stack's event report."""
    marker = ":x:" if failed else ":white_check_mark:"
    text = f"{marker} *Stack events for {stack_name}*\n{report}"
    if len(text) > SLACK_TEXT_LIMIT:
        logger.warning(
            "Event report for %s is %d characters, truncating for Slack", stack_name, len(text)
        )
        text = text[: SLACK_TEXT_LIMIT - len(TRUNCATED_SUFFIX)] + TRUNCATED_SUFFIX
    return {"text": text}


def post_to_slack(
    stack_name: str,
    report: str,
    webhook_url: str,
    failed: bool = False,
    timeout: int = 30,
) -> None:
    """Post a stack's event report to Slack.

    Only HTTPS webhook URLs on Slack's own hosts are accepted.
    """
    parsed = urlparse(webhook_url)
    if parsed.scheme != "https" or parsed.hostname not in SLACK_WEBHOOK_HOSTS:
        raise ValueError(
            f"Refusing to post events for {stack_name!r}: webhook must be an https URL on "
            f"one of {sorted(SLACK_WEBHOOK_HOSTS)}, got {webhook_url!r}"
        )
    response = requests.post(
        webhook_url,
        json=build_event_message(stack_name, report, failed=failed),
        timeout=timeout,
    )
    response.raise_for_status()
