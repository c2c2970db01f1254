#!/usr/bin/env python3
"""
Slack client for posting workflow run notifications
"""

from typing import List, Optional, Union

import requests

from aws_client import get_parameter
from constants import REQUEST_TIMEOUT_SECONDS, SLACK_API_URL, SLACK_BOT_TOKEN_PARAMETER
from errors import ChannelNotFound, SlackApiError
from models import FailedWorkflowRunDetails, WorkflowRunDetails


def _details_lines(details: WorkflowRunDetails) -> str:
    return (
        f"*Repository*:\t   {details.repository}\n"
        f"*Branch*:\t\t\t  {details.branch}\n"
        f"*Message*:\t\t   {details.commit_message}\n"
        f"*Commit SHA*:   `{details.commit_sha}`\n"
        f"*Workflow*:\t\t {details.workflow_name}\n"
    )


def format_success_blocks(details: WorkflowRunDetails) -> List[dict]:
    text = (
        _details_lines(details)
        + "*Result*:\t\t\t\tSUCCESS :white_check_mark:\n"
        + f"<{details.url}|Job URL>"
    )
    return [{"type": "section", "text": {"type": "mrkdwn", "text": text}}]


def format_failure_blocks(details: FailedWorkflowRunDetails) -> List[dict]:
    text = (
        _details_lines(details)
        + f"*Failed Step*:\t   {details.failed_step}\n"
        + "*Result*:\t\t\t    FAILED :x:\n"
        + f"<{details.failed_step_url}|Failed Step URL>"
    )
    return [{"type": "section", "text": {"type": "mrkdwn", "text": text}}]


class SlackClient:
    """Client for the Slack Web API, bound to one bot token"""

    def __init__(self, api_token: str):
        self.base_url = SLACK_API_URL
        self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {api_token}"})

    def get_channel_id(self, channel_name: str) -> Optional[str]:
        """Find a channel id by exact name, walking every page of conversations.list"""
        cursor = None

        while True:
            params = {"limit": 200}
            if cursor:
                params["cursor"] = cursor

            response = self.session.get(
                f"{self.base_url}/conversations.list", params=params, timeout=REQUEST_TIMEOUT_SECONDS
            )
            response.raise_for_status()
            data = response.json()

            if not data.get("ok"):
                raise SlackApiError(data.get("error", "conversations.list failed"))

            for channel in data.get("channels", []):
                if channel.get("name") == channel_name:
                    return channel["id"]

            # Slack signals the last page with an empty cursor
            cursor = (data.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return None

    def send_message(self, channel_name: str, blocks: List[dict], text: str = "") -> bool:
        """Post blocks to the named channel. Returns False if Slack reports a failure."""
        channel = self.get_channel_id(channel_name)

        if channel is None:
            raise ChannelNotFound(channel_name)

        payload = {"channel": channel, "blocks": blocks}
        if text:
            payload["text"] = text

        response = self.session.post(
            f"{self.base_url}/chat.postMessage",
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        data = response.json()

        if data.get("ok"):
            print("Slack message sent")
            return True

        print(f"❌ Failed to send Slack message: {data.get('error', 'unknown error')}")
        return False

    def send_success_message(self, channel_name: str, details: WorkflowRunDetails) -> bool:
        return self.send_message(
            channel_name,
            format_success_blocks(details),
            f"SUCCESS: {details.workflow_name} on {details.repository}",
        )

    def send_failure_message(self, channel_name: str, details: FailedWorkflowRunDetails) -> bool:
        return self.send_message(
            channel_name,
            format_failure_blocks(details),
            f"FAILED: {details.workflow_name} on {details.repository}",
        )

    def publish(self, channel_name: str, details: Union[WorkflowRunDetails, FailedWorkflowRunDetails]) -> bool:
        if isinstance(details, FailedWorkflowRunDetails):
            return self.send_failure_message(channel_name, details)
        return self.send_success_message(channel_name, details)


def create_slack_client(ssm_client, parameter_name: str = SLACK_BOT_TOKEN_PARAMETER) -> SlackClient:
    slack_bot_token = get_parameter(ssm_client, parameter_name)
    return SlackClient(slack_bot_token)
