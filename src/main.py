#!/usr/bin/env python3
"""
Slack GitHub Action - posts the result of a workflow run to a Slack channel
"""

import json
import os
import sys
from typing import Optional

from aws_client import create_ssm_client, get_parameter, login_to_aws
from errors import Unauthorized
from github_client import GitHubClient
from models import NotificationPolicy, WorkflowRunIdentifier
from slack_client import create_slack_client


def repository_owner(repository_full_name: Optional[str]) -> Optional[str]:
    """Owner segment of an 'owner/name' repository full name"""
    if not repository_full_name or "/" not in repository_full_name:
        return None
    return repository_full_name.split("/", 1)[0]


def check_repository_owner(repository_full_name: Optional[str], allowed_owner: str) -> None:
    if repository_owner(repository_full_name) != allowed_owner:
        raise Unauthorized(
            f"Only repositories owned by {allowed_owner} can use this GitHub Action. "
            f"Repository: {repository_full_name}"
        )


def aws_session_name(repository_name: Optional[str]) -> Optional[str]:
    return f"{repository_name}-oidc" if repository_name is not None else None


def run_notification_workflow(
    ssm_client,
    workflow_run: WorkflowRunIdentifier,
    slack_channel: str,
    policy: Optional[NotificationPolicy] = None,
) -> bool:
    """Report the status of a workflow run to Slack. Returns False on a soft Slack failure."""
    policy = policy or NotificationPolicy()

    github_token = get_parameter(ssm_client, policy.github_token_parameter)
    github = GitHubClient(github_token, workflow_run)

    details = github.get_workflow_run_status(policy.failed_conclusions)

    slack = create_slack_client(ssm_client, policy.slack_token_parameter)
    return slack.publish(slack_channel, details)


class SlackNotifier:
    """Reads the action inputs and GitHub context, then sends the notification"""

    def __init__(self):
        self.aws_role_arn = os.getenv("INPUT_AWS_ROLE_ARN")
        self.aws_region = os.getenv("INPUT_AWS_REGION")
        self.slack_channel = os.getenv("INPUT_SLACK_CHANNEL")

        defaults = NotificationPolicy()
        self.policy = NotificationPolicy(
            allowed_owner=os.getenv("INPUT_ALLOWED_OWNER") or defaults.allowed_owner,
            github_token_parameter=os.getenv("INPUT_GITHUB_TOKEN_PARAMETER") or defaults.github_token_parameter,
            slack_token_parameter=os.getenv("INPUT_SLACK_TOKEN_PARAMETER") or defaults.slack_token_parameter,
        )

        # GitHub context
        self.repository = os.getenv("GITHUB_REPOSITORY")
        self.run_id = os.getenv("GITHUB_RUN_ID")
        self.event_payload = self._load_event_payload(os.getenv("GITHUB_EVENT_PATH"))

        if not all([self.aws_role_arn, self.aws_region, self.slack_channel, self.repository, self.run_id]):
            raise ValueError("Missing required environment variables")

    @staticmethod
    def _load_event_payload(event_path: Optional[str]) -> dict:
        if event_path and os.path.exists(event_path):
            with open(event_path, "r") as f:
                return json.load(f)
        return {}

    def workflow_run(self) -> WorkflowRunIdentifier:
        owner, repo = self.repository.split("/", 1)
        return WorkflowRunIdentifier(owner=owner, repo=repo, run_id=int(self.run_id))

    def run(self) -> None:
        """Main execution method"""
        payload_repository = self.event_payload.get("repository") or {}
        triggering_repository = payload_repository.get("full_name") or self.repository

        check_repository_owner(triggering_repository, self.policy.allowed_owner)

        session_name = aws_session_name(payload_repository.get("name"))
        credential = login_to_aws(
            self.aws_role_arn, self.aws_region, session_name, self.policy.default_session_name
        )
        ssm_client = create_ssm_client(self.aws_region, credential)

        workflow_run = self.workflow_run()
        print(f"🔍 Reporting workflow run {workflow_run.run_id} of {workflow_run.owner}/{workflow_run.repo}")

        delivered = run_notification_workflow(ssm_client, workflow_run, self.slack_channel, self.policy)

        if delivered:
            print("✅ Notification complete!")
        else:
            print("⚠️  Slack did not accept the notification")


def main():
    """Entry point for the Slack GitHub Action"""
    try:
        notifier = SlackNotifier()
        notifier.run()
    except Exception as e:
        print(f"❌ Slack notification failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
