#!/usr/bin/env python3
"""
Local runner for the Slack GitHub Action
This script reports an existing workflow run to Slack using your local AWS credentials,
skipping the OIDC login that only works inside GitHub Actions
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

from aws_client import create_ssm_client
from main import run_notification_workflow
from models import WorkflowRunIdentifier


def main():
    """Main local run function"""
    print("🧪 Slack GitHub Action Local Run")
    print("=" * 50)

    region = os.getenv("AWS_REGION", "ap-southeast-2")
    channel = os.getenv("SLACK_CHANNEL", "github-actions")
    run_id = os.getenv("GITHUB_RUN_ID")

    if not run_id:
        print("❌ Set GITHUB_RUN_ID to the workflow run you want to report")
        sys.exit(1)

    workflow_run = WorkflowRunIdentifier(
        owner=os.getenv("GITHUB_OWNER", "ruchira088"),
        repo=os.getenv("GITHUB_REPO", "dynamic-dns"),
        run_id=int(run_id),
    )

    print(f"   Repository: {workflow_run.owner}/{workflow_run.repo}")
    print(f"   Run ID: {workflow_run.run_id}")
    print(f"   Region: {region}")
    print(f"   Channel: {channel}")

    ssm_client = create_ssm_client(region)

    if run_notification_workflow(ssm_client, workflow_run, channel):
        print("\n🎉 Notification sent!")
    else:
        print("\n💥 Slack did not accept the message")
        sys.exit(1)


if __name__ == "__main__":
    main()
