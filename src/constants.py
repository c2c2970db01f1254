#!/usr/bin/env python3
"""
Constants for the Slack GitHub Action
"""

# Only repositories owned by this account may use the action
DEFAULT_REPOSITORY_OWNER = "ruchira088"

# SSM parameters holding the Slack bot token and the GitHub read token
SLACK_BOT_TOKEN_PARAMETER = "/github/slack/bot-token"
GITHUB_TOKEN_PARAMETER = "/github/slack-github-action/read"

# Audience requested for the GitHub OIDC token
AWS_STS_AUDIENCE = "sts.amazonaws.com"

DEFAULT_AWS_SESSION_NAME = "SlackGitHubActionOIDC"

# Job and step conclusions reported as failures
FAILED_GITHUB_CONCLUSIONS = ("failure", "timed_out")

UNKNOWN_STEP_NAME = "Unknown Step"
UNKNOWN_BRANCH_NAME = "Unknown Branch"

GITHUB_API_URL = "https://api.github.com"
SLACK_API_URL = "https://slack.com/api"

REQUEST_TIMEOUT_SECONDS = 30
