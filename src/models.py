#!/usr/bin/env python3
"""
Data models for the Slack GitHub Action
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from constants import (
    DEFAULT_AWS_SESSION_NAME,
    DEFAULT_REPOSITORY_OWNER,
    FAILED_GITHUB_CONCLUSIONS,
    GITHUB_TOKEN_PARAMETER,
    SLACK_BOT_TOKEN_PARAMETER,
)


@dataclass(frozen=True)
class WorkflowRunIdentifier:
    """Identifies a single GitHub Actions workflow run"""
    owner: str
    repo: str
    run_id: int


@dataclass
class StepOutcome:
    name: str
    conclusion: Optional[str]


@dataclass
class JobOutcome:
    name: str
    conclusion: Optional[str]
    html_url: Optional[str] = None
    steps: List[StepOutcome] = field(default_factory=list)


@dataclass
class WorkflowRunDetails:
    """Details shown in every Slack notification"""
    repository: str
    branch: str
    commit_message: str
    commit_sha: str
    workflow_name: str
    url: str


@dataclass
class FailedWorkflowRunDetails(WorkflowRunDetails):
    """Run details plus the first failing job and step"""
    # Defaults only satisfy dataclass field ordering; __post_init__ requires values
    failed_job: str = ""
    failed_step: str = ""
    failed_step_url: str = ""

    def __post_init__(self):
        if not self.failed_job or not self.failed_step:
            raise ValueError("A failed workflow run needs the failed job and failed step")


@dataclass
class CloudCredential:
    """Temporary AWS credentials obtained through OIDC federation"""
    access_key_id: str
    secret_access_key: str
    session_token: Optional[str] = None

    def __repr__(self) -> str:
        return f"CloudCredential(access_key_id={self.access_key_id!r})"


@dataclass
class NotificationPolicy:
    """Policy values the orchestrator is configured with"""
    allowed_owner: str = DEFAULT_REPOSITORY_OWNER
    failed_conclusions: Tuple[str, ...] = FAILED_GITHUB_CONCLUSIONS
    default_session_name: str = DEFAULT_AWS_SESSION_NAME
    github_token_parameter: str = GITHUB_TOKEN_PARAMETER
    slack_token_parameter: str = SLACK_BOT_TOKEN_PARAMETER
