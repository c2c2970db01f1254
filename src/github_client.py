#!/usr/bin/env python3
"""
GitHub client utilities
"""

from typing import Iterable, List, Optional, Union

import requests
from github import Auth, Github, GithubException

from constants import FAILED_GITHUB_CONCLUSIONS, GITHUB_API_URL, REQUEST_TIMEOUT_SECONDS, UNKNOWN_BRANCH_NAME, UNKNOWN_STEP_NAME
from errors import RemoteQueryError
from models import FailedWorkflowRunDetails, JobOutcome, StepOutcome, WorkflowRunDetails, WorkflowRunIdentifier


def find_failed_job(jobs: Iterable[JobOutcome], failed_conclusions=FAILED_GITHUB_CONCLUSIONS) -> Optional[JobOutcome]:
    """Return the first job with a failed conclusion, in list order"""
    for job in jobs:
        if job.conclusion is not None and job.conclusion in failed_conclusions:
            return job
    return None


def find_failed_step(job: JobOutcome, failed_conclusions=FAILED_GITHUB_CONCLUSIONS) -> Optional[StepOutcome]:
    """Return the first step of the job with a failed conclusion"""
    for step in job.steps:
        if step.conclusion is not None and step.conclusion in failed_conclusions:
            return step
    return None


class GitHubClient:
    def __init__(self, github_token: str, workflow_run: WorkflowRunIdentifier):
        self.github_token = github_token
        self.workflow_run = workflow_run
        # No retries: a failed query fails the whole notification
        self.github = Github(auth=Auth.Token(self.github_token), retry=None)

    def list_jobs(self) -> List[JobOutcome]:
        """List every job of the workflow run, following pagination"""
        jobs = []

        headers = {
            "Authorization": f"token {self.github_token}",
            "Accept": "application/vnd.github.v3+json"
        }

        run = self.workflow_run
        url = f"{GITHUB_API_URL}/repos/{run.owner}/{run.repo}/actions/runs/{run.run_id}/jobs"
        params = {"per_page": 100}

        while url:
            try:
                response = requests.get(url, headers=headers, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
                response.raise_for_status()
                jobs_data = response.json()
            except (requests.RequestException, ValueError) as e:
                raise RemoteQueryError(f"Unable to list jobs for workflow run {run.run_id}: {e}") from e

            for job in jobs_data.get("jobs", []):
                jobs.append(JobOutcome(
                    name=job.get("name", ""),
                    conclusion=job.get("conclusion"),
                    html_url=job.get("html_url"),
                    steps=[
                        StepOutcome(name=step.get("name", ""), conclusion=step.get("conclusion"))
                        for step in job.get("steps") or []
                    ],
                ))

            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None

        return jobs

    def get_workflow_run_details(self) -> WorkflowRunDetails:
        """Get repository, commit and workflow details of the run"""
        run = self.workflow_run
        try:
            repo = self.github.get_repo(f"{run.owner}/{run.repo}")
            workflow_run = repo.get_workflow_run(run.run_id)

            return WorkflowRunDetails(
                repository=workflow_run.repository.full_name,
                branch=workflow_run.head_branch or UNKNOWN_BRANCH_NAME,
                commit_message=workflow_run.display_title,
                commit_sha=workflow_run.head_sha,
                workflow_name=workflow_run.name,
                url=workflow_run.html_url,
            )
        except (GithubException, requests.RequestException) as e:
            raise RemoteQueryError(f"Unable to get workflow run {run.run_id}: {e}") from e

    def get_workflow_run_status(
        self, failed_conclusions=FAILED_GITHUB_CONCLUSIONS
    ) -> Union[WorkflowRunDetails, FailedWorkflowRunDetails]:
        """Reduce the run to its details, attributing the first failed job and step if any"""
        jobs = self.list_jobs()
        failed_job = find_failed_job(jobs, failed_conclusions)

        details = self.get_workflow_run_details()

        if failed_job is None:
            print(f"✅ No failed jobs in workflow run {self.workflow_run.run_id}")
            return details

        failed_step = find_failed_step(failed_job, failed_conclusions)
        if failed_step is None:
            print(f"⚠️  Job '{failed_job.name}' concluded '{failed_job.conclusion}' without a failed step")
            failed_step_name = UNKNOWN_STEP_NAME
        else:
            failed_step_name = failed_step.name

        print(f"🚨 Job '{failed_job.name}' failed at step '{failed_step_name}'")

        return FailedWorkflowRunDetails(
            repository=details.repository,
            branch=details.branch,
            commit_message=details.commit_message,
            commit_sha=details.commit_sha,
            workflow_name=details.workflow_name,
            url=details.url,
            failed_job=failed_job.name,
            failed_step=failed_step_name,
            failed_step_url=failed_job.html_url or details.url,
        )
