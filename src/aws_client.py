#!/usr/bin/env python3
"""
AWS utilities: OIDC federation and SSM parameter lookup
"""

import os
from typing import Optional

import boto3
import requests
from botocore.config import Config
from botocore.exceptions import ClientError

from constants import AWS_STS_AUDIENCE, DEFAULT_AWS_SESSION_NAME, REQUEST_TIMEOUT_SECONDS
from errors import AuthenticationError, SecretAccessDenied, SecretNotFound
from models import CloudCredential

# No retries: a failed AWS call fails the whole notification
NO_RETRY_CONFIG = Config(retries={"total_max_attempts": 1})


def get_parameter(ssm_client, parameter_name: str) -> str:
    """Get the decrypted value of an SSM parameter"""
    try:
        response = ssm_client.get_parameter(Name=parameter_name, WithDecryption=True)
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code")
        if error_code == "ParameterNotFound":
            raise SecretNotFound(parameter_name) from e
        if error_code == "AccessDeniedException":
            raise SecretAccessDenied(parameter_name) from e
        raise

    return response["Parameter"]["Value"]


def get_id_token(audience: str = AWS_STS_AUDIENCE) -> str:
    """Request an OIDC token for this workflow run from GitHub"""
    request_url = os.getenv("ACTIONS_ID_TOKEN_REQUEST_URL")
    request_token = os.getenv("ACTIONS_ID_TOKEN_REQUEST_TOKEN")

    if not request_url or not request_token:
        raise AuthenticationError(
            "OIDC token request variables are not set. Does the workflow have 'id-token: write' permission?"
        )

    response = requests.get(
        request_url,
        params={"audience": audience},
        headers={"Authorization": f"bearer {request_token}"},
        timeout=REQUEST_TIMEOUT_SECONDS,
    )
    response.raise_for_status()

    return response.json()["value"]


def login_to_aws(
    role_arn: str,
    region: str,
    session_name: Optional[str] = None,
    default_session_name: str = DEFAULT_AWS_SESSION_NAME,
) -> CloudCredential:
    """Exchange the GitHub OIDC token for temporary credentials of the given role"""
    id_token = get_id_token(AWS_STS_AUDIENCE)
    sts_client = boto3.client("sts", region_name=region, config=NO_RETRY_CONFIG)

    output = sts_client.assume_role_with_web_identity(
        RoleArn=role_arn,
        WebIdentityToken=id_token,
        RoleSessionName=session_name or default_session_name,
    )

    credentials = output.get("Credentials")
    if not credentials or credentials.get("AccessKeyId") is None or credentials.get("SecretAccessKey") is None:
        raise AuthenticationError(f"Unable to assume role={role_arn}, region={region}")

    print("Authenticated with AWS")

    return CloudCredential(
        access_key_id=credentials["AccessKeyId"],
        secret_access_key=credentials["SecretAccessKey"],
        session_token=credentials.get("SessionToken"),
    )


def create_ssm_client(region: str, credential: Optional[CloudCredential] = None):
    """Create an SSM client, using the ambient credential chain when none is given"""
    if credential is None:
        return boto3.client("ssm", region_name=region, config=NO_RETRY_CONFIG)

    return boto3.client(
        "ssm",
        region_name=region,
        config=NO_RETRY_CONFIG,
        aws_access_key_id=credential.access_key_id,
        aws_secret_access_key=credential.secret_access_key,
        aws_session_token=credential.session_token,
    )
