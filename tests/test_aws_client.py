#!/usr/bin/env python3
"""
Tests for AWS OIDC login and SSM parameter lookup
"""

import unittest
from unittest.mock import Mock, patch
import os
import sys

from botocore.exceptions import ClientError

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from aws_client import NO_RETRY_CONFIG, create_ssm_client, get_id_token, get_parameter, login_to_aws
from errors import AuthenticationError, SecretAccessDenied, SecretNotFound
from models import CloudCredential


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "GetParameter")


class TestGetParameter(unittest.TestCase):
    """Test SSM parameter lookup"""

    def test_returns_decrypted_value(self):
        ssm_client = Mock()
        ssm_client.get_parameter.return_value = {"Parameter": {"Value": "my-secret-value"}}

        result = get_parameter(ssm_client, "/my/parameter/path")

        self.assertEqual(result, "my-secret-value")
        ssm_client.get_parameter.assert_called_once_with(Name="/my/parameter/path", WithDecryption=True)

    def test_fetches_on_every_call(self):
        ssm_client = Mock()
        ssm_client.get_parameter.return_value = {"Parameter": {"Value": "value"}}

        get_parameter(ssm_client, "/github/slack/bot-token")
        get_parameter(ssm_client, "/github/slack/bot-token")

        self.assertEqual(ssm_client.get_parameter.call_count, 2)

    def test_parameter_not_found(self):
        ssm_client = Mock()
        ssm_client.get_parameter.side_effect = client_error("ParameterNotFound")

        with self.assertRaises(SecretNotFound) as context:
            get_parameter(ssm_client, "/nonexistent")

        self.assertEqual(context.exception.parameter_name, "/nonexistent")

    def test_access_denied(self):
        ssm_client = Mock()
        ssm_client.get_parameter.side_effect = client_error("AccessDeniedException")

        with self.assertRaises(SecretAccessDenied):
            get_parameter(ssm_client, "/secure/parameter")

    def test_other_client_errors_propagate(self):
        ssm_client = Mock()
        ssm_client.get_parameter.side_effect = client_error("ThrottlingException")

        with self.assertRaises(ClientError):
            get_parameter(ssm_client, "/secure/parameter")


class TestGetIdToken(unittest.TestCase):
    """Test GitHub OIDC token request"""

    @patch("requests.get")
    def test_requests_token_for_audience(self, mock_get):
        mock_response = Mock()
        mock_response.json.return_value = {"value": "id-token"}
        mock_get.return_value = mock_response

        env = {
            "ACTIONS_ID_TOKEN_REQUEST_URL": "https://token.actions.example/token?api-version=2.0",
            "ACTIONS_ID_TOKEN_REQUEST_TOKEN": "request-token",
        }
        with patch.dict(os.environ, env):
            token = get_id_token("sts.amazonaws.com")

        self.assertEqual(token, "id-token")
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], "https://token.actions.example/token?api-version=2.0")
        self.assertEqual(kwargs["params"], {"audience": "sts.amazonaws.com"})
        self.assertEqual(kwargs["headers"]["Authorization"], "bearer request-token")

    def test_missing_request_variables(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(AuthenticationError):
                get_id_token()


class TestLoginToAws(unittest.TestCase):
    """Test role assumption with a web identity token"""

    def setUp(self):
        self.patch_token = patch("aws_client.get_id_token", return_value="id-token")
        self.patch_boto3 = patch("aws_client.boto3")

        self.mock_get_id_token = self.patch_token.start()
        self.mock_boto3 = self.patch_boto3.start()
        self.sts_client = self.mock_boto3.client.return_value

    def tearDown(self):
        self.patch_token.stop()
        self.patch_boto3.stop()

    def test_returns_credentials(self):
        self.sts_client.assume_role_with_web_identity.return_value = {
            "Credentials": {
                "AccessKeyId": "AKIA",
                "SecretAccessKey": "secret",
                "SessionToken": "session",
            }
        }

        with patch("builtins.print") as mock_print:
            credential = login_to_aws("arn:aws:iam::123:role/slack", "ap-southeast-2", "my-repo-oidc")

        self.assertEqual(credential, CloudCredential("AKIA", "secret", "session"))
        self.mock_get_id_token.assert_called_once_with("sts.amazonaws.com")
        self.mock_boto3.client.assert_called_once_with("sts", region_name="ap-southeast-2", config=NO_RETRY_CONFIG)
        self.sts_client.assume_role_with_web_identity.assert_called_once_with(
            RoleArn="arn:aws:iam::123:role/slack",
            WebIdentityToken="id-token",
            RoleSessionName="my-repo-oidc",
        )
        mock_print.assert_called_once_with("Authenticated with AWS")

    def test_default_session_name(self):
        self.sts_client.assume_role_with_web_identity.return_value = {
            "Credentials": {"AccessKeyId": "AKIA", "SecretAccessKey": "secret"}
        }

        credential = login_to_aws("arn:aws:iam::123:role/slack", "ap-southeast-2")

        call_kwargs = self.sts_client.assume_role_with_web_identity.call_args[1]
        self.assertEqual(call_kwargs["RoleSessionName"], "SlackGitHubActionOIDC")
        self.assertIsNone(credential.session_token)

    def test_missing_access_key(self):
        self.sts_client.assume_role_with_web_identity.return_value = {
            "Credentials": {"SecretAccessKey": "secret", "SessionToken": "session"}
        }

        with self.assertRaises(AuthenticationError):
            login_to_aws("arn:aws:iam::123:role/slack", "ap-southeast-2")

    def test_missing_secret_key(self):
        self.sts_client.assume_role_with_web_identity.return_value = {
            "Credentials": {"AccessKeyId": "AKIA", "SessionToken": "session"}
        }

        with patch("builtins.print") as mock_print:
            with self.assertRaises(AuthenticationError) as context:
                login_to_aws("arn:aws:iam::123:role/slack", "ap-southeast-2")

        self.assertIn("role=arn:aws:iam::123:role/slack", str(context.exception))
        mock_print.assert_not_called()

    def test_missing_credentials(self):
        self.sts_client.assume_role_with_web_identity.return_value = {}

        with self.assertRaises(AuthenticationError):
            login_to_aws("arn:aws:iam::123:role/slack", "ap-southeast-2")
        self.assertEqual(self.sts_client.assume_role_with_web_identity.call_count, 1)


class TestCreateSsmClient(unittest.TestCase):

    def test_clients_do_not_retry(self):
        self.assertEqual(NO_RETRY_CONFIG.retries, {"total_max_attempts": 1})

    @patch("aws_client.boto3")
    def test_uses_temporary_credentials(self, mock_boto3):
        create_ssm_client("ap-southeast-2", CloudCredential("AKIA", "secret", "session"))

        mock_boto3.client.assert_called_once_with(
            "ssm",
            region_name="ap-southeast-2",
            config=NO_RETRY_CONFIG,
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
            aws_session_token="session",
        )

    @patch("aws_client.boto3")
    def test_ambient_credentials(self, mock_boto3):
        create_ssm_client("ap-southeast-2")

        mock_boto3.client.assert_called_once_with("ssm", region_name="ap-southeast-2", config=NO_RETRY_CONFIG)


if __name__ == "__main__":
    unittest.main()
