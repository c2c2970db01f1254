#!/usr/bin/env python3
"""
Errors raised while sending a workflow notification
"""


class NotifierError(Exception):
    """Base class for fatal notification errors"""


class Unauthorized(NotifierError):
    """The triggering repository is not owned by the allowed owner"""


class AuthenticationError(NotifierError):
    """OIDC federation did not yield usable AWS credentials"""


class SecretError(NotifierError):
    def __init__(self, parameter_name: str, message: str):
        super().__init__(f"{message}: {parameter_name}")
        self.parameter_name = parameter_name


class SecretNotFound(SecretError):
    def __init__(self, parameter_name: str):
        super().__init__(parameter_name, "SSM parameter not found")


class SecretAccessDenied(SecretError):
    def __init__(self, parameter_name: str):
        super().__init__(parameter_name, "Access denied to SSM parameter")


class RemoteQueryError(NotifierError):
    """A GitHub API query failed"""


class ChannelNotFound(NotifierError):
    def __init__(self, channel_name: str):
        super().__init__(f"Channel name: {channel_name} not found")
        self.channel_name = channel_name


class SlackApiError(NotifierError):
    """The Slack API rejected a channel listing request"""
