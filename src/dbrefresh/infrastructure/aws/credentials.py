"""
AWS session credential extraction.

The cluster is reached with temporary credentials printed by a configurable
command (typically `aws sts assume-role ...`). The JSON it prints is
flattened and the three values are pulled out with a regular expression, so
any output that embeds the standard `Credentials` block works.
"""

from __future__ import annotations

import logging
import re

from dbrefresh.domain.models import AwsSessionCredentials
from dbrefresh.infrastructure.shell import ShellRunner

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s")
_CREDENTIALS = re.compile(
    r'"AccessKeyId":"(.+)","SecretAccessKey":"(.+)","SessionToken":"(.+)","Expiration"'
)


class CredentialError(RuntimeError):
    """Credential command output did not contain session credentials."""


def parse_session_credentials(raw: str) -> AwsSessionCredentials:
    """
    Extract session credentials from credential command output.

    Args:
        raw: Command stdout, pretty-printed or compact JSON

    Returns:
        AwsSessionCredentials

    Raises:
        CredentialError: If the credential block is missing
    """
    compact = _WHITESPACE.sub("", raw)
    match = _CREDENTIALS.search(compact)
    if not match:
        raise CredentialError(
            "Could not find AccessKeyId/SecretAccessKey/SessionToken in credential output"
        )
    access_key_id, secret_access_key, session_token = match.groups()
    return AwsSessionCredentials(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
    )


class CredentialProvider:
    """Verifies the AWS login and fetches session credentials."""

    def __init__(self, runner: ShellRunner, credential_cmd: str, identity_check_cmd: str):
        self.runner = runner
        self.credential_cmd = credential_cmd
        self.identity_check_cmd = identity_check_cmd

    def fetch(self) -> AwsSessionCredentials:
        """
        Run the identity check, then the credential command.

        The secret key and session token are registered with the runner so
        later kubectl command lines are logged with them masked.

        Raises:
            CommandError: If either command fails
            CredentialError: If the credential output cannot be parsed
        """
        self.runner.run(self.identity_check_cmd, mutating=False)
        output = self.runner.run(self.credential_cmd, mutating=False)
        creds = parse_session_credentials(output)
        self.runner.register_secret(creds.secret_access_key)
        self.runner.register_secret(creds.session_token)
        logger.info("Obtained session credentials for access key %s", creds.access_key_id)
        return creds
