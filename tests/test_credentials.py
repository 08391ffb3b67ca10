"""
Tests for AWS session credential extraction.
"""

from unittest.mock import Mock

import pytest

from dbrefresh.domain.models import AwsSessionCredentials
from dbrefresh.infrastructure.aws import CredentialError, CredentialProvider, parse_session_credentials

from conftest import CREDENTIAL_OUTPUT


class TestParseSessionCredentials:
    """Regex extraction from credential command output."""

    def test_pretty_printed_json(self):
        creds = parse_session_credentials(CREDENTIAL_OUTPUT)

        assert creds.access_key_id == "ASIAEXAMPLEKEY"
        assert creds.secret_access_key == "secretAccessValue"
        assert creds.session_token == "sessionTokenValue"

    def test_compact_json(self):
        raw = (
            '{"Credentials":{"AccessKeyId":"AK","SecretAccessKey":"SK",'
            '"SessionToken":"ST","Expiration":"2026-01-01T00:00:00Z"}}'
        )
        assert parse_session_credentials(raw) == AwsSessionCredentials("AK", "SK", "ST")

    def test_whitespace_inside_values_is_removed(self):
        """All whitespace is stripped before matching, including inside values."""
        raw = '"AccessKeyId": "AK 1",\n "SecretAccessKey": "SK",\n "SessionToken": "S\nT",\n "Expiration": "x"'
        creds = parse_session_credentials(raw)
        assert creds.access_key_id == "AK1"
        assert creds.session_token == "ST"

    def test_missing_block(self):
        with pytest.raises(CredentialError):
            parse_session_credentials('{"UserId": "AIDA", "Account": "123"}')

    def test_env_prefix(self):
        creds = AwsSessionCredentials("AK", "SK", "ST")
        assert creds.env_prefix() == (
            'AWS_ACCESS_KEY_ID="AK" AWS_SECRET_ACCESS_KEY="SK" AWS_SESSION_TOKEN="ST"'
        )

    def test_repr_hides_secrets(self):
        text = repr(AwsSessionCredentials("AK", "SK-secret", "ST-secret"))
        assert "SK-secret" not in text
        assert "ST-secret" not in text


class TestCredentialProvider:
    """Identity check then credential command."""

    def test_fetch(self):
        runner = Mock()
        runner.run.side_effect = ["{}", CREDENTIAL_OUTPUT]
        provider = CredentialProvider(runner, "get-creds", "who-am-i")

        creds = provider.fetch()

        assert creds.access_key_id == "ASIAEXAMPLEKEY"
        assert [c.args[0] for c in runner.run.call_args_list] == ["who-am-i", "get-creds"]
        runner.register_secret.assert_any_call("secretAccessValue")
        runner.register_secret.assert_any_call("sessionTokenValue")

    def test_lookups_are_not_mutating(self):
        """Credential commands still run in dry-run mode."""
        runner = Mock()
        runner.run.side_effect = ["{}", CREDENTIAL_OUTPUT]

        CredentialProvider(runner, "get-creds", "who-am-i").fetch()

        for call in runner.run.call_args_list:
            assert call.kwargs["mutating"] is False
