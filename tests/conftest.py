"""
Shared fixtures for dbrefresh tests.

Provides a recording shell runner so the workflow can be exercised without
aws, kubectl or Postgres binaries.
"""

from __future__ import annotations

from typing import List, Tuple

import pytest

from dbrefresh.domain.config import DbConfig, RefreshConfig
from dbrefresh.domain.models import CommandResult
from dbrefresh.infrastructure.shell import ShellRunner

TIMESTAMP = 1700000000
POD = "api-7d9f8c-x2k4q"

CREDENTIAL_OUTPUT = """{
    "Credentials": {
        "AccessKeyId": "ASIAEXAMPLEKEY",
        "SecretAccessKey": "secretAccessValue",
        "SessionToken": "sessionTokenValue",
        "Expiration": "2026-10-19T12:00:00+00:00"
    },
    "AssumedRoleUser": {
        "AssumedRoleId": "AROAEXAMPLE:dev",
        "Arn": "arn:aws:sts::123456789012:assumed-role/dev/dev"
    }
}
"""


class RecordingRunner(ShellRunner):
    """
    ShellRunner that records commands instead of executing them.

    Rules are (substring, CommandResult-kwargs) pairs; the first rule whose
    substring occurs in the command decides the result. Unmatched commands
    succeed with empty output.
    """

    def __init__(self, rules: List[Tuple[str, dict]] | None = None, dry_run: bool = False):
        super().__init__(dry_run=dry_run)
        self.rules = list(rules or [])
        self.commands: List[str] = []
        self.executed: List[str] = []

    def add_rule(self, fragment: str, **result) -> None:
        self.rules.insert(0, (fragment, result))

    def try_run(self, command: str, mutating: bool = True) -> CommandResult:
        self.commands.append(command)
        if self.dry_run and mutating:
            return CommandResult(command=self.redact(command))
        self.executed.append(command)
        for fragment, result in self.rules:
            if fragment in command:
                return CommandResult(command=self.redact(command), **result)
        return CommandResult(command=self.redact(command))

    def index_of(self, fragment: str) -> int:
        """Position of the first recorded command containing `fragment`."""
        for index, command in enumerate(self.commands):
            if fragment in command:
                return index
        raise AssertionError(f"No command containing {fragment!r}")

    def ran(self, fragment: str) -> bool:
        return any(fragment in command for command in self.executed)


@pytest.fixture
def config() -> RefreshConfig:
    return RefreshConfig(
        namespace="prod",
        pod_prefix="api-",
        credential_cmd="aws sts assume-role --role-arn arn:aws:iam::123456789012:role/dev --role-session-name dev",
        local_db=DbConfig(host="localhost", port=5432, database="app", username="postgres", password="localpw"),
        remote_db=DbConfig(host="db.internal", port="5432", database="app_prod", username="reader", password="remotepw"),
    )


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner(
        rules=[
            ("assume-role", {"stdout": CREDENTIAL_OUTPUT}),
            ("get pods", {"stdout": f"{POD}\n"}),
        ]
    )
