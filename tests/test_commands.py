"""
Tests for the command-line builders.
"""

import shlex

import pytest

from dbrefresh.domain.config import DbConfig
from dbrefresh.infrastructure.commands import (
    build_client_install_cmds,
    build_dump_cmd,
    build_kubectl_cmd,
    build_pod_exec_cmd,
    build_psql_cmd,
    build_remove_cmd,
    build_restore_cmd,
)


@pytest.fixture
def db():
    return DbConfig(host="localhost", port=5433, database="app", username="postgres", password="s3cret")


class TestPostgresCommands:
    """psql / pg_dump / pg_restore formats."""

    def test_psql(self, db):
        assert build_psql_cmd(db, "app_r_1", "CREATE DATABASE app_r_1") == (
            'PGPASSWORD=s3cret psql -h localhost -p 5433 -U postgres -d app_r_1 '
            '-c "CREATE DATABASE app_r_1"'
        )

    def test_dump_uses_configured_database(self, db):
        assert build_dump_cmd(db, "dump_1.sql") == (
            "PGPASSWORD=s3cret pg_dump -h localhost -p 5433 -U postgres -d app -Fc -x -f dump_1.sql"
        )

    def test_restore_targets_given_database(self, db):
        assert build_restore_cmd(db, "app_r_1", "~/dump_1.sql") == (
            "PGPASSWORD=s3cret pg_restore -h localhost -p 5433 -U postgres -d app_r_1 "
            "-x -O -c --if-exists ~/dump_1.sql"
        )


class TestKubectlCommands:
    """kubectl invocation formats."""

    def test_kubectl(self):
        assert build_kubectl_cmd('AWS_ACCESS_KEY_ID="a"', "prod", "get pods") == (
            'AWS_ACCESS_KEY_ID="a" kubectl -n prod get pods'
        )

    def test_kubectl_without_access(self):
        assert build_kubectl_cmd("", "prod", "get pods") == "kubectl -n prod get pods"

    def test_pod_exec_quotes_inner_command(self):
        cmd = build_pod_exec_cmd("", "api-1", "prod", "rm -f dump_1.sql")
        assert cmd == "kubectl exec -i api-1 -n prod -- bash -c 'rm -f dump_1.sql'"

    def test_pod_exec_survives_single_quotes(self):
        """Inner single quotes are preserved through the outer shell."""
        inner = "echo 'hello' > /tmp/x"
        cmd = build_pod_exec_cmd("", "api-1", "prod", inner)
        assert shlex.split(cmd)[-1] == inner


class TestClientInstall:
    """Postgres client installation inside the pod."""

    def test_four_commands_in_order(self):
        cmds = build_client_install_cmds("15")
        assert len(cmds) == 4
        assert cmds[0] == "apt-get update && apt-get install -y lsb-release"
        assert cmds[1] == (
            'echo "deb http://apt.postgresql.org/pub/repos/apt $(lsb_release -cs)-pgdg main" '
            "> /etc/apt/sources.list.d/pgdg.list"
        )
        assert cmds[2] == "wget --quiet -O - https://www.postgresql.org/media/keys/ACCC4CF8.asc | apt-key add -"
        assert cmds[3] == "apt-get update && apt-get -y install postgresql-client-15"


def test_remove():
    assert build_remove_cmd("~/dump_1.sql") == "rm -f ~/dump_1.sql"
