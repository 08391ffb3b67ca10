"""
Command-line builders.

Pure string formatting for every external command the refresh issues.
Nothing here executes anything.
"""

import shlex

from dbrefresh.domain.config import DbConfig

PGDG_REPO_LINE = "deb http://apt.postgresql.org/pub/repos/apt $(lsb_release -cs)-pgdg main"
PGDG_SOURCES_FILE = "/etc/apt/sources.list.d/pgdg.list"
PGDG_KEY_URL = "https://www.postgresql.org/media/keys/ACCC4CF8.asc"

# Custom format, no privileges
DUMP_OPTIONS = "-Fc -x"
# No privileges, no ownership, drop objects before recreating them
RESTORE_OPTIONS = "-x -O -c --if-exists"


def _pg_prefix(db: DbConfig, tool: str, database: str) -> str:
    return (
        f"PGPASSWORD={db.get_password()} {tool} "
        f"-h {db.host} -p {db.port} -U {db.username} -d {database}"
    )


def build_psql_cmd(db: DbConfig, run_db: str, sql: str) -> str:
    """psql running a single statement while connected to `run_db`."""
    return f'{_pg_prefix(db, "psql", run_db)} -c "{sql}"'


def build_dump_cmd(db: DbConfig, filename: str) -> str:
    """pg_dump of `db.database` into `filename`."""
    return f"{_pg_prefix(db, 'pg_dump', db.database)} {DUMP_OPTIONS} -f {filename}"


def build_restore_cmd(db: DbConfig, database: str, filename: str) -> str:
    """pg_restore of `filename` into `database` on the `db` server."""
    return f"{_pg_prefix(db, 'pg_restore', database)} {RESTORE_OPTIONS} {filename}"


def build_kubectl_cmd(access: str, namespace: str, args: str) -> str:
    return f"{access} kubectl -n {namespace} {args}".lstrip()


def build_pod_exec_cmd(access: str, pod: str, namespace: str, command: str) -> str:
    """kubectl exec running `command` through bash inside the pod."""
    return f"{access} kubectl exec -i {pod} -n {namespace} -- bash -c {shlex.quote(command)}".lstrip()


def build_client_install_cmds(version: str) -> list[str]:
    """
    Commands installing postgresql-client-<version> in a Debian based pod.

    Returns:
        Commands to run in order
    """
    return [
        "apt-get update && apt-get install -y lsb-release",
        f'echo "{PGDG_REPO_LINE}" > {PGDG_SOURCES_FILE}',
        f"wget --quiet -O - {PGDG_KEY_URL} | apt-key add -",
        f"apt-get update && apt-get -y install postgresql-client-{version}",
    ]


def build_remove_cmd(path: str) -> str:
    return f"rm -f {path}"
