"""
dbrefresh - replace a local Postgres database with a copy of a cluster one.

Dumps a database from inside a running Kubernetes pod, copies the dump
locally and swaps it in by renaming, keeping the previous local database
until cleanup.

Usage:
    # CLI (recommended)
    dbrefresh run --config-dir .

    # Programmatic
    from dbrefresh import RefreshService
    from dbrefresh.infrastructure.config import ConfigRepository
    from dbrefresh.infrastructure.shell import ShellRunner

    config = ConfigRepository().load_config()
    report = RefreshService(config, ShellRunner()).run()
"""

__version__ = "0.1.0"

from dbrefresh.application.refresh_service import RefreshService

__all__ = ["RefreshService", "__version__"]
