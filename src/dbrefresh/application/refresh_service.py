"""
Refresh service - dump a cluster database and swap it into a local server.

Sequence:
    1. Install the Postgres client inside the source pod
    2. pg_dump the remote database from the pod
    3. kubectl cp the dump to the local machine
    4. Create a scratch database locally and pg_restore into it
    5. Rename the current local database aside, rename the scratch one in

Every step that leaves something behind registers a cleanup. Cleanups run
in reverse order once the sequence ends, whether it succeeded or not, so the
previous local database survives under `<db>_<ts>` until the very end.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from dbrefresh.application.cleanup import CleanupStack
from dbrefresh.domain.config import RefreshConfig
from dbrefresh.domain.models import RefreshPlan, RefreshReport, StepStatus
from dbrefresh.infrastructure.aws import CredentialProvider
from dbrefresh.infrastructure.commands import (
    build_client_install_cmds,
    build_dump_cmd,
    build_psql_cmd,
    build_remove_cmd,
    build_restore_cmd,
)
from dbrefresh.infrastructure.kube import KubectlClient
from dbrefresh.infrastructure.shell import ShellRunner

logger = logging.getLogger(__name__)


class RefreshService:
    """
    Runs one database refresh.

    Usage:
        service = RefreshService(config, ShellRunner())
        service.prepare()
        report = service.run()
    """

    def __init__(
        self,
        config: RefreshConfig,
        runner: ShellRunner,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the refresh service.

        Args:
            config: Validated refresh configuration
            runner: Shell runner used for every external command
            clock: Source of the Unix timestamp naming this run's artifacts
        """
        self.config = config
        self.runner = runner
        self.clock = clock
        self.kube: Optional[KubectlClient] = None
        self.pod: Optional[str] = None
        self.report: Optional[RefreshReport] = None

        self.runner.register_secret(config.local_db.get_password())
        self.runner.register_secret(config.remote_db.get_password())

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def prepare(self) -> str:
        """
        Obtain cluster credentials and locate the source pod.

        Returns:
            Name of the pod the dump will be taken from
        """
        logger.info("Configuration: %s", self.config.summary())
        provider = CredentialProvider(
            self.runner,
            credential_cmd=self.config.credential_cmd,
            identity_check_cmd=self.config.identity_check_cmd,
        )
        creds = provider.fetch()
        self.kube = KubectlClient(self.runner, creds.env_prefix(), self.config.namespace)
        self.pod = self.kube.find_running_pod(self.config.pod_prefix)
        return self.pod

    def make_plan(self) -> RefreshPlan:
        return RefreshPlan.from_timestamp(
            self.config.local_db.database,
            int(self.clock()),
            self.config.local_dump_dir,
        )

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def run(self) -> RefreshReport:
        """
        Execute the refresh.

        Returns:
            RefreshReport listing workflow and cleanup steps in execution order

        Raises:
            CommandError: If a required command fails (after cleanup ran)
        """
        if self.kube is None or self.pod is None:
            self.prepare()

        plan = self.make_plan()
        report = RefreshReport(plan=plan, pod=self.pod)
        # Kept on the service so a caller can show the partial report on failure
        self.report = report
        logger.info(
            "Refreshing %s from pod %s (restore=%s, previous=%s)",
            plan.database, self.pod, plan.restore_db, plan.previous_db,
        )

        try:
            with CleanupStack(report, dry_run=self.runner.dry_run) as cleanup:
                self._install_client(report)
                self._dump(report, cleanup, plan)
                self._copy(report, cleanup, plan)
                self._create_restore_db(report, cleanup, plan)
                self._restore(report, plan)
                self._swap(report, cleanup, plan)
        finally:
            report.completed_at = datetime.now()

        if report.warnings:
            logger.warning("Refresh finished with %d warning(s)", len(report.warnings))
        else:
            logger.info("Refresh finished: %s now holds the remote data", plan.database)
        return report

    def _step(self, report: RefreshReport, name: str, action: Callable[[], str]) -> str:
        logger.info("Step: %s", name)
        try:
            output = action()
        except Exception as e:
            report.record(name, StepStatus.FAILED, error=str(e))
            raise
        if output and output.strip():
            logger.debug("%s", output.rstrip())
        status = StepStatus.SKIPPED if self.runner.dry_run else StepStatus.SUCCESS
        report.record(name, status, output=output)
        return output

    def _pod_exec(self, command: str) -> Callable[[], str]:
        return lambda: self.kube.exec(self.pod, command)

    def _local_psql(self, run_db: str, sql: str) -> Callable[[], str]:
        return lambda: self.runner.run(build_psql_cmd(self.config.local_db, run_db, sql))

    def _install_client(self, report: RefreshReport) -> None:
        version = self.config.pg_client_version
        commands = build_client_install_cmds(version)
        for index, command in enumerate(commands, start=1):
            self._step(
                report,
                f"install postgresql-client-{version} in pod ({index}/{len(commands)})",
                self._pod_exec(command),
            )

    def _dump(self, report: RefreshReport, cleanup: CleanupStack, plan: RefreshPlan) -> None:
        self._step(
            report,
            f"dump {self.config.remote_db.database} to pod:{plan.dump_file}",
            self._pod_exec(build_dump_cmd(self.config.remote_db, plan.dump_file)),
        )
        cleanup.push(
            f"remove pod:{plan.dump_file}",
            self._pod_exec(build_remove_cmd(plan.dump_file)),
        )

    def _copy(self, report: RefreshReport, cleanup: CleanupStack, plan: RefreshPlan) -> None:
        remote_path = f"{self.config.pod_workdir}/{plan.dump_file}"
        self._step(
            report,
            f"copy pod:{remote_path} to {plan.local_dump_file}",
            lambda: self.kube.copy_from_pod(self.pod, remote_path, plan.local_dump_file),
        )
        cleanup.push(
            f"remove {plan.local_dump_file}",
            lambda: self.runner.run(build_remove_cmd(plan.local_dump_file)),
        )

    def _create_restore_db(self, report: RefreshReport, cleanup: CleanupStack, plan: RefreshPlan) -> None:
        self._step(
            report,
            f"create database {plan.restore_db}",
            self._local_psql(plan.database, f"CREATE DATABASE {plan.restore_db}"),
        )
        # A no-op once the swap renamed it to the live name
        cleanup.push(
            f"drop database {plan.restore_db} if exists",
            self._local_psql(plan.database, f"DROP DATABASE IF EXISTS {plan.restore_db}"),
        )

    def _restore(self, report: RefreshReport, plan: RefreshPlan) -> None:
        name = f"restore {plan.local_dump_file} into {plan.restore_db}"
        logger.info("Step: %s", name)
        result = self.runner.try_run(
            build_restore_cmd(self.config.local_db, plan.restore_db, plan.local_dump_file)
        )
        if result.success:
            if result.stdout.strip():
                logger.debug("%s", result.stdout.rstrip())
            status = StepStatus.SKIPPED if self.runner.dry_run else StepStatus.SUCCESS
            report.record(name, status, output=result.stdout)
            return

        # pg_restore reports non-fatal problems through its exit status too
        logger.warning("***WARNING RESTORE ERROR: %s", result.stderr.strip())
        report.record(name, StepStatus.WARNING, output=result.stdout, error=result.stderr)

    def _swap(self, report: RefreshReport, cleanup: CleanupStack, plan: RefreshPlan) -> None:
        # psql never connects to the database it renames
        self._step(
            report,
            f"rename {plan.database} to {plan.previous_db}",
            self._local_psql(
                plan.restore_db,
                f"ALTER DATABASE {plan.database} RENAME TO {plan.previous_db}",
            ),
        )
        if self.config.keep_previous:
            logger.info("Keeping previous database as %s", plan.previous_db)
        else:
            cleanup.push(
                f"drop database {plan.previous_db}",
                self._local_psql(plan.database, f"DROP DATABASE {plan.previous_db}"),
            )

        self._step(
            report,
            f"rename {plan.restore_db} to {plan.database}",
            self._local_psql(
                plan.previous_db,
                f"ALTER DATABASE {plan.restore_db} RENAME TO {plan.database}",
            ),
        )
