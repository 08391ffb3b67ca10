"""
Refresh domain models.

Contains the data structures passed between the shell, cluster and workflow
layers: command results, session credentials, the per-run naming plan and
the run report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


# ============================================================================
# Enumerations
# ============================================================================

class StepStatus(Enum):
    """Outcome of a single workflow or cleanup step."""
    SUCCESS = "success"
    WARNING = "warning"  # Step failed but the workflow continued
    FAILED = "failed"
    SKIPPED = "skipped"  # Dry run


class StepKind(Enum):
    """Whether a step belongs to the main sequence or to deferred cleanup."""
    WORKFLOW = "workflow"
    CLEANUP = "cleanup"


# ============================================================================
# Execution Models
# ============================================================================

@dataclass
class CommandResult:
    """
    Result of running one local shell command.

    Attributes:
        command: Command line with secrets redacted
        exit_code: Process exit status
        stdout: Captured standard output
        stderr: Captured standard error
    """
    command: str
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class AwsSessionCredentials:
    """Temporary AWS credentials used to reach the cluster."""
    access_key_id: str
    secret_access_key: str
    session_token: str

    def env_prefix(self) -> str:
        """Environment assignments prepended to every kubectl invocation."""
        return (
            f'AWS_ACCESS_KEY_ID="{self.access_key_id}" '
            f'AWS_SECRET_ACCESS_KEY="{self.secret_access_key}" '
            f'AWS_SESSION_TOKEN="{self.session_token}"'
        )

    def __repr__(self) -> str:
        return f"AwsSessionCredentials(access_key_id={self.access_key_id!r}, ...)"


# ============================================================================
# Workflow Models
# ============================================================================

@dataclass(frozen=True)
class RefreshPlan:
    """
    Names derived from the run timestamp.

    Attributes:
        timestamp: Unix time (seconds) the run started
        dump_file: Dump file name, relative to the pod working directory
        local_dump_file: Local path the dump is copied to
        restore_db: Scratch database the dump is restored into
        previous_db: Name the current local database is renamed to
        database: Local database being replaced
    """
    timestamp: int
    database: str
    dump_file: str
    local_dump_file: str
    restore_db: str
    previous_db: str

    @classmethod
    def from_timestamp(cls, database: str, timestamp: int, local_dump_dir: str = "~") -> RefreshPlan:
        dump_file = f"dump_{timestamp}.sql"
        return cls(
            timestamp=timestamp,
            database=database,
            dump_file=dump_file,
            local_dump_file=f"{local_dump_dir.rstrip('/')}/{dump_file}",
            restore_db=f"{database}_r_{timestamp}",
            previous_db=f"{database}_{timestamp}",
        )


@dataclass
class StepRecord:
    """One executed step of a refresh run."""
    name: str
    status: StepStatus
    kind: StepKind = StepKind.WORKFLOW
    output: str = ""
    error: str | None = None


@dataclass
class RefreshReport:
    """
    Outcome of a refresh run.

    Steps are recorded in execution order; cleanup steps follow the workflow
    steps in the order they actually ran (reverse of registration).
    """
    plan: RefreshPlan
    pod: str
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    steps: list[StepRecord] = field(default_factory=list)

    def record(self, name: str, status: StepStatus, kind: StepKind = StepKind.WORKFLOW,
               output: str = "", error: str | None = None) -> StepRecord:
        step = StepRecord(name=name, status=status, kind=kind, output=output, error=error)
        self.steps.append(step)
        return step

    @property
    def warnings(self) -> list[StepRecord]:
        return [s for s in self.steps if s.status == StepStatus.WARNING]

    @property
    def failed(self) -> list[StepRecord]:
        return [s for s in self.steps if s.status == StepStatus.FAILED]

    @property
    def success(self) -> bool:
        return not self.failed
