"""
Local shell command runner.

Every external tool (aws, kubectl, psql, pg_restore, rm) is reached through
one `bash -c` invocation built as a string. This module runs those strings,
captures their output and keeps registered secrets out of the logs.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Iterable

from dbrefresh.domain.models import CommandResult

logger = logging.getLogger(__name__)

REDACTED = "***"


class CommandError(RuntimeError):
    """
    A shell command exited with a non-zero status.

    The exception message is the command's stderr, which is what the
    operator needs to see; the (redacted) command and exit code are kept as
    attributes.
    """

    def __init__(self, stderr: str, command: str = "", exit_code: int | None = None):
        super().__init__(stderr.strip() or f"Command failed with exit code {exit_code}")
        self.stderr = stderr
        self.command = command
        self.exit_code = exit_code


class ShellRunner:
    """
    Runs shell command strings through bash.

    Usage:
        runner = ShellRunner()
        runner.register_secret(password)
        out = runner.run("psql ... -c 'SELECT 1'")
    """

    def __init__(
        self,
        shell: str = "bash",
        timeout: int | None = None,
        dry_run: bool = False,
        secrets: Iterable[str] = (),
    ):
        """
        Initialize the runner.

        Args:
            shell: Shell executable used for `<shell> -c <command>`
            timeout: Optional per-command timeout in seconds
            dry_run: If True, log commands without executing them
            secrets: Values to redact from logged commands and errors
        """
        self.shell = shell
        self.timeout = timeout
        self.dry_run = dry_run
        self._secrets: set[str] = set()
        for secret in secrets:
            self.register_secret(secret)

    def register_secret(self, value: str | None) -> None:
        """Redact `value` from every command logged from now on."""
        if value:
            self._secrets.add(value)
            if "'" in value:
                # The form it takes inside a shlex.quote'd pod command
                self._secrets.add(value.replace("'", "'\"'\"'"))

    def redact(self, text: str) -> str:
        # Longest first so a secret containing another is fully masked
        for secret in sorted(self._secrets, key=len, reverse=True):
            text = text.replace(secret, REDACTED)
        return text

    def try_run(self, command: str, mutating: bool = True) -> CommandResult:
        """
        Run a command and return its result without raising on failure.

        Args:
            command: Shell command line
            mutating: False for read-only lookups, which still run in dry-run mode

        Returns:
            CommandResult with exit code and captured output
        """
        shown = self.redact(command)
        logger.info("Run [%s -c %s]", self.shell, shown)

        if self.dry_run and mutating:
            logger.info("Dry run: skipped")
            return CommandResult(command=shown)

        try:
            proc = subprocess.run(
                [self.shell, "-c", command],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandError(f"Shell not found: {self.shell}", command=shown) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                f"Command timed out after {self.timeout}s", command=shown
            ) from e

        result = CommandResult(
            command=shown,
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=self.redact(proc.stderr or ""),
        )
        if not result.success:
            logger.debug("Exit code %d: %s", result.exit_code, result.stderr.strip())
        return result

    def run(self, command: str, mutating: bool = True) -> str:
        """
        Run a command and return its stdout.

        Raises:
            CommandError: If the command exits with a non-zero status
        """
        result = self.try_run(command, mutating=mutating)
        if not result.success:
            raise CommandError(result.stderr, command=result.command, exit_code=result.exit_code)
        return result.stdout
