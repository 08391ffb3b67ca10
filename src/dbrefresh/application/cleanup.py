"""
Deferred cleanup for the refresh workflow.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from dbrefresh.domain.models import RefreshReport, StepKind, StepStatus

logger = logging.getLogger(__name__)


class CleanupStack:
    """
    Collects cleanup actions and runs them last-in first-out.

    Every registered action runs, even when an earlier one fails. The first
    failure is remembered and re-raised by the context manager once all
    actions ran, unless the block itself already raised (that error wins).

    Usage:
        with CleanupStack(report) as cleanup:
            create_thing()
            cleanup.push("drop thing", drop_thing)
    """

    def __init__(self, report: Optional[RefreshReport] = None, dry_run: bool = False):
        self.report = report
        # Actions still run (the runner skips them); they are recorded as skipped
        self.dry_run = dry_run
        self._actions: List[Tuple[str, Callable[[], object]]] = []

    def push(self, name: str, action: Callable[[], object]) -> None:
        """Register `action` to run during unwinding."""
        self._actions.append((name, action))

    @property
    def pending(self) -> List[str]:
        """Names of actions not yet run, in the order they will run."""
        return [name for name, _ in reversed(self._actions)]

    def unwind(self) -> Optional[BaseException]:
        """
        Run all registered actions in reverse order.

        Returns:
            The first exception raised by an action, or None
        """
        first_error: Optional[BaseException] = None
        while self._actions:
            name, action = self._actions.pop()
            logger.info("Cleanup: %s", name)
            try:
                output = action()
            except Exception as e:  # pylint: disable=broad-except
                logger.error("Cleanup '%s' failed: %s", name, e)
                self._record(name, StepStatus.FAILED, error=str(e))
                if first_error is None:
                    first_error = e
                continue
            status = StepStatus.SKIPPED if self.dry_run else StepStatus.SUCCESS
            self._record(name, status, output=output if isinstance(output, str) else "")
        return first_error

    def _record(self, name: str, status: StepStatus, output: str = "", error: str | None = None) -> None:
        if self.report is not None:
            self.report.record(name, status, kind=StepKind.CLEANUP, output=output, error=error)

    def __enter__(self) -> CleanupStack:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        error = self.unwind()
        if exc is None and error is not None:
            raise error
        return False
