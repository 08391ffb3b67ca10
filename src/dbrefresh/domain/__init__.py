"""
Domain layer for dbrefresh.

Pure data: configuration models and the records a refresh run produces.
"""

from .models import (
    AwsSessionCredentials,
    CommandResult,
    RefreshPlan,
    RefreshReport,
    StepKind,
    StepRecord,
    StepStatus,
)

__all__ = [
    "AwsSessionCredentials",
    "CommandResult",
    "RefreshPlan",
    "RefreshReport",
    "StepKind",
    "StepRecord",
    "StepStatus",
]
