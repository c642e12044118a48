"""
payroll_batch.domain -- Pure types and value objects for payroll previews.

ZERO I/O.  All types are frozen dataclasses.
"""

from payroll_batch.domain.types import (
    EmployeeOutcome,
    OutcomeStatus,
    PayrollJob,
    PayrollPreview,
    PreviewStatus,
)

__all__ = [
    "EmployeeOutcome",
    "OutcomeStatus",
    "PayrollJob",
    "PayrollPreview",
    "PreviewStatus",
]
