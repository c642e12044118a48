"""
payroll_batch -- Roster-level payroll preview.

Fans per-employee payroll calculations out to a worker pool and aggregates
them into a ``PayrollPreview``.  Employee calculations are independent, so
workers share nothing but the immutable ``CompanyPolicySet``.

Architecture:
    payroll_batch/ is a top-level package.  Nothing in payroll_kernel/,
    payroll_config/ or payroll_engines/ imports from payroll_batch.

Invariants:
    - One failing employee never aborts the run.
    - Cancellation stops submission only; running jobs complete.
    - Outcomes are reported in job order.
"""

from payroll_batch.domain.types import (
    EmployeeOutcome,
    OutcomeStatus,
    PayrollJob,
    PayrollPreview,
    PreviewStatus,
)
from payroll_batch.services.preview import run_company_preview, run_payroll_preview

__all__ = [
    "EmployeeOutcome",
    "OutcomeStatus",
    "PayrollJob",
    "PayrollPreview",
    "PreviewStatus",
    "run_company_preview",
    "run_payroll_preview",
]
