"""
payroll_batch.domain.types -- Pure frozen dataclasses for payroll previews.

ZERO I/O.  Frozen dataclasses with enum status fields and tuples for
immutable collections.

Invariants enforced:
    - Every job yields exactly one outcome, in job order.
    - Preview totals are sums over SUCCEEDED outcomes only.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.attendance import AttendanceDay, EmployeeSalaryInfo
from payroll_kernel.domain.results import ZERO, PayrollResult
from payroll_kernel.exceptions import BatchCancelledError


# =============================================================================
# Status enums
# =============================================================================


class PreviewStatus(str, Enum):
    """Run-level status of a payroll preview."""

    COMPLETED = "completed"  # Every employee calculated
    PARTIALLY_COMPLETED = "partially_completed"  # Some employees failed
    FAILED = "failed"  # No employee succeeded
    CANCELLED = "cancelled"  # Stopped before every job was submitted


class OutcomeStatus(str, Enum):
    """Per-employee status within a preview."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"  # Engine rejected this employee's data
    NOT_SUBMITTED = "not_submitted"  # Run cancelled before this job


# =============================================================================
# Job and outcome DTOs
# =============================================================================


@dataclass(frozen=True)
class PayrollJob:
    """One employee's inputs for one pay period."""

    employee_id: str
    salary: EmployeeSalaryInfo
    days: tuple[AttendanceDay, ...] = ()
    absence_days: int = 0

    def __post_init__(self) -> None:
        if self.salary.employee_id != self.employee_id:
            raise ValueError(
                f"salary record belongs to {self.salary.employee_id}, not {self.employee_id}"
            )
        if self.absence_days < 0:
            raise ValueError("absence_days cannot be negative")


@dataclass(frozen=True)
class EmployeeOutcome:
    """Immutable result of calculating one job."""

    job_index: int  # 0-indexed position in the submitted jobs
    employee_id: str
    status: OutcomeStatus
    result: PayrollResult | None = None
    error_code: str | None = None
    error_message: str | None = None
    error_field: str | None = None
    duration_ms: int = 0


@dataclass(frozen=True)
class PayrollPreview:
    """Aggregate of one company's payroll preview for one period."""

    company_id: str
    period: str
    status: PreviewStatus
    outcomes: tuple[EmployeeOutcome, ...] = ()
    total_base_salary: Decimal = ZERO
    total_overtime_pay: Decimal = ZERO
    total_allowances: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_gross_salary: Decimal = ZERO
    total_net_salary: Decimal = ZERO
    duration_ms: int = 0

    @property
    def cancelled(self) -> bool:
        return self.status == PreviewStatus.CANCELLED

    @property
    def total_employees(self) -> int:
        return len(self.outcomes)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def not_submitted(self) -> int:
        return self._count(OutcomeStatus.NOT_SUBMITTED)

    @property
    def results(self) -> tuple[PayrollResult, ...]:
        return tuple(o.result for o in self.outcomes if o.result is not None)

    @property
    def employees_requiring_approval(self) -> tuple[str, ...]:
        """Employees whose overtime exceeded a cap."""
        return tuple(r.employee_id for r in self.results if r.overtime.requires_approval)

    def raise_if_cancelled(self) -> None:
        """
        Raises:
            BatchCancelledError: the run stopped before every job was submitted.
        """
        if self.cancelled:
            raise BatchCancelledError(
                self.company_id,
                self.total_employees - self.not_submitted,
                self.total_employees,
            )
