"""
Calculation result value objects.

Responsibility:
    Immutable outputs of each calculation stage -- break evaluation,
    working hours, overtime classification, allowances, deductions and the
    aggregated payroll -- nested so that a ``PayrollResult`` carries every
    intermediate figure for audit traceability.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  Produced by
    ``payroll_engines``; consumed by the caller's persistence/approval layer.

Invariants enforced:
    - WorkingHoursResult: net = gross - effective break (UNPAID only);
      night + regular = net.
    - OvertimeResult: sum of the five category minutes = total minutes;
      sum of the five category amounts = total amount.
    - AllowanceResult: taxable + non-taxable = total.
    - PayrollResult: gross = base + overtime pay + allowances;
      unrounded net = gross - deductions.

Failure modes:
    - ValueError from ``__post_init__`` when an invariant does not hold.
      Engines construct these objects, so a failure here is a programming
      error rather than bad input.

Audit relevance:
    Intermediate amounts keep full Decimal precision.  Only
    ``PayrollResult.net_salary`` is rounded to the currency minor unit;
    ``rounding_adjustment`` exposes the difference.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from payroll_kernel.domain.attendance import AttendanceDay, NumberedBreak
from payroll_kernel.domain.enums import (
    AllowanceType,
    BreakType,
    CapScope,
    DeductionType,
    OvertimeCategory,
    SalaryType,
)

ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Breaks and working hours
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BreakEvaluation:
    """Actual vs. effective break minutes for one day, and compliance."""

    breaks: tuple[NumberedBreak, ...]
    actual_minutes: int
    effective_minutes: int
    minimum_minutes: int
    maximum_minutes: int
    compliant: bool
    night_shift: bool
    tracked: bool


@dataclass(frozen=True)
class WorkingHoursResult:
    """Gross/net working minutes for one day, split into night and regular."""

    gross_working_minutes: int
    net_working_minutes: int
    total_break_minutes: int
    effective_break_minutes: int
    break_type: BreakType
    break_compliant: bool
    is_night_shift: bool
    is_overnight_shift: bool
    night_minutes: int
    regular_minutes: int

    def __post_init__(self) -> None:
        deducted = self.effective_break_minutes if self.break_type == BreakType.UNPAID else 0
        if self.net_working_minutes != self.gross_working_minutes - deducted:
            raise ValueError(
                f"net_working_minutes {self.net_working_minutes} != gross "
                f"{self.gross_working_minutes} - deducted break {deducted}"
            )
        if self.night_minutes + self.regular_minutes != self.net_working_minutes:
            raise ValueError(
                f"night {self.night_minutes} + regular {self.regular_minutes} "
                f"!= net {self.net_working_minutes}"
            )
        if self.night_minutes < 0 or self.regular_minutes < 0:
            raise ValueError("night and regular minutes must be non-negative")


# ---------------------------------------------------------------------------
# Overtime
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CapExceededWarning:
    """
    Non-fatal notice that overtime exceeded a configured cap.

    The minutes are still paid; the warning is for an approval workflow.
    """

    code = "OVERTIME_CAP_EXCEEDED"

    scope: CapScope
    cap_minutes: int
    actual_minutes: int
    work_date: date | None = None

    @property
    def excess_minutes(self) -> int:
        return max(0, self.actual_minutes - self.cap_minutes)


@dataclass(frozen=True)
class OvertimeResult:
    """
    Overtime minutes and amounts by category.

    ``night_work_minutes``/``night_work_amount`` carry the night premium
    earned inside the standard working day.  They are not an overtime
    category and are excluded from the two overtime totals.
    """

    regular_overtime_minutes: int = 0
    night_overtime_minutes: int = 0
    holiday_overtime_minutes: int = 0
    holiday_night_minutes: int = 0
    weekend_overtime_minutes: int = 0
    total_overtime_minutes: int = 0
    regular_overtime_amount: Decimal = ZERO
    night_overtime_amount: Decimal = ZERO
    holiday_overtime_amount: Decimal = ZERO
    holiday_night_overtime_amount: Decimal = ZERO
    weekend_overtime_amount: Decimal = ZERO
    total_overtime_amount: Decimal = ZERO
    night_work_minutes: int = 0
    night_work_amount: Decimal = ZERO
    over_cap_minutes: int = 0
    cap_warnings: tuple[CapExceededWarning, ...] = ()

    def __post_init__(self) -> None:
        minutes = sum(self.minutes_by_category().values())
        if minutes != self.total_overtime_minutes:
            raise ValueError(
                f"category minutes {minutes} != total_overtime_minutes "
                f"{self.total_overtime_minutes}"
            )
        amounts = sum(self.amounts_by_category().values(), ZERO)
        if amounts != self.total_overtime_amount:
            raise ValueError(
                f"category amounts {amounts} != total_overtime_amount "
                f"{self.total_overtime_amount}"
            )

    @classmethod
    def from_categories(
        cls,
        minutes: dict[OvertimeCategory, int],
        amounts: dict[OvertimeCategory, Decimal],
        *,
        night_work_minutes: int = 0,
        night_work_amount: Decimal = ZERO,
        over_cap_minutes: int = 0,
        cap_warnings: tuple[CapExceededWarning, ...] = (),
    ) -> OvertimeResult:
        """Build a result whose totals are the sums of the given categories."""
        category_minutes = {c: minutes.get(c, 0) for c in OvertimeCategory}
        category_amounts = {c: amounts.get(c, ZERO) for c in OvertimeCategory}
        return cls(
            regular_overtime_minutes=category_minutes[OvertimeCategory.REGULAR],
            night_overtime_minutes=category_minutes[OvertimeCategory.NIGHT],
            holiday_overtime_minutes=category_minutes[OvertimeCategory.HOLIDAY],
            holiday_night_minutes=category_minutes[OvertimeCategory.HOLIDAY_NIGHT],
            weekend_overtime_minutes=category_minutes[OvertimeCategory.WEEKEND],
            total_overtime_minutes=sum(category_minutes.values()),
            regular_overtime_amount=category_amounts[OvertimeCategory.REGULAR],
            night_overtime_amount=category_amounts[OvertimeCategory.NIGHT],
            holiday_overtime_amount=category_amounts[OvertimeCategory.HOLIDAY],
            holiday_night_overtime_amount=category_amounts[OvertimeCategory.HOLIDAY_NIGHT],
            weekend_overtime_amount=category_amounts[OvertimeCategory.WEEKEND],
            total_overtime_amount=sum(category_amounts.values(), ZERO),
            night_work_minutes=night_work_minutes,
            night_work_amount=night_work_amount,
            over_cap_minutes=over_cap_minutes,
            cap_warnings=cap_warnings,
        )

    def minutes_by_category(self) -> dict[OvertimeCategory, int]:
        return {
            OvertimeCategory.REGULAR: self.regular_overtime_minutes,
            OvertimeCategory.NIGHT: self.night_overtime_minutes,
            OvertimeCategory.HOLIDAY: self.holiday_overtime_minutes,
            OvertimeCategory.HOLIDAY_NIGHT: self.holiday_night_minutes,
            OvertimeCategory.WEEKEND: self.weekend_overtime_minutes,
        }

    def amounts_by_category(self) -> dict[OvertimeCategory, Decimal]:
        return {
            OvertimeCategory.REGULAR: self.regular_overtime_amount,
            OvertimeCategory.NIGHT: self.night_overtime_amount,
            OvertimeCategory.HOLIDAY: self.holiday_overtime_amount,
            OvertimeCategory.HOLIDAY_NIGHT: self.holiday_night_overtime_amount,
            OvertimeCategory.WEEKEND: self.weekend_overtime_amount,
        }

    @property
    def premium_pay(self) -> Decimal:
        """Overtime pay plus the in-hours night premium."""
        return self.total_overtime_amount + self.night_work_amount

    @property
    def requires_approval(self) -> bool:
        return bool(self.cap_warnings)


@dataclass(frozen=True)
class EvaluatedDay:
    """One attendance day after rounding, break, hours and overtime stages."""

    day: AttendanceDay
    check_in: datetime
    check_out: datetime
    breaks: BreakEvaluation
    working_hours: WorkingHoursResult
    overtime: OvertimeResult


# ---------------------------------------------------------------------------
# Allowances and deductions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AllowanceItem:
    """One evaluated allowance rule; skipped rules keep their reason."""

    code: str
    name: str
    type: AllowanceType
    amount: Decimal
    taxable: bool
    eligible: bool = True
    ineligible_reason: str | None = None

    @property
    def payable_amount(self) -> Decimal:
        return self.amount if self.eligible else ZERO


@dataclass(frozen=True)
class AllowanceResult:
    items: tuple[AllowanceItem, ...] = ()
    total_allowances: Decimal = ZERO
    taxable_allowances: Decimal = ZERO
    non_taxable_allowances: Decimal = ZERO

    def __post_init__(self) -> None:
        if self.taxable_allowances + self.non_taxable_allowances != self.total_allowances:
            raise ValueError("taxable + non-taxable allowances must equal total")

    @property
    def paid_items(self) -> tuple[AllowanceItem, ...]:
        return tuple(i for i in self.items if i.eligible)

    @property
    def skipped_items(self) -> tuple[AllowanceItem, ...]:
        return tuple(i for i in self.items if not i.eligible)


@dataclass(frozen=True)
class DeductionItem:
    """One applied deduction rule, in application order."""

    code: str
    name: str
    type: DeductionType
    amount: Decimal
    order: int
    percentage: Decimal | None = None


@dataclass(frozen=True)
class DeductionResult:
    items: tuple[DeductionItem, ...] = ()
    rule_deductions: Decimal = ZERO
    late_penalty: Decimal = ZERO
    early_leave_penalty: Decimal = ZERO
    absence_deduction: Decimal = ZERO
    total_deductions: Decimal = ZERO

    def __post_init__(self) -> None:
        expected = (
            self.rule_deductions
            + self.late_penalty
            + self.early_leave_penalty
            + self.absence_deduction
        )
        if expected != self.total_deductions:
            raise ValueError(
                f"total_deductions {self.total_deductions} != rules + penalties {expected}"
            )


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollResult:
    """Final payroll breakdown for one employee in one pay period."""

    employee_id: str
    salary_type: SalaryType
    hourly_rate: Decimal
    base_salary: Decimal
    total_overtime_pay: Decimal
    total_allowances: Decimal
    total_deductions: Decimal
    gross_salary: Decimal
    unrounded_net_salary: Decimal
    net_salary: Decimal
    rounded_gross_salary: Decimal
    overtime: OvertimeResult
    allowances: AllowanceResult
    deductions: DeductionResult
    defaults_used: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.gross_salary != self.base_salary + self.total_overtime_pay + self.total_allowances:
            raise ValueError("gross_salary must equal base + overtime pay + allowances")
        if self.unrounded_net_salary != self.gross_salary - self.total_deductions:
            raise ValueError("unrounded_net_salary must equal gross - deductions")

    @property
    def rounding_adjustment(self) -> Decimal:
        return self.net_salary - self.unrounded_net_salary

    @property
    def computed_with_defaults(self) -> bool:
        return bool(self.defaults_used)
