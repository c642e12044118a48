"""
Company Policy Schema.

Responsibility:
    Frozen dataclasses describing one company's attendance, break, overtime,
    allowance, deduction and payroll policy.  Field defaults are the
    documented defaults the ``PolicyProvider`` substitutes when a company
    has not configured a value.

Architecture position:
    Configuration -- sits above ``payroll_kernel`` (enums are imported from
    the kernel domain) and below ``payroll_engines``.  Engines receive only
    fully-populated instances of these classes and never null-check.

Invariants enforced:
    - BreakPolicy: minimum <= maximum; default within [minimum, maximum];
      night minimum/default non-negative with night default >= night minimum;
      max_breaks_per_day >= 1; periods_per_attendance >= 1; configured
      periods fit within max_breaks_per_day and carry unique orders.
    - OvertimeMultipliers: every multiplier >= 1.0.
    - DeductionRule: exactly one of amount / percentage.
    - PayrollConfig: positive working days/hours and rounding unit.

Failure modes:
    - PolicyInvariantError from ``__post_init__`` naming the policy and field.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import time
from decimal import Decimal

from payroll_kernel.domain.enums import (
    AllowanceType,
    BreakType,
    DeductionType,
    RoundingDirection,
    RoundingInterval,
    SalaryType,
)
from payroll_kernel.exceptions import PolicyInvariantError

DEFAULT_NIGHT_START = time(22, 0)
DEFAULT_NIGHT_END = time(5, 0)
DEFAULT_LOCALE = "ja"


# ---------------------------------------------------------------------------
# Attendance rounding
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoundingPolicy:
    """Interval and direction used to round one kind of timestamp."""

    interval: RoundingInterval = RoundingInterval.MINUTES_15
    direction: RoundingDirection = RoundingDirection.NEAREST


@dataclass(frozen=True)
class CheckpointRounding:
    """Rounding for one checkpoint, switchable independently of the others."""

    enabled: bool = False
    policy: RoundingPolicy = field(default_factory=RoundingPolicy)


CHECKPOINTS = ("check_in", "check_out", "break_start", "break_end")


@dataclass(frozen=True)
class AttendancePolicy:
    """
    Attendance rounding and schedule.

    ``enable_rounding`` is the master switch; each checkpoint still needs
    its own ``enabled`` flag before rounding applies.
    """

    enable_rounding: bool = False
    check_in: CheckpointRounding = field(default_factory=CheckpointRounding)
    check_out: CheckpointRounding = field(default_factory=CheckpointRounding)
    break_start: CheckpointRounding = field(default_factory=CheckpointRounding)
    break_end: CheckpointRounding = field(default_factory=CheckpointRounding)
    default_work_start: time = time(9, 0)
    default_work_end: time = time(18, 0)
    late_grace_minutes: int = 0
    early_leave_grace_minutes: int = 0

    def __post_init__(self) -> None:
        if self.late_grace_minutes < 0:
            raise PolicyInvariantError(
                "AttendancePolicy", "late_grace_minutes", "must be non-negative"
            )
        if self.early_leave_grace_minutes < 0:
            raise PolicyInvariantError(
                "AttendancePolicy", "early_leave_grace_minutes", "must be non-negative"
            )

    def checkpoint(self, name: str) -> CheckpointRounding:
        if name not in CHECKPOINTS:
            raise KeyError(f"Unknown checkpoint {name!r}")
        return getattr(self, name)


# ---------------------------------------------------------------------------
# Breaks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BreakPeriod:
    """A scheduled break slot, e.g. lunch 12:00-13:00."""

    name: str
    start: time
    end: time
    duration_minutes: int
    flexible: bool = False
    order: int = 1


@dataclass(frozen=True)
class BreakPolicy:
    """Break rules for one company."""

    break_type: BreakType = BreakType.UNPAID
    minimum_minutes: int = 45
    maximum_minutes: int = 90
    default_minutes: int = 60
    tracking_enabled: bool = False
    fixed_mode: bool = False
    max_breaks_per_day: int = 3
    periods_per_attendance: int = 1
    periods: tuple[BreakPeriod, ...] = ()
    night_start: time = DEFAULT_NIGHT_START
    night_end: time = DEFAULT_NIGHT_END
    night_minimum_minutes: int = 45
    night_default_minutes: int = 60
    use_legal_minimum: bool = True
    locale: str = DEFAULT_LOCALE

    def __post_init__(self) -> None:
        if self.minimum_minutes < 0:
            raise PolicyInvariantError("BreakPolicy", "minimum_minutes", "must be non-negative")
        if self.minimum_minutes > self.maximum_minutes:
            raise PolicyInvariantError(
                "BreakPolicy",
                "minimum_minutes",
                f"minimum {self.minimum_minutes} exceeds maximum {self.maximum_minutes}",
            )
        if not self.minimum_minutes <= self.default_minutes <= self.maximum_minutes:
            raise PolicyInvariantError(
                "BreakPolicy",
                "default_minutes",
                f"default {self.default_minutes} is outside "
                f"[{self.minimum_minutes}, {self.maximum_minutes}]",
            )
        if self.night_minimum_minutes < 0 or self.night_default_minutes < 0:
            raise PolicyInvariantError(
                "BreakPolicy", "night_minimum_minutes", "night minutes must be non-negative"
            )
        if self.night_default_minutes < self.night_minimum_minutes:
            raise PolicyInvariantError(
                "BreakPolicy",
                "night_default_minutes",
                f"night default {self.night_default_minutes} is below night minimum "
                f"{self.night_minimum_minutes}",
            )
        if self.max_breaks_per_day < 1:
            raise PolicyInvariantError("BreakPolicy", "max_breaks_per_day", "must be at least 1")
        if self.periods_per_attendance < 1:
            raise PolicyInvariantError(
                "BreakPolicy", "periods_per_attendance", "must be at least 1"
            )
        if len(self.periods) > self.max_breaks_per_day:
            raise PolicyInvariantError(
                "BreakPolicy",
                "periods",
                f"{len(self.periods)} periods configured, maximum per day is "
                f"{self.max_breaks_per_day}",
            )
        orders = [p.order for p in self.periods]
        if len(orders) != len(set(orders)):
            raise PolicyInvariantError("BreakPolicy", "periods", "period orders must be unique")

    @property
    def ordered_periods(self) -> tuple[BreakPeriod, ...]:
        return tuple(sorted(self.periods, key=lambda p: p.order))


# ---------------------------------------------------------------------------
# Overtime
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OvertimeMultipliers:
    """Rate multipliers applied to the hourly rate, one per premium category."""

    regular: Decimal = Decimal("1.25")
    night_work: Decimal = Decimal("1.25")
    night_overtime: Decimal = Decimal("1.5")
    holiday_overtime: Decimal = Decimal("1.35")
    holiday_night_overtime: Decimal = Decimal("1.6")
    weekend_overtime: Decimal = Decimal("1.35")

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value < Decimal("1.0"):
                raise PolicyInvariantError(
                    "OvertimeMultipliers", f.name, f"multiplier {value} is below 1.0"
                )

    def as_dict(self) -> dict[str, Decimal]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class OvertimePolicy:
    """Overtime classification and pricing rules."""

    enabled: bool = True
    standard_working_minutes_per_day: int = 480
    night_start: time = DEFAULT_NIGHT_START
    night_end: time = DEFAULT_NIGHT_END
    multipliers: OvertimeMultipliers = field(default_factory=OvertimeMultipliers)
    max_overtime_minutes_per_day: int = 240
    max_overtime_minutes_per_month: int = 2700
    use_legal_minimum: bool = True
    locale: str = DEFAULT_LOCALE

    def __post_init__(self) -> None:
        if self.standard_working_minutes_per_day <= 0:
            raise PolicyInvariantError(
                "OvertimePolicy", "standard_working_minutes_per_day", "must be positive"
            )
        if self.max_overtime_minutes_per_day < 0:
            raise PolicyInvariantError(
                "OvertimePolicy", "max_overtime_minutes_per_day", "must be non-negative"
            )
        if self.max_overtime_minutes_per_month < 0:
            raise PolicyInvariantError(
                "OvertimePolicy", "max_overtime_minutes_per_month", "must be non-negative"
            )


# ---------------------------------------------------------------------------
# Allowances
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AllowanceCondition:
    """Attendance requirements for a CONDITIONAL allowance."""

    min_working_days: int = 0
    min_working_hours: int = 0
    no_absence: bool = False
    no_late_arrival: bool = False
    no_early_leave: bool = False


@dataclass(frozen=True)
class AllowanceRule:
    code: str
    name: str
    type: AllowanceType
    amount: Decimal
    taxable: bool = True
    condition: AllowanceCondition | None = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise PolicyInvariantError("AllowanceRule", "amount", f"{self.code}: must be non-negative")


@dataclass(frozen=True)
class AllowanceConfig:
    rules: tuple[AllowanceRule, ...] = ()

    def __post_init__(self) -> None:
        codes = [r.code for r in self.rules]
        if len(codes) != len(set(codes)):
            raise PolicyInvariantError("AllowanceConfig", "rules", "allowance codes must be unique")


# ---------------------------------------------------------------------------
# Deductions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeductionRule:
    """A FIXED amount or a PERCENTAGE of base salary, applied by ``order``."""

    code: str
    name: str
    type: DeductionType
    amount: Decimal | None = None
    percentage: Decimal | None = None
    order: int = 0

    def __post_init__(self) -> None:
        if (self.amount is None) == (self.percentage is None):
            raise PolicyInvariantError(
                "DeductionRule",
                "amount",
                f"{self.code}: exactly one of amount or percentage is required",
            )
        if self.type == DeductionType.FIXED and self.amount is None:
            raise PolicyInvariantError("DeductionRule", "amount", f"{self.code}: FIXED needs amount")
        if self.type == DeductionType.PERCENTAGE and self.percentage is None:
            raise PolicyInvariantError(
                "DeductionRule", "percentage", f"{self.code}: PERCENTAGE needs percentage"
            )
        value = self.amount if self.amount is not None else self.percentage
        if value < 0:
            raise PolicyInvariantError("DeductionRule", "amount", f"{self.code}: must be non-negative")


@dataclass(frozen=True)
class DeductionConfig:
    rules: tuple[DeductionRule, ...] = ()
    enable_late_penalty: bool = False
    late_penalty_per_minute: Decimal = Decimal("0")
    enable_early_leave_penalty: bool = False
    early_leave_penalty_per_minute: Decimal = Decimal("0")
    enable_absence_deduction: bool = True

    def __post_init__(self) -> None:
        if self.late_penalty_per_minute < 0:
            raise PolicyInvariantError(
                "DeductionConfig", "late_penalty_per_minute", "must be non-negative"
            )
        if self.early_leave_penalty_per_minute < 0:
            raise PolicyInvariantError(
                "DeductionConfig", "early_leave_penalty_per_minute", "must be non-negative"
            )


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollConfig:
    """Salary basis, rounding and period settings."""

    default_salary_type: SalaryType = SalaryType.MONTHLY
    salary_rounding: RoundingDirection = RoundingDirection.NEAREST
    rounding_unit: Decimal = Decimal("1")  # amounts are already in minor units
    standard_working_days_per_month: int = 22
    standard_working_hours_per_day: int = 8
    pay_day: int = 25
    cutoff_day: int = 20

    def __post_init__(self) -> None:
        if self.rounding_unit <= 0:
            raise PolicyInvariantError("PayrollConfig", "rounding_unit", "must be positive")
        if self.standard_working_days_per_month <= 0:
            raise PolicyInvariantError(
                "PayrollConfig", "standard_working_days_per_month", "must be positive"
            )
        if self.standard_working_hours_per_day <= 0:
            raise PolicyInvariantError(
                "PayrollConfig", "standard_working_hours_per_day", "must be positive"
            )
        for name in ("pay_day", "cutoff_day"):
            if not 1 <= getattr(self, name) <= 31:
                raise PolicyInvariantError("PayrollConfig", name, "must be between 1 and 31")


# ---------------------------------------------------------------------------
# Resolved set
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompanyPolicySet:
    """
    Every policy section for one company, fully populated.

    ``defaults_used`` names each section (``"breaks"``) or field
    (``"breaks.minimum_minutes"``) the provider had to default.
    """

    company_id: str
    attendance: AttendancePolicy = field(default_factory=AttendancePolicy)
    breaks: BreakPolicy = field(default_factory=BreakPolicy)
    overtime: OvertimePolicy = field(default_factory=OvertimePolicy)
    allowances: AllowanceConfig = field(default_factory=AllowanceConfig)
    deductions: DeductionConfig = field(default_factory=DeductionConfig)
    payroll: PayrollConfig = field(default_factory=PayrollConfig)
    defaults_used: tuple[str, ...] = ()

    @property
    def used_defaults(self) -> bool:
        return bool(self.defaults_used)
