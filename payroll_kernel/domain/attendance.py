"""
Attendance input value objects.

Responsibility:
    Immutable carriers for the attendance data the engine consumes: one
    employee's raw check-in/check-out and break records per day, the
    period-level attendance summary, and the employee's salary basis.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  Built by the caller
    from the external attendance and salary stores, consumed once per
    calculation, then discarded.

Invariants enforced:
    - Every collection is a tuple; every dataclass is frozen.
    - Minute and day counters on ``AttendanceSummary`` are non-negative.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal

from payroll_kernel.domain.enums import SalaryType


@dataclass(frozen=True)
class BreakRecord:
    """One recorded break, start and end as full timestamps."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class NumberedBreak:
    """A break record placed in chronological order, numbered from 1."""

    number: int
    start: datetime
    end: datetime
    minutes: int


@dataclass(frozen=True)
class AttendanceDay:
    """
    Raw attendance for one employee on one work date.

    ``raw_check_out`` may carry a wall-clock time earlier than
    ``raw_check_in``; the working-hours calculator reads that as an
    overnight shift.

    ``scheduled_start``/``scheduled_end`` are the employee's own shift for
    the day; late and early detection fall back to the company's default
    work schedule when they are absent.
    """

    work_date: date
    raw_check_in: datetime
    raw_check_out: datetime
    break_records: tuple[BreakRecord, ...] = ()
    is_holiday: bool = False
    is_weekend: bool = False
    scheduled_start: time | None = None
    scheduled_end: time | None = None


@dataclass(frozen=True)
class AttendanceSummary:
    """Period-level attendance counters used by allowances, deductions and base pay."""

    working_days: int = 0
    working_hours: int = 0
    net_working_minutes: int = 0
    number_of_shifts: int = 0
    absence_days: int = 0
    late_count: int = 0
    total_late_minutes: int = 0
    early_leave_count: int = 0
    total_early_leave_minutes: int = 0
    total_overtime_minutes: int = 0
    total_break_minutes: int = 0

    def __post_init__(self) -> None:
        for name in (
            "working_days",
            "working_hours",
            "net_working_minutes",
            "number_of_shifts",
            "absence_days",
            "late_count",
            "total_late_minutes",
            "early_leave_count",
            "total_early_leave_minutes",
            "total_overtime_minutes",
            "total_break_minutes",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"AttendanceSummary.{name} cannot be negative")


@dataclass(frozen=True)
class EmployeeSalaryInfo:
    """
    Effective salary basis for one employee in one period.

    Only the rate matching ``salary_type`` is required; the others are
    used, when present, to derive an hourly rate for overtime pricing.
    """

    employee_id: str
    salary_type: SalaryType
    monthly_salary: Decimal | None = None
    daily_rate: Decimal | None = None
    hourly_rate: Decimal | None = None
    shift_rate: Decimal | None = None
