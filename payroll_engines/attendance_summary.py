"""
Period attendance summary.

Folds evaluated days into the ``AttendanceSummary`` that the allowance,
deduction and base-salary calculations read.  Late arrival and early
leave are measured against the employee's scheduled shift for the day,
or the company's default work schedule when the day carries none, allowing
the configured grace minutes, on ordinary weekdays only.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from payroll_config.schema import AttendancePolicy
from payroll_engines.intervals import minutes_between, resolve_shift_end
from payroll_kernel.domain.attendance import AttendanceSummary
from payroll_kernel.domain.results import EvaluatedDay
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.attendance_summary")


def scheduled_window(day: EvaluatedDay, policy: AttendancePolicy) -> tuple[datetime, datetime]:
    """The day's scheduled start and end; an end not after start is next day."""
    tz = day.check_in.tzinfo
    start_time = day.day.scheduled_start
    if start_time is None:
        start_time = policy.default_work_start
    end_time = day.day.scheduled_end
    if end_time is None:
        end_time = policy.default_work_end
    start = datetime.combine(day.day.work_date, start_time, tzinfo=tz)
    end = datetime.combine(day.day.work_date, end_time, tzinfo=tz)
    if end <= start:
        end += timedelta(days=1)
    return start, end


def late_minutes(day: EvaluatedDay, policy: AttendancePolicy) -> int:
    """Minutes after the scheduled start, or 0 when within the grace period."""
    start, _ = scheduled_window(day, policy)
    late = minutes_between(start, day.check_in)
    return late if late > policy.late_grace_minutes else 0


def early_leave_minutes(day: EvaluatedDay, policy: AttendancePolicy) -> int:
    """Minutes before the scheduled end, or 0 when within the grace period."""
    _, end = scheduled_window(day, policy)
    shift_end, _ = resolve_shift_end(day.check_in, day.check_out, day.day.work_date)
    early = minutes_between(shift_end, end)
    return early if early > policy.early_leave_grace_minutes else 0


def summarize_attendance(
    evaluated_days: Sequence[EvaluatedDay],
    attendance_policy: AttendancePolicy,
    *,
    absence_days: int = 0,
) -> AttendanceSummary:
    late_count = early_count = 0
    total_late = total_early = 0
    for day in evaluated_days:
        if day.day.is_holiday or day.day.is_weekend:
            continue
        late = late_minutes(day, attendance_policy)
        if late:
            late_count += 1
            total_late += late
        early = early_leave_minutes(day, attendance_policy)
        if early:
            early_count += 1
            total_early += early

    net = sum(d.working_hours.net_working_minutes for d in evaluated_days)
    summary = AttendanceSummary(
        working_days=len({d.day.work_date for d in evaluated_days}),
        working_hours=net // 60,
        net_working_minutes=net,
        number_of_shifts=len(evaluated_days),
        absence_days=absence_days,
        late_count=late_count,
        total_late_minutes=total_late,
        early_leave_count=early_count,
        total_early_leave_minutes=total_early,
        total_overtime_minutes=sum(d.overtime.total_overtime_minutes for d in evaluated_days),
        total_break_minutes=sum(d.working_hours.total_break_minutes for d in evaluated_days),
    )
    logger.debug(
        "attendance_summarized",
        extra={
            "working_days": summary.working_days,
            "net_working_minutes": net,
            "late_count": late_count,
            "early_leave_count": early_count,
        },
    )
    return summary
