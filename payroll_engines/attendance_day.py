"""
Per-day pipeline: rounding, breaks, working hours and overtime for one
attendance day, run in that order.

The break evaluator uses the break policy's night window to decide
whether night minimums apply; working hours and overtime use the overtime
policy's night window for pricing.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_config.schema import CompanyPolicySet
from payroll_engines.breaks import evaluate_breaks
from payroll_engines.intervals import minutes_between, night_overlap_minutes, resolve_shift_end
from payroll_engines.overtime import classify_day
from payroll_engines.rounding import round_attendance_day
from payroll_engines.working_hours import calculate_working_hours
from payroll_kernel.domain.attendance import AttendanceDay
from payroll_kernel.domain.results import EvaluatedDay
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.attendance_day")


def evaluate_day(
    day: AttendanceDay,
    policies: CompanyPolicySet,
    hourly_rate: Decimal,
) -> EvaluatedDay:
    """
    Run components 1 to 4 for a single day.

    Raises:
        DataIntegrityError: (a subclass of) when the day's data cannot be
            calculated; the error carries the day's ``work_date``.
    """
    rounded = round_attendance_day(day, policies.attendance)
    shift_end, _ = resolve_shift_end(rounded.check_in, rounded.check_out, day.work_date)

    break_policy = policies.breaks
    night_shift = night_overlap_minutes(
        rounded.check_in, shift_end, break_policy.night_start, break_policy.night_end
    ) > 0
    breaks = evaluate_breaks(
        rounded.break_records,
        break_policy,
        night_shift=night_shift,
        gross_working_minutes=minutes_between(rounded.check_in, shift_end),
        work_date=day.work_date,
    )

    overtime_policy = policies.overtime
    working_hours = calculate_working_hours(
        rounded.check_in,
        rounded.check_out,
        breaks,
        break_policy.break_type,
        overtime_policy.night_start,
        overtime_policy.night_end,
        work_date=day.work_date,
    )
    overtime = classify_day(
        working_hours,
        shift_end,
        is_holiday=day.is_holiday,
        is_weekend=day.is_weekend,
        policy=overtime_policy,
        hourly_rate=hourly_rate,
        work_date=day.work_date,
    )

    logger.debug(
        "attendance_day_evaluated",
        extra={
            "work_date": day.work_date.isoformat(),
            "net_minutes": working_hours.net_working_minutes,
            "overtime_minutes": overtime.total_overtime_minutes,
            "break_compliant": breaks.compliant,
        },
    )
    return EvaluatedDay(
        day=day,
        check_in=rounded.check_in,
        check_out=rounded.check_out,
        breaks=breaks,
        working_hours=working_hours,
        overtime=overtime,
    )
