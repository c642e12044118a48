"""
Working Hours Calculator (``payroll_engines.working_hours``).

Responsibility
--------------
Combines rounded check-in/check-out and the evaluated break into gross
and net working minutes, and splits net minutes into night and regular.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Consumes ``BreakEvaluation``
from ``payroll_engines.breaks``; its ``WorkingHoursResult`` feeds the
overtime classifier.

Invariants enforced
-------------------
* net = gross - effective break when breaks are UNPAID, net = gross when
  PAID.  The deducted break never exceeds gross, so net is never negative.
* night + regular = net.
* A check-out with an earlier wall-clock time than check-in is an
  overnight shift ending the next day.

Failure modes
-------------
* ``CheckOutBeforeCheckInError`` -- check-out precedes check-in and its
  wall-clock time is not earlier, so the shift cannot be read as overnight.
"""

from __future__ import annotations

from datetime import date, datetime, time

from payroll_engines.intervals import (
    minutes_between,
    night_overlap_minutes,
    resolve_shift_end,
)
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.enums import BreakType
from payroll_kernel.domain.results import BreakEvaluation, WorkingHoursResult
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.working_hours")

__all__ = [
    "calculate_working_hours",
    "night_overlap_minutes",
    "resolve_shift_end",
]


@traced_engine(
    "working_hours",
    "1.0",
    fingerprint_fields=("check_in", "check_out", "breaks", "break_type", "night_start", "night_end"),
)
def calculate_working_hours(
    check_in: datetime,
    check_out: datetime,
    breaks: BreakEvaluation,
    break_type: BreakType,
    night_start: time,
    night_end: time,
    *,
    work_date: date | None = None,
) -> WorkingHoursResult:
    """
    Gross/net working minutes for one day.

    Night minutes are the overlap of [check_in, end) with every instance of
    the night window.  When breaks are unpaid and tracked, the part of each
    break falling inside the night window is not counted as night work.
    Night minutes are capped at net; the remainder of net is regular.
    """
    end, overnight = resolve_shift_end(check_in, check_out, work_date)
    gross = minutes_between(check_in, end)

    unpaid = break_type == BreakType.UNPAID
    deducted = min(breaks.effective_minutes, gross) if unpaid else 0
    net = gross - deducted

    night = night_overlap_minutes(check_in, end, night_start, night_end)
    if unpaid and breaks.tracked:
        night -= sum(
            night_overlap_minutes(b.start, b.end, night_start, night_end)
            for b in breaks.breaks
        )
    night = min(max(night, 0), net)

    result = WorkingHoursResult(
        gross_working_minutes=gross,
        net_working_minutes=net,
        total_break_minutes=breaks.actual_minutes,
        effective_break_minutes=deducted if unpaid else breaks.effective_minutes,
        break_type=break_type,
        break_compliant=breaks.compliant,
        is_night_shift=night > 0,
        is_overnight_shift=overnight,
        night_minutes=night,
        regular_minutes=net - night,
    )

    logger.debug(
        "working_hours_calculated",
        extra={
            "work_date": work_date.isoformat() if work_date else None,
            "gross_minutes": gross,
            "net_minutes": net,
            "night_minutes": night,
            "overnight": overnight,
        },
    )
    return result
