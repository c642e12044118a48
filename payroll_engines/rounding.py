"""
Time Rounding Engine (``payroll_engines.rounding``).

Responsibility
--------------
Rounds raw attendance timestamps to the company's configured interval
before any duration is computed.  Each checkpoint (check-in, check-out,
break start, break end) has its own policy and enable flag, all behind a
master switch.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Imports ``payroll_kernel`` value objects, ``payroll_config`` policy
dataclasses and the shared interval helpers.

Invariants enforced
-------------------
* Rounding is measured from local midnight of the timestamp's own date;
  a result at or past 24:00 rolls forward to the next date.
* Seconds and microseconds are discarded before rounding.
* NEAREST breaks an exact half-interval tie upward.
* Idempotent: ``round_time(round_time(t, p), p) == round_time(t, p)``.
* tzinfo is carried through unchanged.
* An overnight check-out is moved onto the next date before it is
  rounded, so rounding check-in past midnight cannot reorder the pair.

Failure modes
-------------
* ``CheckOutBeforeCheckInError`` when the raw check-out precedes check-in
  and has no overnight reading.
* Unknown checkpoint names raise ``KeyError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from payroll_config.schema import AttendancePolicy, RoundingPolicy
from payroll_engines.intervals import resolve_shift_end
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.attendance import AttendanceDay, BreakRecord
from payroll_kernel.domain.enums import RoundingDirection
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.rounding")


def round_time(t: datetime, policy: RoundingPolicy) -> datetime:
    """Round ``t`` to a multiple of ``policy.interval`` minutes from midnight."""
    midnight = t.replace(hour=0, minute=0, second=0, microsecond=0)
    minutes = t.hour * 60 + t.minute
    interval = policy.interval.minutes
    remainder = minutes % interval

    if remainder == 0:
        rounded = minutes
    elif policy.direction == RoundingDirection.DOWN:
        rounded = minutes - remainder
    elif policy.direction == RoundingDirection.UP:
        rounded = minutes - remainder + interval
    elif remainder * 2 >= interval:
        rounded = minutes - remainder + interval
    else:
        rounded = minutes - remainder

    return midnight + timedelta(minutes=rounded)


def round_checkpoint(t: datetime, checkpoint: str, policy: AttendancePolicy) -> datetime:
    """
    Round ``t`` with the named checkpoint's policy.

    Passes ``t`` through unchanged unless both ``policy.enable_rounding`` and
    the checkpoint's own flag are on.
    """
    cp = policy.checkpoint(checkpoint)
    if not (policy.enable_rounding and cp.enabled):
        return t
    return round_time(t, cp.policy)


@dataclass(frozen=True)
class RoundedAttendance:
    check_in: datetime
    check_out: datetime
    break_records: tuple[BreakRecord, ...]


@traced_engine("time_rounding", "1.0", fingerprint_fields=("day", "policy"))
def round_attendance_day(day: AttendanceDay, policy: AttendancePolicy) -> RoundedAttendance:
    """Round every timestamp of one attendance day."""
    raw_check_out, _ = resolve_shift_end(day.raw_check_in, day.raw_check_out, day.work_date)
    check_in = round_checkpoint(day.raw_check_in, "check_in", policy)
    check_out = round_checkpoint(raw_check_out, "check_out", policy)
    breaks = tuple(
        BreakRecord(
            start=round_checkpoint(b.start, "break_start", policy),
            end=round_checkpoint(b.end, "break_end", policy),
        )
        for b in day.break_records
    )

    if check_in != day.raw_check_in or check_out != day.raw_check_out:
        logger.debug(
            "attendance_rounded",
            extra={
                "work_date": day.work_date.isoformat(),
                "raw_check_in": day.raw_check_in.isoformat(),
                "check_in": check_in.isoformat(),
                "raw_check_out": day.raw_check_out.isoformat(),
                "check_out": check_out.isoformat(),
            },
        )
    return RoundedAttendance(check_in=check_in, check_out=check_out, break_records=breaks)
