"""
Break Evaluator (``payroll_engines.breaks``).

Responsibility
--------------
Turns one day's break records into actual and effective break minutes and
a compliance flag, either from tracked records or from the policy's fixed
default.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Runs after rounding and before
the working-hours calculator, which deducts the effective minutes when
breaks are unpaid.

Invariants enforced
-------------------
* Breaks are numbered in chronological order starting at 1.
* At most ``max_breaks_per_day`` records per day.
* A break ending before it starts is a data error, never clamped to zero.
* ``minimum <= effective <= maximum`` for tracked days.
* On a shift overlapping the night window the night minimum and default
  replace the day values.

Failure modes
-------------
* ``NegativeBreakDurationError`` -- a record's end precedes its start.
* ``TooManyBreaksError`` -- more records than ``max_breaks_per_day``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, time

from payroll_config.legal import legal_minimum_break_minutes
from payroll_config.schema import BreakPolicy
from payroll_engines.intervals import minutes_between, night_overlap_minutes, resolve_shift_end
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.attendance import BreakRecord, NumberedBreak
from payroll_kernel.domain.results import BreakEvaluation
from payroll_kernel.exceptions import NegativeBreakDurationError, TooManyBreaksError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.breaks")


def shift_overlaps_night(
    check_in: datetime,
    check_out: datetime,
    night_start: time,
    night_end: time,
) -> bool:
    """True when any part of the shift falls inside the night window."""
    end, _ = resolve_shift_end(check_in, check_out)
    return night_overlap_minutes(check_in, end, night_start, night_end) > 0


def number_breaks(
    records: Sequence[BreakRecord],
    max_breaks_per_day: int,
    work_date: date | None = None,
) -> tuple[NumberedBreak, ...]:
    """
    Sort break records chronologically and number them from 1.

    Raises:
        TooManyBreaksError: more records than ``max_breaks_per_day``.
        NegativeBreakDurationError: a record ends before it starts; the
            error's ``field`` names the record's position as supplied.
    """
    if len(records) > max_breaks_per_day:
        raise TooManyBreaksError(len(records), max_breaks_per_day, work_date)

    for index, record in enumerate(records):
        if record.end < record.start:
            raise NegativeBreakDurationError(
                f"break_records[{index}].end", record.start, record.end, work_date
            )

    ordered = sorted(records, key=lambda r: (r.start, r.end))
    return tuple(
        NumberedBreak(
            number=n,
            start=r.start,
            end=r.end,
            minutes=minutes_between(r.start, r.end),
        )
        for n, r in enumerate(ordered, start=1)
    )


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(value, hi))


@traced_engine(
    "break_evaluator",
    "1.0",
    fingerprint_fields=("records", "policy", "night_shift", "gross_working_minutes"),
)
def evaluate_breaks(
    records: Sequence[BreakRecord],
    policy: BreakPolicy,
    *,
    night_shift: bool,
    gross_working_minutes: int = 0,
    work_date: date | None = None,
) -> BreakEvaluation:
    """
    Evaluate one day's breaks.

    Tracked (``tracking_enabled`` and not ``fixed_mode``): actual minutes
    are summed from the records; effective is actual clamped into
    [minimum, maximum]; compliant when actual >= minimum.

    Untracked: effective is the policy default (night default on a night
    shift), kept inside [minimum, maximum]; compliant by definition.

    With ``use_legal_minimum`` the minimum is raised to the locale's legal
    minimum for ``gross_working_minutes``, never above the maximum.
    """
    numbered = number_breaks(records, policy.max_breaks_per_day, work_date)
    actual = sum(b.minutes for b in numbered)

    if night_shift:
        minimum = policy.night_minimum_minutes
        default = policy.night_default_minutes
    else:
        minimum = policy.minimum_minutes
        default = policy.default_minutes
    maximum = policy.maximum_minutes

    if policy.use_legal_minimum:
        legal = legal_minimum_break_minutes(
            policy.locale, gross_working_minutes, night_shift=night_shift
        )
        minimum = max(minimum, legal)
    minimum = min(minimum, maximum)

    tracked = policy.tracking_enabled and not policy.fixed_mode
    if tracked:
        effective = _clamp(actual, minimum, maximum)
        compliant = actual >= minimum
        if not compliant:
            logger.info(
                "break_below_minimum",
                extra={
                    "work_date": work_date.isoformat() if work_date else None,
                    "actual_minutes": actual,
                    "minimum_minutes": minimum,
                    "night_shift": night_shift,
                },
            )
    else:
        effective = _clamp(default, minimum, maximum)
        compliant = True

    return BreakEvaluation(
        breaks=numbered,
        actual_minutes=actual,
        effective_minutes=effective,
        minimum_minutes=minimum,
        maximum_minutes=maximum,
        compliant=compliant,
        night_shift=night_shift,
        tracked=tracked,
    )
