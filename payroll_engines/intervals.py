"""
Wall-clock interval arithmetic shared by the break, working-hours and
overtime engines.

A night window is given as two clock times.  When ``night_end`` is not
after ``night_start`` the window wraps midnight (22:00-05:00 runs from
22:00 on day D to 05:00 on day D+1).  Overlaps are measured against every
daily instance of the window that could touch the interval, so a shift
spanning two nights is counted correctly.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from payroll_kernel.exceptions import CheckOutBeforeCheckInError


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``; negative when end precedes start."""
    return int((end - start).total_seconds() // 60)


def overlap_minutes(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> int:
    lo = max(a_start, b_start)
    hi = min(a_end, b_end)
    if hi <= lo:
        return 0
    return minutes_between(lo, hi)


def night_windows(
    start: datetime,
    end: datetime,
    night_start: time,
    night_end: time,
) -> list[tuple[datetime, datetime]]:
    """Every instance of the night window that may intersect [start, end)."""
    if night_start == night_end:
        return []
    wraps = night_end <= night_start
    tz = start.tzinfo
    windows = []
    day: date = start.date() - timedelta(days=1)
    while day <= end.date():
        w_start = datetime.combine(day, night_start, tzinfo=tz)
        w_end_day = day + timedelta(days=1) if wraps else day
        w_end = datetime.combine(w_end_day, night_end, tzinfo=tz)
        windows.append((w_start, w_end))
        day += timedelta(days=1)
    return windows


def night_overlap_minutes(
    start: datetime,
    end: datetime,
    night_start: time,
    night_end: time,
) -> int:
    """Total minutes of [start, end) inside the (possibly wrapping) night window."""
    if end <= start:
        return 0
    return sum(
        overlap_minutes(start, end, w_start, w_end)
        for w_start, w_end in night_windows(start, end, night_start, night_end)
    )


def resolve_shift_end(
    check_in: datetime,
    check_out: datetime,
    work_date: date | None = None,
) -> tuple[datetime, bool]:
    """
    Return ``(end, is_overnight)`` for a shift.

    A check-out whose wall-clock time is earlier than check-in's is read as
    the next morning: the end becomes check-in's date plus one day at the
    check-out clock time.

    Raises:
        CheckOutBeforeCheckInError: check-out precedes check-in but its
            wall-clock time is not earlier, so no overnight reading exists.
    """
    if check_out >= check_in:
        return check_out, check_out.date() > check_in.date()
    if check_out.time() < check_in.time():
        end = datetime.combine(
            check_in.date() + timedelta(days=1), check_out.time(), tzinfo=check_in.tzinfo
        )
        return end, True
    raise CheckOutBeforeCheckInError(check_in, check_out, work_date)
