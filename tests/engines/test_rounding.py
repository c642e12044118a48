"""
Tests for the Time Rounding Engine.

Covers interval/direction combinations, the master and per-checkpoint
switches, midnight roll-over and idempotence.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from payroll_config.schema import AttendancePolicy, CheckpointRounding, RoundingPolicy
from payroll_engines.rounding import round_attendance_day, round_checkpoint, round_time
from payroll_kernel.domain.attendance import AttendanceDay, BreakRecord
from payroll_kernel.domain.enums import RoundingDirection, RoundingInterval
from payroll_kernel.exceptions import CheckOutBeforeCheckInError


def _policy(
    interval: RoundingInterval = RoundingInterval.MINUTES_15,
    direction: RoundingDirection = RoundingDirection.NEAREST,
) -> RoundingPolicy:
    return RoundingPolicy(interval=interval, direction=direction)


def _attendance(enabled: bool = True, **checkpoint_flags) -> AttendancePolicy:
    rounding = _policy()
    cps = {
        name: CheckpointRounding(enabled=checkpoint_flags.get(name, True), policy=rounding)
        for name in ("check_in", "check_out", "break_start", "break_end")
    }
    return AttendancePolicy(enable_rounding=enabled, **cps)


def _at(hour: int, minute: int, second: int = 0) -> datetime:
    return datetime(2024, 3, 1, hour, minute, second)


# ---------------------------------------------------------------------------
# round_time
# ---------------------------------------------------------------------------


class TestRoundTime:
    @pytest.mark.parametrize(
        "direction,expected",
        [
            (RoundingDirection.UP, _at(9, 15)),
            (RoundingDirection.DOWN, _at(9, 0)),
            (RoundingDirection.NEAREST, _at(9, 0)),
        ],
    )
    def test_directions_at_0907(self, direction, expected):
        assert round_time(_at(9, 7), _policy(direction=direction)) == expected

    def test_nearest_tie_rounds_up(self):
        assert round_time(_at(9, 5), _policy(RoundingInterval.MINUTES_10)) == _at(9, 10)

    def test_nearest_above_half(self):
        assert round_time(_at(9, 8), _policy()) == _at(9, 15)

    def test_on_boundary_unchanged(self):
        for direction in RoundingDirection:
            assert round_time(_at(9, 30), _policy(direction=direction)) == _at(9, 30)

    def test_seconds_discarded(self):
        assert round_time(_at(9, 0, 59), _policy(direction=RoundingDirection.UP)) == _at(9, 0)

    def test_hour_interval(self):
        assert round_time(_at(17, 31), _policy(RoundingInterval.MINUTES_60)) == _at(18, 0)

    def test_rolls_past_midnight(self):
        result = round_time(_at(23, 55), _policy(direction=RoundingDirection.UP))
        assert result == datetime(2024, 3, 2, 0, 0)

    def test_tzinfo_preserved(self):
        tz = timezone(timedelta(hours=9))
        t = datetime(2024, 3, 1, 9, 7, tzinfo=tz)
        assert round_time(t, _policy()).tzinfo is tz

    def test_idempotent(self):
        policy = _policy(RoundingInterval.MINUTES_10, RoundingDirection.UP)
        once = round_time(_at(13, 1), policy)
        assert round_time(once, policy) == once


# ---------------------------------------------------------------------------
# Checkpoint switches
# ---------------------------------------------------------------------------


class TestRoundCheckpoint:
    def test_master_switch_off_passes_through(self):
        policy = _attendance(enabled=False)
        assert round_checkpoint(_at(9, 7), "check_in", policy) == _at(9, 7)

    def test_checkpoint_flag_off_passes_through(self):
        policy = _attendance(check_in=False)
        assert round_checkpoint(_at(9, 7), "check_in", policy) == _at(9, 7)
        assert round_checkpoint(_at(18, 8), "check_out", policy) == _at(18, 15)

    def test_unknown_checkpoint(self):
        with pytest.raises(KeyError):
            round_checkpoint(_at(9, 0), "lunch", _attendance())


class TestRoundAttendanceDay:
    def test_rounds_every_timestamp(self):
        day = AttendanceDay(
            work_date=date(2024, 3, 1),
            raw_check_in=_at(8, 53),
            raw_check_out=_at(18, 8),
            break_records=(BreakRecord(_at(12, 2), _at(12, 58)),),
        )
        rounded = round_attendance_day(day, _attendance())
        assert rounded.check_in == _at(9, 0)
        assert rounded.check_out == _at(18, 15)
        assert rounded.break_records == (BreakRecord(_at(12, 0), _at(13, 0)),)

    def test_overnight_check_out_resolved_before_rounding(self):
        day = AttendanceDay(
            work_date=date(2024, 3, 4),
            raw_check_in=datetime(2024, 3, 4, 23, 53),
            raw_check_out=datetime(2024, 3, 4, 6, 0),
        )
        rounded = round_attendance_day(day, _attendance())
        assert rounded.check_in == datetime(2024, 3, 5, 0, 0)
        assert rounded.check_out == datetime(2024, 3, 5, 6, 0)

    def test_check_out_before_check_in_rejected(self):
        day = AttendanceDay(
            work_date=date(2024, 3, 4),
            raw_check_in=datetime(2024, 3, 4, 9, 0),
            raw_check_out=datetime(2024, 3, 3, 18, 0),
        )
        with pytest.raises(CheckOutBeforeCheckInError):
            round_attendance_day(day, _attendance())

    def test_disabled_returns_raw(self):
        day = AttendanceDay(
            work_date=date(2024, 3, 1), raw_check_in=_at(8, 53), raw_check_out=_at(18, 8)
        )
        rounded = round_attendance_day(day, AttendancePolicy())
        assert (rounded.check_in, rounded.check_out) == (_at(8, 53), _at(18, 8))

    def test_emits_engine_trace(self, captured_logs):
        day = AttendanceDay(
            work_date=date(2024, 3, 1), raw_check_in=_at(9, 0), raw_check_out=_at(18, 0)
        )
        round_attendance_day(day, _attendance())
        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert traces[0]["engine_name"] == "time_rounding"
