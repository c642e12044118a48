"""Tests for folding evaluated days into the period attendance summary."""

from datetime import date, datetime, time
from decimal import Decimal

from payroll_config.schema import AttendancePolicy, BreakPolicy, CompanyPolicySet
from payroll_engines.attendance_day import evaluate_day
from payroll_engines.attendance_summary import (
    early_leave_minutes,
    late_minutes,
    scheduled_window,
    summarize_attendance,
)
from payroll_kernel.domain.attendance import AttendanceDay
from payroll_kernel.domain.enums import BreakType

RATE = Decimal("1000")


def _at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 3, day, hour, minute)


def _evaluate(check_in, check_out, policy=None, **flags):
    policies = CompanyPolicySet(
        company_id="acme",
        attendance=policy or AttendancePolicy(),
        breaks=BreakPolicy(break_type=BreakType.UNPAID, use_legal_minimum=False),
    )
    day = AttendanceDay(check_in.date(), check_in, check_out, **flags)
    return evaluate_day(day, policies, RATE)


class TestLateAndEarly:
    def test_on_time(self):
        day = _evaluate(_at(4, 9), _at(4, 18))
        assert late_minutes(day, AttendancePolicy()) == 0
        assert early_leave_minutes(day, AttendancePolicy()) == 0

    def test_late_and_early(self):
        day = _evaluate(_at(4, 9, 20), _at(4, 17, 30))
        assert late_minutes(day, AttendancePolicy()) == 20
        assert early_leave_minutes(day, AttendancePolicy()) == 30

    def test_within_grace(self):
        policy = AttendancePolicy(late_grace_minutes=10, early_leave_grace_minutes=10)
        day = _evaluate(_at(4, 9, 10), _at(4, 17, 50), policy)
        assert late_minutes(day, policy) == 0
        assert early_leave_minutes(day, policy) == 0

    def test_beyond_grace_counts_full_minutes(self):
        policy = AttendancePolicy(late_grace_minutes=10)
        day = _evaluate(_at(4, 9, 11), _at(4, 18), policy)
        assert late_minutes(day, policy) == 11

    def test_overnight_schedule_window(self):
        policy = AttendancePolicy(default_work_start=time(22), default_work_end=time(6))
        day = _evaluate(_at(4, 22), _at(5, 6), policy)
        assert scheduled_window(day, policy) == (_at(4, 22), _at(5, 6))
        assert early_leave_minutes(day, policy) == 0

    def test_own_schedule_overrides_company_default(self):
        day = _evaluate(
            _at(4, 22), _at(5, 6), scheduled_start=time(22), scheduled_end=time(6)
        )
        assert scheduled_window(day, AttendancePolicy()) == (_at(4, 22), _at(5, 6))
        assert late_minutes(day, AttendancePolicy()) == 0
        assert early_leave_minutes(day, AttendancePolicy()) == 0

    def test_late_against_own_schedule(self):
        day = _evaluate(
            _at(4, 13, 15), _at(4, 22), scheduled_start=time(13), scheduled_end=time(22)
        )
        assert late_minutes(day, AttendancePolicy()) == 15
        assert early_leave_minutes(day, AttendancePolicy()) == 0

    def test_night_worker_not_late_in_summary(self):
        days = [
            _evaluate(_at(4, 22), _at(5, 6), scheduled_start=time(22), scheduled_end=time(6)),
            _evaluate(_at(5, 22), _at(6, 6), scheduled_start=time(22), scheduled_end=time(6)),
        ]
        summary = summarize_attendance(days, AttendancePolicy())
        assert summary.late_count == 0
        assert summary.total_late_minutes == 0
        assert summary.early_leave_count == 0


class TestSummarizeAttendance:
    def test_counters(self):
        days = [
            _evaluate(_at(4, 9, 5), _at(4, 18)),
            _evaluate(_at(5, 9), _at(5, 17, 45)),
            _evaluate(_at(6, 9), _at(6, 19)),
        ]
        summary = summarize_attendance(days, AttendancePolicy(), absence_days=1)
        assert summary.working_days == 3
        assert summary.number_of_shifts == 3
        assert summary.net_working_minutes == 475 + 465 + 540
        assert summary.working_hours == (475 + 465 + 540) // 60
        assert summary.late_count == 1
        assert summary.total_late_minutes == 5
        assert summary.early_leave_count == 1
        assert summary.total_early_leave_minutes == 15
        assert summary.absence_days == 1
        assert summary.total_break_minutes == 0

    def test_weekend_and_holiday_not_late(self):
        days = [
            _evaluate(_at(9, 11), _at(9, 15), is_weekend=True),
            _evaluate(_at(20, 10), _at(20, 16), is_holiday=True),
        ]
        summary = summarize_attendance(days, AttendancePolicy())
        assert summary.late_count == 0
        assert summary.early_leave_count == 0

    def test_split_shifts_count_one_day(self):
        days = [
            _evaluate(_at(4, 6), _at(4, 10)),
            _evaluate(_at(4, 17), _at(4, 21)),
        ]
        summary = summarize_attendance(days, AttendancePolicy())
        assert summary.working_days == 1
        assert summary.number_of_shifts == 2

    def test_empty(self):
        summary = summarize_attendance([], AttendancePolicy())
        assert summary.working_days == 0
        assert summary.net_working_minutes == 0
