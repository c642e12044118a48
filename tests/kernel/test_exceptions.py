"""Tests for the typed exception hierarchy and its error codes."""

from datetime import date, datetime

import pytest

from payroll_kernel.exceptions import (
    BatchCancelledError,
    CheckOutBeforeCheckInError,
    ConfigurationError,
    DataIntegrityError,
    MissingSalaryRateError,
    MultiplierBelowLegalMinimumError,
    NegativeBreakDurationError,
    PayrollEngineError,
    PolicyInvariantError,
    TooManyBreaksError,
    UnknownPolicyValueError,
    ValidationError,
)


ALL_ERRORS = [
    ConfigurationError,
    UnknownPolicyValueError,
    ValidationError,
    PolicyInvariantError,
    MultiplierBelowLegalMinimumError,
    DataIntegrityError,
    NegativeBreakDurationError,
    CheckOutBeforeCheckInError,
    TooManyBreaksError,
    MissingSalaryRateError,
    BatchCancelledError,
]


class TestHierarchy:
    @pytest.mark.parametrize("cls", ALL_ERRORS)
    def test_subclasses_base(self, cls):
        assert issubclass(cls, PayrollEngineError)

    def test_codes_unique(self):
        codes = [cls.code for cls in ALL_ERRORS]
        assert len(codes) == len(set(codes))

    def test_data_integrity_family(self):
        for cls in (
            NegativeBreakDurationError,
            CheckOutBeforeCheckInError,
            TooManyBreaksError,
            MissingSalaryRateError,
        ):
            assert issubclass(cls, DataIntegrityError)


class TestStructuredData:
    def test_negative_break_carries_field_and_date(self):
        exc = NegativeBreakDurationError(
            "break_records[1].end",
            datetime(2024, 3, 1, 13, 0),
            datetime(2024, 3, 1, 12, 0),
            date(2024, 3, 1),
        )
        assert exc.code == "NEGATIVE_BREAK_DURATION"
        assert exc.field == "break_records[1].end"
        assert exc.work_date == date(2024, 3, 1)
        assert str(exc).startswith("[2024-03-01] break_records[1].end")

    def test_check_out_before_check_in(self):
        exc = CheckOutBeforeCheckInError(
            datetime(2024, 3, 1, 9, 0), datetime(2024, 2, 29, 18, 0)
        )
        assert exc.field == "check_out"
        assert exc.work_date is None

    def test_unknown_policy_value(self):
        exc = UnknownPolicyValueError("breaks", "break_type", "SOMETIMES", ["PAID", "UNPAID"])
        assert exc.section == "breaks"
        assert exc.field == "break_type"
        assert "PAID, UNPAID" in str(exc)

    def test_multiplier_violation_message_sorted(self):
        exc = MultiplierBelowLegalMinimumError(
            "ja", {"regular": ("1.1", "1.25"), "night_work": ("1.0", "1.25")}
        )
        message = str(exc)
        assert message.index("night_work") < message.index("regular")
        assert exc.locale == "ja"

    def test_missing_salary_rate(self):
        exc = MissingSalaryRateError("E-9", "DAILY", "daily_rate")
        assert exc.field == "daily_rate"
        assert "E-9" in str(exc)

    def test_batch_cancelled(self):
        exc = BatchCancelledError("acme", 2, 10)
        assert exc.submitted == 2
        assert "2 of 10" in str(exc)
