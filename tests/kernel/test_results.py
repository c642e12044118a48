"""
Tests for the result value objects' balance invariants.

The engines build these objects, so the checks here guard against
programming errors: a result that does not balance must not exist.
"""

from decimal import Decimal

import pytest

from payroll_kernel.domain.attendance import AttendanceSummary
from payroll_kernel.domain.enums import (
    AllowanceType,
    BreakType,
    CapScope,
    OvertimeCategory,
    SalaryType,
)
from payroll_kernel.domain.results import (
    ZERO,
    AllowanceItem,
    AllowanceResult,
    CapExceededWarning,
    DeductionResult,
    OvertimeResult,
    PayrollResult,
    WorkingHoursResult,
)


def _working_hours(**overrides) -> WorkingHoursResult:
    values = dict(
        gross_working_minutes=540,
        net_working_minutes=480,
        total_break_minutes=60,
        effective_break_minutes=60,
        break_type=BreakType.UNPAID,
        break_compliant=True,
        is_night_shift=False,
        is_overnight_shift=False,
        night_minutes=0,
        regular_minutes=480,
    )
    values.update(overrides)
    return WorkingHoursResult(**values)


def _payroll(**overrides) -> PayrollResult:
    values = dict(
        employee_id="E-1",
        salary_type=SalaryType.MONTHLY,
        hourly_rate=Decimal("1000"),
        base_salary=Decimal("300000"),
        total_overtime_pay=Decimal("5000"),
        total_allowances=Decimal("10000"),
        total_deductions=Decimal("30500"),
        gross_salary=Decimal("315000"),
        unrounded_net_salary=Decimal("284500"),
        net_salary=Decimal("284500"),
        rounded_gross_salary=Decimal("315000"),
        overtime=OvertimeResult(),
        allowances=AllowanceResult(),
        deductions=DeductionResult(),
    )
    values.update(overrides)
    return PayrollResult(**values)


# ---------------------------------------------------------------------------
# WorkingHoursResult
# ---------------------------------------------------------------------------


class TestWorkingHoursResult:
    def test_balanced_unpaid(self):
        wh = _working_hours()
        assert wh.net_working_minutes == 480

    def test_paid_break_not_deducted(self):
        wh = _working_hours(
            break_type=BreakType.PAID, net_working_minutes=540, regular_minutes=540
        )
        assert wh.net_working_minutes == wh.gross_working_minutes

    def test_unbalanced_net_rejected(self):
        with pytest.raises(ValueError, match="net_working_minutes"):
            _working_hours(net_working_minutes=500, regular_minutes=500)

    def test_night_plus_regular_must_equal_net(self):
        with pytest.raises(ValueError, match="night"):
            _working_hours(night_minutes=10, regular_minutes=480)

    def test_negative_split_rejected(self):
        with pytest.raises(ValueError):
            _working_hours(night_minutes=-10, regular_minutes=490)


# ---------------------------------------------------------------------------
# OvertimeResult
# ---------------------------------------------------------------------------


class TestOvertimeResult:
    def test_empty_result_balances(self):
        result = OvertimeResult()
        assert result.total_overtime_minutes == 0
        assert result.premium_pay == ZERO
        assert not result.requires_approval

    def test_from_categories_sums_totals(self):
        result = OvertimeResult.from_categories(
            {OvertimeCategory.REGULAR: 30, OvertimeCategory.NIGHT: 15},
            {OvertimeCategory.REGULAR: Decimal("625"), OvertimeCategory.NIGHT: Decimal("375")},
        )
        assert result.total_overtime_minutes == 45
        assert result.total_overtime_amount == Decimal("1000")
        assert result.holiday_overtime_minutes == 0

    def test_mismatched_minutes_rejected(self):
        with pytest.raises(ValueError, match="category minutes"):
            OvertimeResult(regular_overtime_minutes=30, total_overtime_minutes=20)

    def test_mismatched_amounts_rejected(self):
        with pytest.raises(ValueError, match="category amounts"):
            OvertimeResult(
                regular_overtime_amount=Decimal("100"), total_overtime_amount=Decimal("90")
            )

    def test_premium_pay_includes_night_work(self):
        result = OvertimeResult.from_categories(
            {OvertimeCategory.REGULAR: 60},
            {OvertimeCategory.REGULAR: Decimal("1250")},
            night_work_minutes=60,
            night_work_amount=Decimal("1250"),
        )
        assert result.total_overtime_amount == Decimal("1250")
        assert result.premium_pay == Decimal("2500")

    def test_cap_warning_requires_approval(self):
        warning = CapExceededWarning(scope=CapScope.DAILY, cap_minutes=240, actual_minutes=300)
        result = OvertimeResult(cap_warnings=(warning,))
        assert result.requires_approval
        assert warning.excess_minutes == 60
        assert warning.code == "OVERTIME_CAP_EXCEEDED"


# ---------------------------------------------------------------------------
# Allowances, deductions and payroll
# ---------------------------------------------------------------------------


class TestAllowanceResult:
    def test_taxable_split_must_balance(self):
        with pytest.raises(ValueError):
            AllowanceResult(
                total_allowances=Decimal("100"),
                taxable_allowances=Decimal("60"),
                non_taxable_allowances=Decimal("30"),
            )

    def test_paid_and_skipped_items(self):
        paid = AllowanceItem("A", "A", AllowanceType.FIXED, Decimal("10"), True)
        skipped = AllowanceItem(
            "B", "B", AllowanceType.CONDITIONAL, Decimal("20"), True,
            eligible=False, ineligible_reason="1 absence day(s)",
        )
        result = AllowanceResult(
            items=(paid, skipped),
            total_allowances=Decimal("10"),
            taxable_allowances=Decimal("10"),
        )
        assert result.paid_items == (paid,)
        assert result.skipped_items == (skipped,)
        assert skipped.payable_amount == ZERO


class TestDeductionResult:
    def test_total_must_equal_components(self):
        with pytest.raises(ValueError, match="total_deductions"):
            DeductionResult(
                rule_deductions=Decimal("100"),
                late_penalty=Decimal("5"),
                total_deductions=Decimal("100"),
            )


class TestPayrollResult:
    def test_balanced(self):
        result = _payroll()
        assert result.rounding_adjustment == ZERO
        assert not result.computed_with_defaults

    def test_gross_mismatch_rejected(self):
        with pytest.raises(ValueError, match="gross_salary"):
            _payroll(gross_salary=Decimal("314999"), unrounded_net_salary=Decimal("284499"))

    def test_net_mismatch_rejected(self):
        with pytest.raises(ValueError, match="unrounded_net_salary"):
            _payroll(unrounded_net_salary=Decimal("284000"))

    def test_rounding_adjustment(self):
        result = _payroll(
            total_deductions=Decimal("30500.4"),
            unrounded_net_salary=Decimal("284499.6"),
            net_salary=Decimal("284500"),
        )
        assert result.rounding_adjustment == Decimal("0.4")

    def test_defaults_flag(self):
        assert _payroll(defaults_used=("breaks",)).computed_with_defaults


class TestAttendanceSummary:
    def test_negative_counter_rejected(self):
        with pytest.raises(ValueError, match="late_count"):
            AttendanceSummary(late_count=-1)
