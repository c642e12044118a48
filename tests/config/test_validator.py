"""Tests for write-time policy validation and the statutory minimum tables."""

from datetime import time
from decimal import Decimal

import pytest

from payroll_config.legal import (
    legal_minimum_break_minutes,
    legal_minimum_multipliers,
    normalize_locale,
)
from payroll_config.schema import (
    AllowanceCondition,
    AllowanceConfig,
    AllowanceRule,
    BreakPeriod,
    BreakPolicy,
    CompanyPolicySet,
    DeductionConfig,
    DeductionRule,
    OvertimeMultipliers,
    OvertimePolicy,
)
from payroll_config.validator import (
    PolicyValidationResult,
    ensure_writable,
    multipliers_below_legal_minimum,
    validate_policy_set,
)
from payroll_kernel.domain.enums import AllowanceType, DeductionType
from payroll_kernel.exceptions import MultiplierBelowLegalMinimumError


def _low_overtime(**overrides) -> OvertimePolicy:
    values = dict(
        enabled=True,
        locale="vi",
        use_legal_minimum=False,
        multipliers=OvertimeMultipliers(regular=Decimal("1.25")),
    )
    values.update(overrides)
    return OvertimePolicy(**values)


class TestLegalTables:
    def test_normalize_locale(self):
        assert normalize_locale("ja_JP") == "ja"
        assert normalize_locale("vi-VN") == "vi"
        assert normalize_locale("fr") == "default"
        assert normalize_locale(None) == "default"

    def test_multiplier_tables(self):
        assert legal_minimum_multipliers("vi").holiday_overtime == Decimal("2.00")
        assert legal_minimum_multipliers("xx") == legal_minimum_multipliers("default")

    @pytest.mark.parametrize(
        "locale,minutes,night,expected",
        [
            ("ja", 360, False, 0),
            ("ja", 419, False, 0),
            ("ja", 420, False, 45),
            ("ja", 539, False, 45),
            ("ja", 540, False, 60),
            ("vi", 420, False, 30),
            ("vi", 420, True, 45),
            ("en", 420, False, 30),
        ],
    )
    def test_break_minimums(self, locale, minutes, night, expected):
        assert legal_minimum_break_minutes(locale, minutes, night_shift=night) == expected


class TestValidatePolicySet:
    def test_defaults_valid(self):
        result = validate_policy_set(CompanyPolicySet(company_id="acme"))
        assert result.is_valid
        assert result.warnings == []

    def test_low_multiplier_is_error(self, captured_logs):
        policies = CompanyPolicySet(company_id="acme", overtime=_low_overtime())
        result = validate_policy_set(policies)
        assert not result.is_valid
        assert any("regular" in e for e in result.errors)
        assert any(r["message"] == "policy_validation_failed" for r in captured_logs())

    def test_low_multiplier_with_legal_minimum_is_warning(self):
        policies = CompanyPolicySet(
            company_id="acme", overtime=_low_overtime(use_legal_minimum=True)
        )
        result = validate_policy_set(policies)
        assert result.is_valid
        assert any("legal minimum will be used" in w for w in result.warnings)

    def test_night_window_mismatch_warns(self):
        policies = CompanyPolicySet(
            company_id="acme", breaks=BreakPolicy(night_start=time(23, 0))
        )
        result = validate_policy_set(policies)
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_degenerate_overtime_night_window(self):
        policies = CompanyPolicySet(
            company_id="acme",
            breaks=BreakPolicy(night_start=time(22), night_end=time(22)),
            overtime=OvertimePolicy(night_start=time(22), night_end=time(22)),
        )
        assert not validate_policy_set(policies).is_valid

    def test_break_period_outside_work_day(self):
        periods = (BreakPeriod("late snack", time(19), time(19, 30), 30),)
        policies = CompanyPolicySet(company_id="acme", breaks=BreakPolicy(periods=periods))
        result = validate_policy_set(policies)
        assert any("late snack" in w for w in result.warnings)

    def test_allowance_condition_mismatch(self):
        rules = (
            AllowanceRule("a", "A", AllowanceType.CONDITIONAL, Decimal("1")),
            AllowanceRule(
                "b", "B", AllowanceType.FIXED, Decimal("1"),
                condition=AllowanceCondition(no_absence=True),
            ),
        )
        policies = CompanyPolicySet(company_id="acme", allowances=AllowanceConfig(rules=rules))
        result = validate_policy_set(policies)
        assert result.is_valid
        assert len(result.warnings) == 2

    def test_deduction_checks(self):
        rules = (
            DeductionRule("tax", "Tax", DeductionType.PERCENTAGE, percentage=Decimal("120")),
            DeductionRule("tax", "Tax again", DeductionType.FIXED, amount=Decimal("1")),
        )
        policies = CompanyPolicySet(
            company_id="acme",
            deductions=DeductionConfig(rules=rules, enable_late_penalty=True),
        )
        result = validate_policy_set(policies)
        assert len(result.errors) == 2
        assert result.warnings == ["late penalty enabled with a zero per-minute rate"]


class TestEnsureWritable:
    def test_raises_typed_error(self):
        policies = CompanyPolicySet(company_id="acme", overtime=_low_overtime())
        with pytest.raises(MultiplierBelowLegalMinimumError) as exc_info:
            ensure_writable(policies)
        assert exc_info.value.locale == "vi"
        assert exc_info.value.violations["regular"] == ("1.25", "1.50")

    def test_legal_minimum_on_does_not_raise(self):
        policies = CompanyPolicySet(
            company_id="acme", overtime=_low_overtime(use_legal_minimum=True)
        )
        assert ensure_writable(policies).is_valid

    def test_violations_listed(self):
        violations = multipliers_below_legal_minimum(_low_overtime())
        assert violations["regular"] == (Decimal("1.25"), Decimal("1.50"))


class TestPolicyValidationResult:
    def test_accumulates(self):
        result = PolicyValidationResult()
        result.add_warning("w")
        assert result.is_valid
        result.add_error("e")
        assert not result.is_valid
