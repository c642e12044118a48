"""
Policy Validator (``payroll_config.validator``).

Responsibility
--------------
Checks a resolved ``CompanyPolicySet`` before it is written to the
settings store.  Structural invariants are already enforced by the schema
constructors; this module covers the cross-field and statutory rules.

Architecture position
---------------------
**Config layer** -- write-time validation.  Called by whatever persists
company settings; never called during a payroll calculation.

Invariants enforced
-------------------
* Overtime multipliers are not below the locale's legal minimum unless
  ``use_legal_minimum`` is on (in which case the legal table replaces them).
* Night windows of the break and overtime policies agree.
* Break periods lie inside the default work day.

Failure modes
-------------
* ``PolicyValidationResult.errors``  -> the policy MUST NOT be stored.
* ``PolicyValidationResult.warnings``  -> may be stored, should be reviewed.
* ``ensure_writable`` raises ``MultiplierBelowLegalMinimumError`` for the
  statutory case so the caller can surface a typed error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from payroll_config.legal import legal_minimum_multipliers, normalize_locale
from payroll_config.schema import CompanyPolicySet, OvertimePolicy
from payroll_kernel.domain.enums import AllowanceType
from payroll_kernel.exceptions import MultiplierBelowLegalMinimumError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.validator")


@dataclass
class PolicyValidationResult:
    """
    Result of policy validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block storage but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def multipliers_below_legal_minimum(policy: OvertimePolicy) -> dict[str, tuple[Decimal, Decimal]]:
    """Return ``{name: (configured, legal_minimum)}`` for every violation."""
    legal = legal_minimum_multipliers(policy.locale).as_dict()
    return {
        name: (configured, legal[name])
        for name, configured in policy.multipliers.as_dict().items()
        if configured < legal[name]
    }


def validate_policy_set(policies: CompanyPolicySet) -> PolicyValidationResult:
    """
    Validate a policy set for storage.

    Postconditions:
        - Returns a ``PolicyValidationResult`` with errors and warnings.
        - A policy set with errors MUST NOT be stored.
    """
    result = PolicyValidationResult()

    _validate_multipliers(policies, result)
    _validate_night_windows(policies, result)
    _validate_break_periods(policies, result)
    _validate_allowances(policies, result)
    _validate_deductions(policies, result)

    if not result.is_valid:
        logger.warning(
            "policy_validation_failed",
            extra={"company_id": policies.company_id, "errors": result.errors},
        )
    return result


def ensure_writable(policies: CompanyPolicySet) -> PolicyValidationResult:
    """
    Validate and raise on the statutory case.

    Raises:
        MultiplierBelowLegalMinimumError: a configured overtime multiplier is
            below the legal minimum and ``use_legal_minimum`` is off.
    """
    overtime = policies.overtime
    if not overtime.use_legal_minimum:
        violations = multipliers_below_legal_minimum(overtime)
        if violations:
            raise MultiplierBelowLegalMinimumError(
                normalize_locale(overtime.locale),
                {name: (str(c), str(m)) for name, (c, m) in violations.items()},
            )
    return validate_policy_set(policies)


def _validate_multipliers(policies: CompanyPolicySet, result: PolicyValidationResult) -> None:
    overtime = policies.overtime
    violations = multipliers_below_legal_minimum(overtime)
    if not violations:
        return
    locale = normalize_locale(overtime.locale)
    for name, (configured, minimum) in sorted(violations.items()):
        msg = (
            f"overtime.multipliers.{name}={configured} is below the legal minimum "
            f"{minimum} for locale '{locale}'"
        )
        if overtime.use_legal_minimum:
            result.add_warning(f"{msg}; legal minimum will be used")
        else:
            result.add_error(msg)


def _validate_night_windows(policies: CompanyPolicySet, result: PolicyValidationResult) -> None:
    b, o = policies.breaks, policies.overtime
    if (b.night_start, b.night_end) != (o.night_start, o.night_end):
        result.add_warning(
            f"breaks night window {b.night_start:%H:%M}-{b.night_end:%H:%M} differs from "
            f"overtime night window {o.night_start:%H:%M}-{o.night_end:%H:%M}"
        )
    if o.night_start == o.night_end:
        result.add_error("overtime.night_start and night_end must differ")


def _validate_break_periods(policies: CompanyPolicySet, result: PolicyValidationResult) -> None:
    day = policies.attendance
    if day.default_work_start >= day.default_work_end:
        # Overnight schedule; period containment is not checked.
        return
    for period in policies.breaks.ordered_periods:
        if period.start < day.default_work_start or period.end > day.default_work_end:
            result.add_warning(
                f"break period '{period.name}' {period.start:%H:%M}-{period.end:%H:%M} lies "
                f"outside the work day {day.default_work_start:%H:%M}-"
                f"{day.default_work_end:%H:%M}"
            )


def _validate_allowances(policies: CompanyPolicySet, result: PolicyValidationResult) -> None:
    for rule in policies.allowances.rules:
        if rule.type == AllowanceType.CONDITIONAL and rule.condition is None:
            result.add_warning(
                f"allowance '{rule.code}' is CONDITIONAL but has no condition; "
                "it will always be paid"
            )
        if rule.type != AllowanceType.CONDITIONAL and rule.condition is not None:
            result.add_warning(
                f"allowance '{rule.code}' is {rule.type.value}; its condition is ignored"
            )


def _validate_deductions(policies: CompanyPolicySet, result: PolicyValidationResult) -> None:
    d = policies.deductions
    for rule in d.rules:
        if rule.percentage is not None and rule.percentage > 100:
            result.add_error(f"deduction '{rule.code}' percentage {rule.percentage} exceeds 100")
    if d.enable_late_penalty and d.late_penalty_per_minute == 0:
        result.add_warning("late penalty enabled with a zero per-minute rate")
    if d.enable_early_leave_penalty and d.early_leave_penalty_per_minute == 0:
        result.add_warning("early leave penalty enabled with a zero per-minute rate")
    codes = [r.code for r in d.rules]
    if len(codes) != len(set(codes)):
        result.add_error("deduction codes must be unique")
