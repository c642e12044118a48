"""
Deduction Evaluator (``payroll_engines.deduction``).

Responsibility
--------------
Applies configured deduction rules in order and computes the late,
early-leave and absence penalties for one employee's pay period.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Runs off ``AttendanceSummary``
and the base salary; feeds the payroll aggregator.

Invariants enforced
-------------------
* Rules apply in ascending ``order``; equal orders keep declaration order.
* PERCENTAGE rules are a percentage of the base salary passed in.
* total = sum of rule items + late penalty + early-leave penalty +
  absence deduction (checked by ``DeductionResult``).
* Amounts keep full Decimal precision; rounding happens once, in the
  aggregator.
* Absence deduction needs a monthly salary; without one it is zero.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_config.schema import DeductionConfig, DeductionRule
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.attendance import AttendanceSummary
from payroll_kernel.domain.enums import DeductionType
from payroll_kernel.domain.results import ZERO, DeductionItem, DeductionResult
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.deduction")

HUNDRED = Decimal("100")


def ordered_rules(config: DeductionConfig) -> list[DeductionRule]:
    # sorted() is stable, so equal orders keep declaration order
    return sorted(config.rules, key=lambda r: r.order)


def _rule_amount(rule: DeductionRule, base_salary: Decimal) -> Decimal:
    if rule.type == DeductionType.PERCENTAGE:
        return base_salary * rule.percentage / HUNDRED
    return rule.amount


@traced_engine(
    "deduction_evaluator",
    "1.0",
    fingerprint_fields=("config", "summary", "base_salary", "monthly_salary"),
)
def evaluate_deductions(
    config: DeductionConfig,
    summary: AttendanceSummary,
    base_salary: Decimal,
    *,
    monthly_salary: Decimal | None = None,
    standard_working_days_per_month: int = 22,
) -> DeductionResult:
    items = tuple(
        DeductionItem(
            code=rule.code,
            name=rule.name,
            type=rule.type,
            amount=_rule_amount(rule, base_salary),
            order=rule.order,
            percentage=rule.percentage,
        )
        for rule in ordered_rules(config)
    )
    rule_total = sum((i.amount for i in items), ZERO)

    late = ZERO
    if config.enable_late_penalty:
        late = Decimal(summary.total_late_minutes) * config.late_penalty_per_minute

    early = ZERO
    if config.enable_early_leave_penalty:
        early = Decimal(summary.total_early_leave_minutes) * config.early_leave_penalty_per_minute

    absence = ZERO
    if config.enable_absence_deduction and summary.absence_days:
        if monthly_salary is None:
            logger.info(
                "absence_deduction_skipped",
                extra={"absence_days": summary.absence_days, "reason": "no monthly salary"},
            )
        else:
            daily = monthly_salary / Decimal(standard_working_days_per_month)
            absence = Decimal(summary.absence_days) * daily

    total = rule_total + late + early + absence
    logger.debug(
        "deductions_evaluated",
        extra={
            "rule_count": len(items),
            "rule_deductions": str(rule_total),
            "late_penalty": str(late),
            "early_leave_penalty": str(early),
            "absence_deduction": str(absence),
            "total_deductions": str(total),
        },
    )
    return DeductionResult(
        items=items,
        rule_deductions=rule_total,
        late_penalty=late,
        early_leave_penalty=early,
        absence_deduction=absence,
        total_deductions=total,
    )
