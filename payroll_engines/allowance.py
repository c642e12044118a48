"""
Allowance Evaluator (``payroll_engines.allowance``).

Responsibility
--------------
Evaluates each configured allowance rule against the period's attendance
summary and produces itemized allowances with taxable / non-taxable
totals.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Runs off ``AttendanceSummary``
independently of the overtime chain; feeds the payroll aggregator.

Invariants enforced
-------------------
* Every rule yields exactly one item, in configuration order.  A skipped
  CONDITIONAL rule is kept with ``eligible=False`` and a readable
  ``ineligible_reason``; it is never dropped.
* taxable + non-taxable == total, over eligible items only.
* ONE_TIME rules are paid whenever evaluated.  Making sure one is not paid
  in two periods is the caller's bookkeeping.
"""

from __future__ import annotations

from payroll_config.schema import AllowanceCondition, AllowanceConfig, AllowanceRule
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.attendance import AttendanceSummary
from payroll_kernel.domain.enums import AllowanceType
from payroll_kernel.domain.results import ZERO, AllowanceItem, AllowanceResult
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.allowance")


def ineligibility_reasons(
    condition: AllowanceCondition, summary: AttendanceSummary
) -> list[str]:
    """Every unmet requirement of ``condition``, empty when eligible."""
    reasons = []
    if summary.working_days < condition.min_working_days:
        reasons.append(
            f"working days ({summary.working_days}) below minimum "
            f"({condition.min_working_days})"
        )
    if summary.working_hours < condition.min_working_hours:
        reasons.append(
            f"working hours ({summary.working_hours}) below minimum "
            f"({condition.min_working_hours})"
        )
    if condition.no_absence and summary.absence_days > 0:
        reasons.append(f"{summary.absence_days} absence day(s)")
    if condition.no_late_arrival and summary.late_count > 0:
        reasons.append(f"{summary.late_count} late arrival(s)")
    if condition.no_early_leave and summary.early_leave_count > 0:
        reasons.append(f"{summary.early_leave_count} early leave(s)")
    return reasons


def _evaluate_rule(rule: AllowanceRule, summary: AttendanceSummary) -> AllowanceItem:
    reasons: list[str] = []
    if rule.type == AllowanceType.CONDITIONAL and rule.condition is not None:
        reasons = ineligibility_reasons(rule.condition, summary)
    return AllowanceItem(
        code=rule.code,
        name=rule.name,
        type=rule.type,
        amount=rule.amount,
        taxable=rule.taxable,
        eligible=not reasons,
        ineligible_reason="; ".join(reasons) if reasons else None,
    )


@traced_engine("allowance_evaluator", "1.0", fingerprint_fields=("config", "summary"))
def evaluate_allowances(config: AllowanceConfig, summary: AttendanceSummary) -> AllowanceResult:
    items = tuple(_evaluate_rule(rule, summary) for rule in config.rules)

    taxable = ZERO
    non_taxable = ZERO
    for item in items:
        if not item.eligible:
            logger.info(
                "allowance_skipped",
                extra={"code": item.code, "reason": item.ineligible_reason},
            )
            continue
        if item.taxable:
            taxable += item.amount
        else:
            non_taxable += item.amount

    return AllowanceResult(
        items=items,
        total_allowances=taxable + non_taxable,
        taxable_allowances=taxable,
        non_taxable_allowances=non_taxable,
    )
