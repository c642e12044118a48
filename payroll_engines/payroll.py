"""
Payroll Aggregator (``payroll_engines.payroll``).

Responsibility
--------------
Computes base salary from the employee's salary basis and combines it with
overtime pay, allowances and deductions into the final ``PayrollResult``.
``calculate_payroll`` runs the whole chain for one employee and one pay
period.

Architecture position
---------------------
**Engines layer** -- the last pure stage.  Its ``PayrollResult`` is handed
to the caller's persistence/approval layer.

Invariants enforced
-------------------
* gross = base + overtime pay + allowances.
* unrounded net = gross - deductions.
* The company rounding policy is applied once, to the final net salary
  (and separately to a display gross).  Every intermediate amount keeps
  full Decimal precision.
* Identical inputs produce identical results: no clock reads, no state.

Failure modes
-------------
* ``MissingSalaryRateError`` -- the salary record lacks the rate its
  salary type needs.
* ``DataIntegrityError`` subclasses propagate from the per-day pipeline.

Audit relevance
---------------
``payroll_calculated`` is logged with every headline figure and the
defaults the policy set was resolved with.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal

from payroll_config.schema import CompanyPolicySet, PayrollConfig
from payroll_engines.allowance import evaluate_allowances
from payroll_engines.attendance_day import evaluate_day
from payroll_engines.attendance_summary import summarize_attendance
from payroll_engines.deduction import evaluate_deductions
from payroll_engines.overtime import summarize_period
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.attendance import AttendanceDay, AttendanceSummary, EmployeeSalaryInfo
from payroll_kernel.domain.enums import RoundingDirection, SalaryType
from payroll_kernel.domain.results import (
    AllowanceResult,
    DeductionResult,
    OvertimeResult,
    PayrollResult,
)
from payroll_kernel.exceptions import MissingSalaryRateError
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.payroll")

MINUTES_PER_HOUR = Decimal("60")

_ROUNDING_MODES = {
    RoundingDirection.UP: ROUND_CEILING,
    RoundingDirection.DOWN: ROUND_FLOOR,
    RoundingDirection.NEAREST: ROUND_HALF_UP,
}

_RATE_FIELDS = {
    SalaryType.MONTHLY: "monthly_salary",
    SalaryType.DAILY: "daily_rate",
    SalaryType.HOURLY: "hourly_rate",
    SalaryType.SHIFT_BASED: "shift_rate",
}


def round_amount(amount: Decimal, direction: RoundingDirection, unit: Decimal) -> Decimal:
    """Round ``amount`` to a multiple of ``unit`` (UP=ceiling, DOWN=floor, NEAREST=half-up)."""
    units = (amount / unit).to_integral_value(rounding=_ROUNDING_MODES[direction])
    return units * unit


def derive_hourly_rate(salary: EmployeeSalaryInfo, config: PayrollConfig) -> Decimal:
    """
    Hourly rate used to price overtime.

    Taken from the first available of: hourly rate; daily rate over the
    standard hours per day; monthly salary over standard days x hours;
    shift rate over the standard hours per day.

    Raises:
        MissingSalaryRateError: no rate at all is available.
    """
    hours_per_day = Decimal(config.standard_working_hours_per_day)
    if salary.hourly_rate is not None:
        return salary.hourly_rate
    if salary.daily_rate is not None:
        return salary.daily_rate / hours_per_day
    if salary.monthly_salary is not None:
        return salary.monthly_salary / (
            Decimal(config.standard_working_days_per_month) * hours_per_day
        )
    if salary.shift_rate is not None:
        return salary.shift_rate / hours_per_day
    raise MissingSalaryRateError(salary.employee_id, salary.salary_type.value, "hourly_rate")


def calculate_base_salary(salary: EmployeeSalaryInfo, summary: AttendanceSummary) -> Decimal:
    """
    Base salary by salary type.

    MONTHLY is the monthly amount, unprorated (absence is a deduction).
    DAILY is daily rate x working days, HOURLY is hourly rate x net hours,
    SHIFT_BASED is shift rate x number of shifts.
    """
    field = _RATE_FIELDS[salary.salary_type]
    rate = getattr(salary, field)
    if rate is None:
        raise MissingSalaryRateError(salary.employee_id, salary.salary_type.value, field)

    if salary.salary_type == SalaryType.MONTHLY:
        return rate
    if salary.salary_type == SalaryType.DAILY:
        return rate * Decimal(summary.working_days)
    if salary.salary_type == SalaryType.HOURLY:
        return rate * Decimal(summary.net_working_minutes) / MINUTES_PER_HOUR
    return rate * Decimal(summary.number_of_shifts)


@traced_engine(
    "payroll_aggregator",
    "1.0",
    fingerprint_fields=("salary", "summary", "overtime", "allowances", "deductions", "config"),
)
def aggregate_payroll(
    salary: EmployeeSalaryInfo,
    summary: AttendanceSummary,
    overtime: OvertimeResult,
    allowances: AllowanceResult,
    deductions: DeductionResult,
    config: PayrollConfig,
    defaults_used: tuple[str, ...] = (),
) -> PayrollResult:
    hourly_rate = derive_hourly_rate(salary, config)
    base = calculate_base_salary(salary, summary)
    overtime_pay = overtime.premium_pay
    gross = base + overtime_pay + allowances.total_allowances
    unrounded_net = gross - deductions.total_deductions

    result = PayrollResult(
        employee_id=salary.employee_id,
        salary_type=salary.salary_type,
        hourly_rate=hourly_rate,
        base_salary=base,
        total_overtime_pay=overtime_pay,
        total_allowances=allowances.total_allowances,
        total_deductions=deductions.total_deductions,
        gross_salary=gross,
        unrounded_net_salary=unrounded_net,
        net_salary=round_amount(unrounded_net, config.salary_rounding, config.rounding_unit),
        rounded_gross_salary=round_amount(gross, config.salary_rounding, config.rounding_unit),
        overtime=overtime,
        allowances=allowances,
        deductions=deductions,
        defaults_used=defaults_used,
    )

    logger.info(
        "payroll_calculated",
        extra={
            "employee_id": salary.employee_id,
            "salary_type": salary.salary_type.value,
            "base_salary": str(base),
            "total_overtime_pay": str(overtime_pay),
            "total_allowances": str(allowances.total_allowances),
            "total_deductions": str(deductions.total_deductions),
            "gross_salary": str(gross),
            "net_salary": str(result.net_salary),
            "defaults_used": list(defaults_used),
            "requires_approval": overtime.requires_approval,
        },
    )
    return result


def calculate_payroll(
    salary: EmployeeSalaryInfo,
    days: Sequence[AttendanceDay],
    policies: CompanyPolicySet,
    *,
    absence_days: int = 0,
) -> PayrollResult:
    """
    Full chain for one employee and one pay period.

    Days are evaluated in date order.  A single bad day raises its
    ``DataIntegrityError``; the caller decides whether to drop the day or
    the employee.
    """
    with LogContext.bind(company_id=policies.company_id, employee_id=salary.employee_id):
        hourly_rate = derive_hourly_rate(salary, policies.payroll)
        evaluated = [
            evaluate_day(day, policies, hourly_rate)
            for day in sorted(days, key=lambda d: (d.work_date, d.raw_check_in))
        ]
        overtime = summarize_period([e.overtime for e in evaluated], policies.overtime)
        summary = summarize_attendance(
            evaluated, policies.attendance, absence_days=absence_days
        )
        allowances = evaluate_allowances(policies.allowances, summary)
        base = calculate_base_salary(salary, summary)
        deductions = evaluate_deductions(
            policies.deductions,
            summary,
            base,
            monthly_salary=salary.monthly_salary,
            standard_working_days_per_month=policies.payroll.standard_working_days_per_month,
        )
        return aggregate_payroll(
            salary,
            summary,
            overtime,
            allowances,
            deductions,
            policies.payroll,
            policies.defaults_used,
        )
