"""
Overtime Classifier (``payroll_engines.overtime``).

Responsibility
--------------
Classifies one day's net working minutes into the five overtime
categories (regular, night, holiday, holiday-night, weekend), prices each
category at its multiplier, and sums daily results over a pay period.

Classification per day
----------------------
* Holiday: every net minute carries the holiday premium, split by night
  overlap into holiday (non-night) and holiday-night minutes.
* Weekend: every net minute is weekend overtime.
* Weekday: minutes up to ``standard_working_minutes_per_day`` are normal
  time; the night part of that normal time earns the night-work premium
  (``night_work_minutes``), which is not overtime.  Minutes beyond the
  standard are overtime, split into night and regular by how much of the
  shift's trailing overtime span lies inside the night window.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Consumes ``WorkingHoursResult``;
its ``OvertimeResult`` feeds the payroll aggregator.

Invariants enforced
-------------------
* Sum of category minutes == total overtime minutes; sum of category
  amounts == total overtime amount (checked by ``OvertimeResult``).
* Amount = minutes x hourly rate x multiplier / 60, kept at full Decimal
  precision.  Nothing is rounded here.
* Caps never reduce paid minutes.  Minutes beyond a cap are reported in
  ``over_cap_minutes`` with a ``CapExceededWarning``.
* A disabled policy yields an empty result.

Failure modes
-------------
* None for valid inputs.  Bad multipliers are rejected when the policy is
  written (``payroll_config.validator``), not here.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from decimal import Decimal

from payroll_config.legal import legal_minimum_multipliers
from payroll_config.schema import OvertimeMultipliers, OvertimePolicy
from payroll_engines.intervals import night_overlap_minutes
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.enums import CapScope, OvertimeCategory
from payroll_kernel.domain.results import (
    ZERO,
    CapExceededWarning,
    OvertimeResult,
    WorkingHoursResult,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.overtime")

MINUTES_PER_HOUR = Decimal("60")


def effective_multipliers(policy: OvertimePolicy) -> OvertimeMultipliers:
    """The legal table when ``use_legal_minimum`` is set, else the configured values."""
    if policy.use_legal_minimum:
        return legal_minimum_multipliers(policy.locale)
    return policy.multipliers


def validate_multipliers(policy: OvertimePolicy) -> bool:
    """False if any configured multiplier is below the locale's legal minimum."""
    legal = legal_minimum_multipliers(policy.locale).as_dict()
    return all(
        value >= legal[name] for name, value in policy.multipliers.as_dict().items()
    )


def category_multiplier(
    multipliers: OvertimeMultipliers, category: OvertimeCategory
) -> Decimal:
    return {
        OvertimeCategory.REGULAR: multipliers.regular,
        OvertimeCategory.NIGHT: multipliers.night_overtime,
        OvertimeCategory.HOLIDAY: multipliers.holiday_overtime,
        OvertimeCategory.HOLIDAY_NIGHT: multipliers.holiday_night_overtime,
        OvertimeCategory.WEEKEND: multipliers.weekend_overtime,
    }[category]


def price_minutes(minutes: int, hourly_rate: Decimal, multiplier: Decimal) -> Decimal:
    if minutes <= 0:
        return ZERO
    return Decimal(minutes) * hourly_rate * multiplier / MINUTES_PER_HOUR


def _split_weekday(
    working_hours: WorkingHoursResult,
    shift_end: datetime,
    policy: OvertimePolicy,
) -> tuple[dict[OvertimeCategory, int], int]:
    """Return weekday overtime minutes by category and the in-hours night minutes."""
    net = working_hours.net_working_minutes
    night = working_hours.night_minutes
    overtime = max(0, net - policy.standard_working_minutes_per_day)

    night_overtime = 0
    if overtime and night:
        span_start = shift_end - timedelta(minutes=overtime)
        night_overtime = min(
            overtime,
            night,
            night_overlap_minutes(span_start, shift_end, policy.night_start, policy.night_end),
        )

    minutes = {
        OvertimeCategory.REGULAR: overtime - night_overtime,
        OvertimeCategory.NIGHT: night_overtime,
    }
    return minutes, night - night_overtime


def _cap_warning(
    scope: CapScope, cap: int, actual: int, work_date: date | None
) -> CapExceededWarning | None:
    if actual <= cap:
        return None
    return CapExceededWarning(
        scope=scope, cap_minutes=cap, actual_minutes=actual, work_date=work_date
    )


@traced_engine(
    "overtime_classifier",
    "1.0",
    fingerprint_fields=(
        "working_hours",
        "shift_end",
        "is_holiday",
        "is_weekend",
        "policy",
        "hourly_rate",
    ),
)
def classify_day(
    working_hours: WorkingHoursResult,
    shift_end: datetime,
    *,
    is_holiday: bool,
    is_weekend: bool,
    policy: OvertimePolicy,
    hourly_rate: Decimal,
    work_date: date | None = None,
) -> OvertimeResult:
    """
    Classify and price one day's minutes.

    ``shift_end`` is the resolved end of the shift (the next day for an
    overnight shift); the weekday night/regular overtime split is measured
    backwards from it.
    """
    if not policy.enabled:
        return OvertimeResult()

    multipliers = effective_multipliers(policy)
    night_work = 0

    if is_holiday:
        minutes = {
            OvertimeCategory.HOLIDAY: working_hours.regular_minutes,
            OvertimeCategory.HOLIDAY_NIGHT: working_hours.night_minutes,
        }
    elif is_weekend:
        minutes = {OvertimeCategory.WEEKEND: working_hours.net_working_minutes}
    else:
        minutes, night_work = _split_weekday(working_hours, shift_end, policy)

    amounts = {
        category: price_minutes(m, hourly_rate, category_multiplier(multipliers, category))
        for category, m in minutes.items()
    }
    night_work_amount = price_minutes(night_work, hourly_rate, multipliers.night_work)

    total = sum(minutes.values())
    warnings: tuple[CapExceededWarning, ...] = ()
    over_cap = 0
    warning = _cap_warning(CapScope.DAILY, policy.max_overtime_minutes_per_day, total, work_date)
    if warning is not None:
        warnings = (warning,)
        over_cap = warning.excess_minutes
        logger.warning(
            "overtime_daily_cap_exceeded",
            extra={
                "work_date": work_date.isoformat() if work_date else None,
                "cap_minutes": warning.cap_minutes,
                "actual_minutes": total,
            },
        )

    result = OvertimeResult.from_categories(
        minutes,
        amounts,
        night_work_minutes=night_work,
        night_work_amount=night_work_amount,
        over_cap_minutes=over_cap,
        cap_warnings=warnings,
    )

    logger.debug(
        "overtime_classified",
        extra={
            "work_date": work_date.isoformat() if work_date else None,
            "holiday": is_holiday,
            "weekend": is_weekend,
            "total_overtime_minutes": result.total_overtime_minutes,
            "total_overtime_amount": str(result.total_overtime_amount),
            "night_work_minutes": night_work,
        },
    )
    return result


@traced_engine("overtime_period", "1.0", fingerprint_fields=("policy",))
def summarize_period(
    daily_results: Iterable[OvertimeResult],
    policy: OvertimePolicy,
) -> OvertimeResult:
    """
    Sum daily results over a pay period and apply the monthly cap check.

    The period's ``over_cap_minutes`` is the larger of the summed daily
    excess and the excess over the monthly cap, so a minute is never
    reported twice.
    """
    minutes = {c: 0 for c in OvertimeCategory}
    amounts = {c: ZERO for c in OvertimeCategory}
    night_work = 0
    night_work_amount = ZERO
    daily_over_cap = 0
    warnings: list[CapExceededWarning] = []

    for day in daily_results:
        for category, m in day.minutes_by_category().items():
            minutes[category] += m
        for category, a in day.amounts_by_category().items():
            amounts[category] += a
        night_work += day.night_work_minutes
        night_work_amount += day.night_work_amount
        daily_over_cap += day.over_cap_minutes
        warnings.extend(day.cap_warnings)

    total = sum(minutes.values())
    over_cap = daily_over_cap
    if policy.enabled:
        monthly = _cap_warning(
            CapScope.MONTHLY, policy.max_overtime_minutes_per_month, total, None
        )
        if monthly is not None:
            warnings.append(monthly)
            over_cap = max(over_cap, monthly.excess_minutes)
            logger.warning(
                "overtime_monthly_cap_exceeded",
                extra={"cap_minutes": monthly.cap_minutes, "actual_minutes": total},
            )

    return OvertimeResult.from_categories(
        minutes,
        amounts,
        night_work_minutes=night_work,
        night_work_amount=night_work_amount,
        over_cap_minutes=over_cap,
        cap_warnings=tuple(warnings),
    )
