"""
Policy and classification enums shared by config, engines and results.

Kernel > Domain -- pure values, zero I/O.
"""

from __future__ import annotations

from enum import Enum


class RoundingInterval(int, Enum):
    """Boundary spacing for timestamp rounding, in minutes."""

    MINUTES_5 = 5
    MINUTES_10 = 10
    MINUTES_15 = 15
    MINUTES_30 = 30
    MINUTES_60 = 60

    @property
    def minutes(self) -> int:
        return int(self.value)


class RoundingDirection(str, Enum):
    """Direction applied when a value falls between two boundaries."""

    UP = "UP"
    DOWN = "DOWN"
    NEAREST = "NEAREST"  # exact half rounds up


class BreakType(str, Enum):
    """Whether break time is paid (kept in net minutes) or unpaid."""

    PAID = "PAID"
    UNPAID = "UNPAID"


class AllowanceType(str, Enum):
    """How an allowance rule decides whether it is paid."""

    FIXED = "FIXED"  # Always paid
    CONDITIONAL = "CONDITIONAL"  # Paid when the attendance condition holds
    ONE_TIME = "ONE_TIME"  # Paid once; consumption tracked by the caller


class DeductionType(str, Enum):
    """How a deduction rule computes its amount."""

    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"  # Percentage of base salary


class SalaryType(str, Enum):
    """Basis on which an employee's base salary is computed."""

    MONTHLY = "MONTHLY"
    DAILY = "DAILY"
    HOURLY = "HOURLY"
    SHIFT_BASED = "SHIFT_BASED"


class OvertimeCategory(str, Enum):
    """The five mutually exclusive overtime categories."""

    REGULAR = "regular"
    NIGHT = "night"
    HOLIDAY = "holiday"
    HOLIDAY_NIGHT = "holiday_night"
    WEEKEND = "weekend"


class CapScope(str, Enum):
    """Which overtime cap a warning refers to."""

    DAILY = "daily"
    MONTHLY = "monthly"
