"""
Pure domain layer.

This module contains immutable value objects with NO dependencies on:
- Persistence
- Clock
- I/O

Every object is created fresh per calculation and never mutated.
"""

from payroll_kernel.domain.attendance import (
    AttendanceDay,
    AttendanceSummary,
    BreakRecord,
    EmployeeSalaryInfo,
    NumberedBreak,
)
from payroll_kernel.domain.enums import (
    AllowanceType,
    BreakType,
    CapScope,
    DeductionType,
    OvertimeCategory,
    RoundingDirection,
    RoundingInterval,
    SalaryType,
)
from payroll_kernel.domain.results import (
    AllowanceItem,
    AllowanceResult,
    BreakEvaluation,
    CapExceededWarning,
    DeductionItem,
    DeductionResult,
    EvaluatedDay,
    OvertimeResult,
    PayrollResult,
    WorkingHoursResult,
)

__all__ = [
    # Attendance inputs
    "AttendanceDay",
    "AttendanceSummary",
    "BreakRecord",
    "EmployeeSalaryInfo",
    "NumberedBreak",
    # Enums
    "AllowanceType",
    "BreakType",
    "CapScope",
    "DeductionType",
    "OvertimeCategory",
    "RoundingDirection",
    "RoundingInterval",
    "SalaryType",
    # Results
    "AllowanceItem",
    "AllowanceResult",
    "BreakEvaluation",
    "CapExceededWarning",
    "DeductionItem",
    "DeductionResult",
    "EvaluatedDay",
    "OvertimeResult",
    "PayrollResult",
    "WorkingHoursResult",
]
