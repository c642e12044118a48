"""
Typed Exception Hierarchy for the Payroll Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll figures are audited and previewed before they are finalized. A
caller that has to parse message strings to tell a broken break record from
a rejected multiplier cannot react precisely. Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (field name, offending values, work date)

Example:
    try:
        evaluated = evaluate_day(day, policies, hourly_rate)
    except DataIntegrityError as e:
        report_field_error(e.field, e.work_date, e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollEngineError (base)
    |
    +-- ConfigurationError
    |   +-- UnknownPolicyValueError
    |
    +-- ValidationError
    |   +-- PolicyInvariantError
    |   +-- MultiplierBelowLegalMinimumError
    |
    +-- DataIntegrityError
    |   +-- NegativeBreakDurationError
    |   +-- CheckOutBeforeCheckInError
    |   +-- TooManyBreaksError
    |   +-- MissingSalaryRateError
    |
    +-- BatchCancelledError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                           | When Raised
----------------|--------------------------------|---------------------------------------
Configuration   | CONFIGURATION_ERROR            | Policy input cannot be parsed
                | UNKNOWN_POLICY_VALUE           | Enum value not recognised
----------------|--------------------------------|---------------------------------------
Validation      | VALIDATION_ERROR               | Policy rejected at write time
                | POLICY_INVARIANT_VIOLATED      | e.g. minimum break > maximum break
                | MULTIPLIER_BELOW_LEGAL_MINIMUM | Custom rate below the locale's floor
----------------|--------------------------------|---------------------------------------
Data integrity  | DATA_INTEGRITY_ERROR           | One day's attendance is unusable
                | NEGATIVE_BREAK_DURATION        | Break end before break start
                | CHECK_OUT_BEFORE_CHECK_IN      | Overnight flag cannot be inferred
                | TOO_MANY_BREAKS                | More breaks than max_breaks_per_day
                | MISSING_SALARY_RATE            | Salary type has no matching rate
----------------|--------------------------------|---------------------------------------
Batch           | BATCH_CANCELLED                | Preview run stopped before completion

Overtime beyond the daily/monthly caps is NOT an exception: it is reported
as a ``CapExceededWarning`` value attached to the overtime result.
"""

from __future__ import annotations

from datetime import date, datetime


class PayrollEngineError(Exception):
    """
    Base exception for all payroll engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_ENGINE_ERROR"


# Configuration-related exceptions


class ConfigurationError(PayrollEngineError):
    """Policy input is malformed and cannot be turned into a policy set."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, section: str, message: str):
        self.section = section
        super().__init__(f"Invalid {section} configuration: {message}")


class UnknownPolicyValueError(ConfigurationError):
    """An enum-valued policy field holds a value the engine does not know."""

    code: str = "UNKNOWN_POLICY_VALUE"

    def __init__(self, section: str, field: str, value: object, allowed: list[str]):
        self.field = field
        self.value = value
        self.allowed = allowed
        super().__init__(
            section,
            f"{field}={value!r} is not one of {', '.join(allowed)}",
        )


# Validation-related exceptions


class ValidationError(PayrollEngineError):
    """Base exception for policies rejected at configuration-write time."""

    code: str = "VALIDATION_ERROR"


class PolicyInvariantError(ValidationError):
    """A policy value object violates one of its structural invariants."""

    code: str = "POLICY_INVARIANT_VIOLATED"

    def __init__(self, policy: str, field: str, message: str):
        self.policy = policy
        self.field = field
        super().__init__(f"{policy}.{field}: {message}")


class MultiplierBelowLegalMinimumError(ValidationError):
    """
    A configured overtime multiplier is below the legal minimum.

    Raised when the policy is written, never during a calculation.
    """

    code: str = "MULTIPLIER_BELOW_LEGAL_MINIMUM"

    def __init__(self, locale: str, violations: dict[str, tuple[str, str]]):
        self.locale = locale
        self.violations = violations
        detail = ", ".join(
            f"{name}={configured} < {minimum}"
            for name, (configured, minimum) in sorted(violations.items())
        )
        super().__init__(
            f"Overtime multipliers below legal minimum for locale '{locale}': {detail}"
        )


# Data integrity exceptions


class DataIntegrityError(PayrollEngineError):
    """
    Attendance data for a single day cannot be calculated.

    The engine fails that day's calculation and surfaces the field at fault
    instead of guessing or clamping.
    """

    code: str = "DATA_INTEGRITY_ERROR"

    def __init__(self, field: str, message: str, work_date: date | None = None):
        self.field = field
        self.work_date = work_date
        prefix = f"[{work_date.isoformat()}] " if work_date else ""
        super().__init__(f"{prefix}{field}: {message}")


class NegativeBreakDurationError(DataIntegrityError):
    """A break record ends before it starts."""

    code: str = "NEGATIVE_BREAK_DURATION"

    def __init__(
        self,
        field: str,
        break_start: datetime,
        break_end: datetime,
        work_date: date | None = None,
    ):
        self.break_start = break_start
        self.break_end = break_end
        super().__init__(
            field,
            f"break end {break_end.isoformat()} is before break start "
            f"{break_start.isoformat()}",
            work_date,
        )


class CheckOutBeforeCheckInError(DataIntegrityError):
    """Check-out precedes check-in and the shift cannot be read as overnight."""

    code: str = "CHECK_OUT_BEFORE_CHECK_IN"

    def __init__(self, check_in: datetime, check_out: datetime, work_date: date | None = None):
        self.check_in = check_in
        self.check_out = check_out
        super().__init__(
            "check_out",
            f"check-out {check_out.isoformat()} is before check-in "
            f"{check_in.isoformat()} and its wall-clock time is not earlier",
            work_date,
        )


class TooManyBreaksError(DataIntegrityError):
    """More break records were supplied than the policy allows per day."""

    code: str = "TOO_MANY_BREAKS"

    def __init__(self, break_count: int, max_breaks_per_day: int, work_date: date | None = None):
        self.break_count = break_count
        self.max_breaks_per_day = max_breaks_per_day
        super().__init__(
            "break_records",
            f"{break_count} breaks recorded, maximum per day is {max_breaks_per_day}",
            work_date,
        )


class MissingSalaryRateError(DataIntegrityError):
    """The employee's salary type has no matching rate on the salary record."""

    code: str = "MISSING_SALARY_RATE"

    def __init__(self, employee_id: str, salary_type: str, rate_field: str):
        self.employee_id = employee_id
        self.salary_type = salary_type
        self.rate_field = rate_field
        super().__init__(
            rate_field,
            f"employee {employee_id} is paid {salary_type} but has no {rate_field}",
        )


# Batch exceptions


class BatchCancelledError(PayrollEngineError):
    """A payroll preview run was cancelled before every job was submitted."""

    code: str = "BATCH_CANCELLED"

    def __init__(self, company_id: str, submitted: int, total: int):
        self.company_id = company_id
        self.submitted = submitted
        self.total = total
        super().__init__(
            f"Payroll preview for company {company_id} cancelled after "
            f"{submitted} of {total} jobs"
        )

