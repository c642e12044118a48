"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for the
    batch orchestrator and for callers computing a single payroll.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import payroll_kernel and payroll_config (and sibling engine
    modules).  MUST NOT import payroll_batch.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Every timestamp is passed in as an explicit parameter.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - DataIntegrityError subclasses for unusable attendance data.
    - MissingSalaryRateError for salary records lacking their rate.

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.

Usage:
    from payroll_engines import calculate_payroll
    from payroll_engines.rounding import round_time
    from payroll_engines.overtime import classify_day
"""

from payroll_engines.allowance import evaluate_allowances
from payroll_engines.attendance_day import evaluate_day
from payroll_engines.attendance_summary import summarize_attendance
from payroll_engines.breaks import evaluate_breaks, number_breaks, shift_overlaps_night
from payroll_engines.deduction import evaluate_deductions
from payroll_engines.overtime import (
    classify_day,
    effective_multipliers,
    summarize_period,
    validate_multipliers,
)
from payroll_engines.payroll import (
    aggregate_payroll,
    calculate_base_salary,
    calculate_payroll,
    derive_hourly_rate,
    round_amount,
)
from payroll_engines.rounding import round_attendance_day, round_checkpoint, round_time
from payroll_engines.working_hours import (
    calculate_working_hours,
    night_overlap_minutes,
    resolve_shift_end,
)

__all__ = [
    # Time rounding
    "round_attendance_day",
    "round_checkpoint",
    "round_time",
    # Breaks
    "evaluate_breaks",
    "number_breaks",
    "shift_overlaps_night",
    # Working hours
    "calculate_working_hours",
    "night_overlap_minutes",
    "resolve_shift_end",
    # Overtime
    "classify_day",
    "effective_multipliers",
    "summarize_period",
    "validate_multipliers",
    # Allowances / deductions
    "evaluate_allowances",
    "evaluate_deductions",
    # Payroll
    "aggregate_payroll",
    "calculate_base_salary",
    "calculate_payroll",
    "derive_hourly_rate",
    "round_amount",
    # Pipeline
    "evaluate_day",
    "summarize_attendance",
]
