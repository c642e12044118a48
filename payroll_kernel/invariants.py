"""
Engine Invariants Contract.

These invariants hold for every calculation regardless of company policy.
No configuration value may switch them off.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across the result value objects
(``payroll_kernel.domain.results``) and the engines that build them.
"""

from enum import Enum, unique


@unique
class EngineInvariant(str, Enum):
    """Non-configurable guarantees of the calculation engine.

    Configuration may influence *what* gets paid, but never *whether*
    these rules apply.
    """

    IDEMPOTENT_ROUNDING = "idempotent_rounding"
    """Rounding an already-rounded timestamp with the same policy returns
    it unchanged."""

    BREAK_BOUNDS = "break_bounds"
    """Break policy minimum <= maximum and the default lies between them.
    Enforced by BreakPolicy.__post_init__."""

    NET_MINUTES_BALANCE = "net_minutes_balance"
    """net = gross - unpaid effective break, and night + regular = net.
    Enforced by WorkingHoursResult.__post_init__."""

    OVERTIME_CATEGORY_SUM = "overtime_category_sum"
    """The five overtime categories sum to the totals, for minutes and
    amounts. Enforced by OvertimeResult.__post_init__."""

    PAYROLL_BALANCE = "payroll_balance"
    """gross = base + overtime pay + allowances and net = gross - deductions
    (before the single final rounding). Enforced by PayrollResult."""

    SINGLE_ROUNDING = "single_rounding"
    """Money is rounded to the minor unit exactly once, on the final net
    salary. Intermediate results keep full precision."""

    DETERMINISM = "determinism"
    """Identical inputs produce identical results. Engines read no clock
    and hold no state between calls."""


ALL_ENGINE_INVARIANTS: frozenset[EngineInvariant] = frozenset(EngineInvariant)

# Pure packages may not import from these packages.
# This is enforced by tests/architecture/test_engine_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "payroll_config",
    "payroll_engines",
    "payroll_batch",
)
FORBIDDEN_ENGINE_IMPORTS: tuple[str, ...] = (
    "payroll_batch",
)
