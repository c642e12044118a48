"""
payroll_config -- company policy for the payroll engines.

Responsibility:
    Turns raw company settings (YAML documents or mappings from a settings
    store) into a fully-populated, immutable ``CompanyPolicySet``.  The
    ``PolicyProvider`` is the single place defaults are applied; everything
    downstream receives complete policy and never null-checks.

Architecture position:
    Configuration -- above ``payroll_kernel``, below ``payroll_engines``.
    The kernel MUST NEVER import from ``payroll_config``.

Failure modes:
    - ``ConfigurationError`` -- malformed or unknown values.
    - ``PolicyInvariantError`` -- values that violate a schema invariant.
    - ``MultiplierBelowLegalMinimumError`` -- raised by ``ensure_writable``.

Audit relevance:
    ``policy_set_resolved`` is logged with the set's SHA-256 checksum and
    the number of defaults applied.
"""

from payroll_config.cache import PolicyCache
from payroll_config.legal import legal_minimum_break_minutes, legal_minimum_multipliers
from payroll_config.loader import compute_checksum, load_yaml_file
from payroll_config.provider import PolicyProvider
from payroll_config.schema import (
    AllowanceCondition,
    AllowanceConfig,
    AllowanceRule,
    AttendancePolicy,
    BreakPeriod,
    BreakPolicy,
    CheckpointRounding,
    CompanyPolicySet,
    DeductionConfig,
    DeductionRule,
    OvertimeMultipliers,
    OvertimePolicy,
    PayrollConfig,
    RoundingPolicy,
)
from payroll_config.validator import (
    PolicyValidationResult,
    ensure_writable,
    validate_policy_set,
)

__all__ = [
    "AllowanceCondition",
    "AllowanceConfig",
    "AllowanceRule",
    "AttendancePolicy",
    "BreakPeriod",
    "BreakPolicy",
    "CheckpointRounding",
    "CompanyPolicySet",
    "DeductionConfig",
    "DeductionRule",
    "OvertimeMultipliers",
    "OvertimePolicy",
    "PayrollConfig",
    "PolicyCache",
    "PolicyProvider",
    "PolicyValidationResult",
    "RoundingPolicy",
    "compute_checksum",
    "ensure_writable",
    "legal_minimum_break_minutes",
    "legal_minimum_multipliers",
    "load_yaml_file",
    "validate_policy_set",
]
