"""
Configuration Provider (``payroll_config.provider``).

Responsibility
--------------
The single validation/defaulting step between raw company policy and the
calculation engines.  ``PolicyProvider.resolve`` turns a raw mapping (as
loaded from YAML or supplied by a settings store) into a fully-populated,
immutable ``CompanyPolicySet``.  Every value the company did not configure
is replaced by the documented default from ``payroll_config.schema`` and
named in ``CompanyPolicySet.defaults_used``.

Architecture position
---------------------
**Config layer**.  Called by the orchestrator (directly or through
``PolicyCache``) before any engine runs.  Engines never see a ``None``
policy value.

Invariants enforced
-------------------
* Missing optional policy never raises: it is defaulted, logged at WARNING
  and recorded in ``defaults_used``.
* Malformed values are never defaulted: they raise ``ConfigurationError``.
* Schema invariants (e.g. break minimum <= maximum) raise
  ``PolicyInvariantError`` from the schema constructors.

Audit relevance
---------------
``policy_set_resolved`` is logged with the set's checksum and the list of
defaults used, so a payroll computed with defaults can be identified.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from payroll_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_bool,
    parse_decimal,
    parse_enum,
    parse_int,
    parse_time,
    section,
)
from payroll_config.schema import (
    CHECKPOINTS,
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
from payroll_kernel.domain.enums import (
    AllowanceType,
    BreakType,
    DeductionType,
    RoundingDirection,
    RoundingInterval,
    SalaryType,
)
from payroll_kernel.exceptions import ConfigurationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.provider")

Parser = Callable[[str, str, Any], Any]


def _str(section_name: str, field_name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(section_name, f"{field_name}={value!r} must be a non-empty string")
    return value.strip()


def _enum(enum_cls: type) -> Parser:
    return lambda s, f, v: parse_enum(s, f, v, enum_cls)


def _interval(section_name: str, field_name: str, value: Any) -> RoundingInterval:
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    return parse_enum(section_name, field_name, value, RoundingInterval)


class _SectionReader:
    """Reads fields of one raw section, recording every defaulted field."""

    def __init__(self, name: str, data: Mapping[str, Any], defaults: Any, used: list[str]):
        self.name = name
        self.data = data
        self.defaults = defaults
        self.used = used

    def get(self, field_name: str, parser: Parser) -> Any:
        value = self.data.get(field_name)
        if value is None:
            self.used.append(f"{self.name}.{field_name}")
            return getattr(self.defaults, field_name)
        return parser(self.name, field_name, value)


class PolicyProvider:
    """
    Resolves raw company policy into a ``CompanyPolicySet``.

    Stateless; safe to share between threads.  Use ``PolicyCache`` to avoid
    resolving the same company twice.
    """

    def resolve(self, company_id: str, raw: Mapping[str, Any] | None) -> CompanyPolicySet:
        """
        Validate and default one company's raw policy mapping.

        Raises:
            ConfigurationError: a configured value is malformed.
            PolicyInvariantError: configured values violate a schema invariant.
        """
        raw = dict(raw or {})
        used: list[str] = []

        attendance = self._resolve_attendance(raw, used)
        breaks = self._resolve_breaks(raw, used)
        overtime = self._resolve_overtime(raw, used)
        allowances = self._resolve_allowances(raw, used)
        deductions = self._resolve_deductions(raw, used)
        payroll = self._resolve_payroll(raw, used)

        policy_set = CompanyPolicySet(
            company_id=company_id,
            attendance=attendance,
            breaks=breaks,
            overtime=overtime,
            allowances=allowances,
            deductions=deductions,
            payroll=payroll,
            defaults_used=tuple(used),
        )

        sections_defaulted = [d for d in used if "." not in d]
        fields_defaulted = [d for d in used if "." in d]
        if used:
            logger.warning(
                "policy_defaults_applied",
                extra={
                    "company_id": company_id,
                    "sections_defaulted": sections_defaulted,
                    "fields_defaulted": fields_defaulted,
                },
            )
        logger.info(
            "policy_set_resolved",
            extra={
                "company_id": company_id,
                "checksum": compute_checksum(policy_set),
                "defaults_used_count": len(used),
            },
        )
        return policy_set

    def resolve_file(self, company_id: str, path: Path) -> CompanyPolicySet:
        """Load a YAML policy document and resolve it."""
        return self.resolve(company_id, load_yaml_file(path))

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _resolve_attendance(self, raw: dict[str, Any], used: list[str]) -> AttendancePolicy:
        data = section(raw, "attendance")
        if data is None:
            used.append("attendance")
            return AttendancePolicy()
        r = _SectionReader("attendance", data, AttendancePolicy(), used)
        checkpoints = {
            name: self._resolve_checkpoint(data, name, used) for name in CHECKPOINTS
        }
        return AttendancePolicy(
            enable_rounding=r.get("enable_rounding", parse_bool),
            default_work_start=r.get("default_work_start", parse_time),
            default_work_end=r.get("default_work_end", parse_time),
            late_grace_minutes=r.get("late_grace_minutes", parse_int),
            early_leave_grace_minutes=r.get("early_leave_grace_minutes", parse_int),
            **checkpoints,
        )

    def _resolve_checkpoint(
        self, data: dict[str, Any], name: str, used: list[str]
    ) -> CheckpointRounding:
        cp = data.get(name)
        if cp is None:
            used.append(f"attendance.{name}")
            return CheckpointRounding()
        if not isinstance(cp, dict):
            raise ConfigurationError("attendance", f"{name} must be a mapping")
        label = f"attendance.{name}"
        default_policy = RoundingPolicy()
        r = _SectionReader(label, cp, default_policy, used)
        enabled = cp.get("enabled")
        if enabled is None:
            used.append(f"{label}.enabled")
            enabled = False
        else:
            enabled = parse_bool(label, "enabled", enabled)
        return CheckpointRounding(
            enabled=enabled,
            policy=RoundingPolicy(
                interval=r.get("interval", _interval),
                direction=r.get("direction", _enum(RoundingDirection)),
            ),
        )

    def _resolve_breaks(self, raw: dict[str, Any], used: list[str]) -> BreakPolicy:
        data = section(raw, "breaks")
        if data is None:
            used.append("breaks")
            return BreakPolicy()
        r = _SectionReader("breaks", data, BreakPolicy(), used)
        periods_raw = data.get("periods") or []
        if not isinstance(periods_raw, list):
            raise ConfigurationError("breaks", "periods must be a list")
        periods = tuple(
            self._parse_break_period(p, index) for index, p in enumerate(periods_raw)
        )
        return BreakPolicy(
            break_type=r.get("break_type", _enum(BreakType)),
            minimum_minutes=r.get("minimum_minutes", parse_int),
            maximum_minutes=r.get("maximum_minutes", parse_int),
            default_minutes=r.get("default_minutes", parse_int),
            tracking_enabled=r.get("tracking_enabled", parse_bool),
            fixed_mode=r.get("fixed_mode", parse_bool),
            max_breaks_per_day=r.get("max_breaks_per_day", parse_int),
            periods_per_attendance=r.get("periods_per_attendance", parse_int),
            periods=periods,
            night_start=r.get("night_start", parse_time),
            night_end=r.get("night_end", parse_time),
            night_minimum_minutes=r.get("night_minimum_minutes", parse_int),
            night_default_minutes=r.get("night_default_minutes", parse_int),
            use_legal_minimum=r.get("use_legal_minimum", parse_bool),
            locale=r.get("locale", _str),
        )

    def _parse_break_period(self, data: Any, index: int) -> BreakPeriod:
        label = f"breaks.periods[{index}]"
        if not isinstance(data, dict):
            raise ConfigurationError(label, "break period must be a mapping")
        for required in ("name", "start", "end"):
            if data.get(required) is None:
                raise ConfigurationError(label, f"{required} is required")
        start = parse_time(label, "start", data["start"])
        end = parse_time(label, "end", data["end"])
        duration = data.get("duration_minutes")
        if duration is None:
            start_min = start.hour * 60 + start.minute
            end_min = end.hour * 60 + end.minute
            duration = (end_min - start_min) % (24 * 60)
        else:
            duration = parse_int(label, "duration_minutes", duration)
        return BreakPeriod(
            name=_str(label, "name", data["name"]),
            start=start,
            end=end,
            duration_minutes=duration,
            flexible=parse_bool(label, "flexible", data.get("flexible", False)),
            order=parse_int(label, "order", data.get("order", index + 1)),
        )

    def _resolve_overtime(self, raw: dict[str, Any], used: list[str]) -> OvertimePolicy:
        data = section(raw, "overtime")
        if data is None:
            used.append("overtime")
            return OvertimePolicy()
        r = _SectionReader("overtime", data, OvertimePolicy(), used)
        multipliers_raw = data.get("multipliers")
        if multipliers_raw is None:
            used.append("overtime.multipliers")
            multipliers = OvertimeMultipliers()
        elif not isinstance(multipliers_raw, dict):
            raise ConfigurationError("overtime", "multipliers must be a mapping")
        else:
            m = _SectionReader(
                "overtime.multipliers", multipliers_raw, OvertimeMultipliers(), used
            )
            multipliers = OvertimeMultipliers(
                regular=m.get("regular", parse_decimal),
                night_work=m.get("night_work", parse_decimal),
                night_overtime=m.get("night_overtime", parse_decimal),
                holiday_overtime=m.get("holiday_overtime", parse_decimal),
                holiday_night_overtime=m.get("holiday_night_overtime", parse_decimal),
                weekend_overtime=m.get("weekend_overtime", parse_decimal),
            )
        return OvertimePolicy(
            enabled=r.get("enabled", parse_bool),
            standard_working_minutes_per_day=r.get("standard_working_minutes_per_day", parse_int),
            night_start=r.get("night_start", parse_time),
            night_end=r.get("night_end", parse_time),
            multipliers=multipliers,
            max_overtime_minutes_per_day=r.get("max_overtime_minutes_per_day", parse_int),
            max_overtime_minutes_per_month=r.get("max_overtime_minutes_per_month", parse_int),
            use_legal_minimum=r.get("use_legal_minimum", parse_bool),
            locale=r.get("locale", _str),
        )

    def _resolve_allowances(self, raw: dict[str, Any], used: list[str]) -> AllowanceConfig:
        data = section(raw, "allowances")
        if data is None:
            used.append("allowances")
            return AllowanceConfig()
        rules_raw = data.get("rules") or []
        if not isinstance(rules_raw, list):
            raise ConfigurationError("allowances", "rules must be a list")
        return AllowanceConfig(
            rules=tuple(self._parse_allowance_rule(rule, i) for i, rule in enumerate(rules_raw))
        )

    def _parse_allowance_rule(self, data: Any, index: int) -> AllowanceRule:
        label = f"allowances.rules[{index}]"
        if not isinstance(data, dict):
            raise ConfigurationError(label, "rule must be a mapping")
        for required in ("code", "name", "type", "amount"):
            if data.get(required) is None:
                raise ConfigurationError(label, f"{required} is required")
        condition = None
        condition_raw = data.get("condition")
        if condition_raw is not None:
            if not isinstance(condition_raw, dict):
                raise ConfigurationError(label, "condition must be a mapping")
            c_label = f"{label}.condition"
            condition = AllowanceCondition(
                min_working_days=parse_int(c_label, "min_working_days", condition_raw.get("min_working_days", 0)),
                min_working_hours=parse_int(c_label, "min_working_hours", condition_raw.get("min_working_hours", 0)),
                no_absence=parse_bool(c_label, "no_absence", condition_raw.get("no_absence", False)),
                no_late_arrival=parse_bool(c_label, "no_late_arrival", condition_raw.get("no_late_arrival", False)),
                no_early_leave=parse_bool(c_label, "no_early_leave", condition_raw.get("no_early_leave", False)),
            )
        return AllowanceRule(
            code=_str(label, "code", data["code"]),
            name=_str(label, "name", data["name"]),
            type=parse_enum(label, "type", data["type"], AllowanceType),
            amount=parse_decimal(label, "amount", data["amount"]),
            taxable=parse_bool(label, "taxable", data.get("taxable", True)),
            condition=condition,
        )

    def _resolve_deductions(self, raw: dict[str, Any], used: list[str]) -> DeductionConfig:
        data = section(raw, "deductions")
        if data is None:
            used.append("deductions")
            return DeductionConfig()
        r = _SectionReader("deductions", data, DeductionConfig(), used)
        rules_raw = data.get("rules") or []
        if not isinstance(rules_raw, list):
            raise ConfigurationError("deductions", "rules must be a list")
        return DeductionConfig(
            rules=tuple(self._parse_deduction_rule(rule, i) for i, rule in enumerate(rules_raw)),
            enable_late_penalty=r.get("enable_late_penalty", parse_bool),
            late_penalty_per_minute=r.get("late_penalty_per_minute", parse_decimal),
            enable_early_leave_penalty=r.get("enable_early_leave_penalty", parse_bool),
            early_leave_penalty_per_minute=r.get("early_leave_penalty_per_minute", parse_decimal),
            enable_absence_deduction=r.get("enable_absence_deduction", parse_bool),
        )

    def _parse_deduction_rule(self, data: Any, index: int) -> DeductionRule:
        label = f"deductions.rules[{index}]"
        if not isinstance(data, dict):
            raise ConfigurationError(label, "rule must be a mapping")
        for required in ("code", "name", "type"):
            if data.get(required) is None:
                raise ConfigurationError(label, f"{required} is required")
        amount = data.get("amount")
        percentage = data.get("percentage")
        return DeductionRule(
            code=_str(label, "code", data["code"]),
            name=_str(label, "name", data["name"]),
            type=parse_enum(label, "type", data["type"], DeductionType),
            amount=parse_decimal(label, "amount", amount) if amount is not None else None,
            percentage=(
                parse_decimal(label, "percentage", percentage) if percentage is not None else None
            ),
            order=parse_int(label, "order", data.get("order", 0)),
        )

    def _resolve_payroll(self, raw: dict[str, Any], used: list[str]) -> PayrollConfig:
        data = section(raw, "payroll")
        if data is None:
            used.append("payroll")
            return PayrollConfig()
        r = _SectionReader("payroll", data, PayrollConfig(), used)
        return PayrollConfig(
            default_salary_type=r.get("default_salary_type", _enum(SalaryType)),
            salary_rounding=r.get("salary_rounding", _enum(RoundingDirection)),
            rounding_unit=r.get("rounding_unit", parse_decimal),
            standard_working_days_per_month=r.get("standard_working_days_per_month", parse_int),
            standard_working_hours_per_day=r.get("standard_working_hours_per_day", parse_int),
            pay_day=r.get("pay_day", parse_int),
            cutoff_day=r.get("cutoff_day", parse_int),
        )
