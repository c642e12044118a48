"""Tests for YAML loading, field parsers and checksums."""

from datetime import time
from decimal import Decimal

import pytest

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
from payroll_config.schema import BreakPolicy
from payroll_kernel.domain.enums import BreakType, RoundingInterval
from payroll_kernel.exceptions import ConfigurationError, UnknownPolicyValueError


class TestLoadYamlFile:
    def test_mapping(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("breaks:\n  break_type: UNPAID\n")
        assert load_yaml_file(path) == {"breaks": {"break_type": "UNPAID"}}

    def test_empty_document(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_yaml_file(path)

    def test_malformed(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("breaks: [unclosed\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_yaml_file(path)
        assert exc_info.value.section == "document"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml_file(tmp_path / "nope.yaml")


class TestParsers:
    def test_section(self):
        assert section({"a": None}, "a") is None
        with pytest.raises(ConfigurationError):
            section({"a": 3}, "a")

    def test_time_forms(self):
        assert parse_time("s", "f", "22:00") == time(22, 0)
        assert parse_time("s", "f", time(5, 0)) == time(5, 0)
        # PyYAML reads an unquoted 09:00 as sexagesimal 540
        assert parse_time("s", "f", 540) == time(9, 0)

    def test_time_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_time("s", "f", "25:00")
        with pytest.raises(ConfigurationError):
            parse_time("s", "f", "noon")

    def test_decimal_not_through_float(self):
        assert parse_decimal("s", "f", "1.35") == Decimal("1.35")
        assert parse_decimal("s", "f", 1.1) == Decimal("1.1")
        with pytest.raises(ConfigurationError):
            parse_decimal("s", "f", True)
        with pytest.raises(ConfigurationError):
            parse_decimal("s", "f", "abc")

    def test_int_and_bool(self):
        assert parse_int("s", "f", "45") == 45
        assert parse_bool("s", "f", "TRUE") is True
        with pytest.raises(ConfigurationError):
            parse_int("s", "f", 4.5)
        with pytest.raises(ConfigurationError):
            parse_bool("s", "f", "yes please")

    def test_enum_by_name_or_value(self):
        assert parse_enum("s", "f", "unpaid", BreakType) == BreakType.UNPAID
        assert parse_enum("s", "f", 15, RoundingInterval) == RoundingInterval.MINUTES_15

    def test_unknown_enum(self):
        with pytest.raises(UnknownPolicyValueError) as exc_info:
            parse_enum("breaks", "break_type", "SOMETIMES", BreakType)
        assert exc_info.value.allowed == ["PAID", "UNPAID"]


class TestChecksum:
    def test_deterministic_and_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_dataclass_changes_with_values(self):
        assert compute_checksum(BreakPolicy()) != compute_checksum(BreakPolicy(minimum_minutes=30))
        assert len(compute_checksum(BreakPolicy())) == 64
