"""
Policy Document Loader (``payroll_config.loader``).

Responsibility
--------------
Reads company policy documents from YAML and provides the typed field
parsers the ``PolicyProvider`` uses to turn raw values into schema
objects.  ``compute_checksum`` gives every resolved policy set a
deterministic identity.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Consumed by
``payroll_config.provider``.  Depends only on ``payroll_kernel`` (enums and
exceptions) and PyYAML.

Invariants enforced
-------------------
* Every parse failure raises ``ConfigurationError`` (or its subclass
  ``UnknownPolicyValueError``) naming the section and field.
* Money and multipliers are parsed to ``Decimal`` from their string form,
  never through ``float``.
* ``compute_checksum`` is deterministic: identical data always produces
  the same SHA-256 hex digest.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``ConfigurationError`` wrapping the ``yaml.YAMLError``.
* A document that is not a mapping  -> ``ConfigurationError``.

Audit relevance
---------------
``compute_checksum`` lets a stored payroll result be tied back to the exact
policy values that produced it.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, is_dataclass
from datetime import time
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml

from payroll_kernel.exceptions import ConfigurationError, UnknownPolicyValueError

E = TypeVar("E", bound=Enum)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML policy document and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (empty if the YAML document is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        ConfigurationError: if the YAML is invalid or not a mapping.
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError("document", f"{path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("document", f"{path}: top level must be a mapping")
    return data


def section(raw: dict[str, Any], name: str) -> dict[str, Any] | None:
    """Return one policy section, ``None`` when it is absent or null."""
    value = raw.get(name)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigurationError(name, "section must be a mapping")
    return value


def parse_time(section_name: str, field_name: str, value: Any) -> time:
    """Parse ``HH:MM`` (or a YAML time/sexagesimal int) into ``datetime.time``."""
    if isinstance(value, time):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        # PyYAML 1.1 reads an unquoted 09:00 as sexagesimal 540.
        hours, minutes = divmod(value, 60)
        if 0 <= hours < 24:
            return time(hours, minutes)
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) in (2, 3) and all(p.isdigit() for p in parts):
            try:
                return time(*(int(p) for p in parts))
            except ValueError:
                pass
    raise ConfigurationError(section_name, f"{field_name}={value!r} is not a HH:MM time")


def parse_decimal(section_name: str, field_name: str, value: Any) -> Decimal:
    """Parse a decimal amount from a string or number."""
    if isinstance(value, bool):
        raise ConfigurationError(section_name, f"{field_name}={value!r} is not a number")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ConfigurationError(
            section_name, f"{field_name}={value!r} is not a number"
        ) from exc


def parse_int(section_name: str, field_name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(section_name, f"{field_name}={value!r} is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    raise ConfigurationError(section_name, f"{field_name}={value!r} is not an integer")


def parse_bool(section_name: str, field_name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ConfigurationError(section_name, f"{field_name}={value!r} is not a boolean")


def parse_enum(section_name: str, field_name: str, value: Any, enum_cls: type[E]) -> E:
    """
    Parse an enum by member name or value (case-insensitive for names).

    Raises:
        UnknownPolicyValueError: if no member matches.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        member = enum_cls.__members__.get(value.strip().upper())
        if member is not None:
            return member
    for member in enum_cls:
        if member.value == value:
            return member
    raise UnknownPolicyValueError(
        section_name,
        field_name,
        value,
        [str(m.value) for m in enum_cls],
    )


def compute_checksum(data: Any) -> str:
    """
    Compute SHA-256 checksum of a canonical JSON serialization.

    Preconditions:
        - ``data`` is a dict or a (nested) dataclass instance whose leaves
          are JSON-serializable or stringifiable (``default=str``).
    Postconditions:
        - Returns a hex-encoded SHA-256 hash string.
        - Identical ``data`` always produces identical checksums.
    """
    if is_dataclass(data) and not isinstance(data, type):
        data = asdict(data)
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
