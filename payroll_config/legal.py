"""
Statutory minimums by locale.

Static tables of the lowest overtime multipliers and shortest breaks the
labour law of each supported locale permits.  Unknown locales fall back to
the ``default`` table.  Used by the write-time validator and by the engines
when a policy sets ``use_legal_minimum``.
"""

from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType

from payroll_config.schema import OvertimeMultipliers

DEFAULT_LOCALE_KEY = "default"

LEGAL_MINIMUM_MULTIPLIERS: MappingProxyType[str, OvertimeMultipliers] = MappingProxyType({
    # Japan: Labour Standards Act art. 37
    "ja": OvertimeMultipliers(
        regular=Decimal("1.25"),
        night_work=Decimal("1.25"),
        night_overtime=Decimal("1.50"),
        holiday_overtime=Decimal("1.35"),
        holiday_night_overtime=Decimal("1.60"),
        weekend_overtime=Decimal("1.35"),
    ),
    # Vietnam: Labour Code art. 98
    "vi": OvertimeMultipliers(
        regular=Decimal("1.50"),
        night_work=Decimal("1.30"),
        night_overtime=Decimal("1.95"),
        holiday_overtime=Decimal("2.00"),
        holiday_night_overtime=Decimal("2.60"),
        weekend_overtime=Decimal("2.00"),
    ),
    DEFAULT_LOCALE_KEY: OvertimeMultipliers(
        regular=Decimal("1.25"),
        night_work=Decimal("1.25"),
        night_overtime=Decimal("1.50"),
        holiday_overtime=Decimal("1.50"),
        holiday_night_overtime=Decimal("1.75"),
        weekend_overtime=Decimal("1.35"),
    ),
})

SIX_HOURS = 6
EIGHT_HOURS = 8


def normalize_locale(locale: str | None) -> str:
    """Map ``ja_JP``/``vi-VN``/``JA`` style tags onto a table key."""
    if not locale:
        return DEFAULT_LOCALE_KEY
    key = locale.replace("-", "_").split("_")[0].lower()
    return key if key in LEGAL_MINIMUM_MULTIPLIERS else DEFAULT_LOCALE_KEY


def legal_minimum_multipliers(locale: str | None) -> OvertimeMultipliers:
    return LEGAL_MINIMUM_MULTIPLIERS[normalize_locale(locale)]


def legal_minimum_break_minutes(
    locale: str | None,
    worked_minutes: int,
    *,
    night_shift: bool = False,
) -> int:
    """
    Shortest break the law requires for a shift of ``worked_minutes``.

    Thresholds compare whole worked hours (minutes floored to the hour),
    so a 6h59 shift still counts as 6h.

    ja: none up to 6h, 45 min up to 8h, 60 min beyond.
    vi: none up to 6h, then 30 min (45 min on a night shift).
    default: none up to 6h, then 30 min.
    """
    hours = worked_minutes // 60
    if hours <= SIX_HOURS:
        return 0
    key = normalize_locale(locale)
    if key == "ja":
        return 45 if hours <= EIGHT_HOURS else 60
    if key == "vi":
        return 45 if night_shift else 30
    return 30
