from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

YEAR = "year"
MONTH = "month"
WEEK = "week"
DAY = "day"
HOUR = "hour"
MINUTE = "minute"
SECOND = "second"
MILLISECOND = "millisecond"

# Largest first. Order is relied upon by floor() and by composite durations.
UNITS: Tuple[str, ...] = (YEAR, MONTH, WEEK, DAY, HOUR, MINUTE, SECOND, MILLISECOND)

CALENDAR_UNITS = frozenset({YEAR, MONTH})

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR
MS_PER_WEEK = 7 * MS_PER_DAY

# Only fixed-length units have a millisecond value.
FIXED_UNIT_MS: Mapping[str, int] = MappingProxyType(
    {
        WEEK: MS_PER_WEEK,
        DAY: MS_PER_DAY,
        HOUR: MS_PER_HOUR,
        MINUTE: MS_PER_MINUTE,
        SECOND: MS_PER_SECOND,
        MILLISECOND: 1,
    }
)

SHORT_FORMS: Mapping[str, str] = MappingProxyType(
    {
        YEAR: "y",
        MONTH: "mo",
        WEEK: "w",
        DAY: "d",
        HOUR: "h",
        MINUTE: "min",
        SECOND: "s",
        MILLISECOND: "ms",
    }
)

# Compact duration tokens. "m" is a month, not a minute (minute is "min").
TOKEN_UNITS: Mapping[str, str] = MappingProxyType(
    {
        "y": YEAR,
        "mo": MONTH,
        "m": MONTH,
        "w": WEEK,
        "d": DAY,
        "h": HOUR,
        "min": MINUTE,
        "s": SECOND,
        "ms": MILLISECOND,
    }
)


def normalize_unit(name: str) -> str:
    """Canonical singular unit name; accepts plurals ("days") and any case.

    Raises ValueError for names outside UNITS.
    """
    if not isinstance(name, str):
        raise ValueError(f"Unit must be a string, got {type(name).__name__}")
    s = name.strip().lower()
    if s not in UNITS and s.endswith("s") and s[:-1] in UNITS:
        s = s[:-1]
    if s not in UNITS:
        raise ValueError(f"Unknown time unit: {name!r}")
    return s


def is_calendar_unit(unit: str) -> bool:
    return normalize_unit(unit) in CALENDAR_UNITS


def fixed_ms(unit: str) -> Optional[int]:
    """Milliseconds in one `unit`, or None for calendar units."""
    return FIXED_UNIT_MS.get(normalize_unit(unit))


__all__ = [
    "YEAR",
    "MONTH",
    "WEEK",
    "DAY",
    "HOUR",
    "MINUTE",
    "SECOND",
    "MILLISECOND",
    "UNITS",
    "CALENDAR_UNITS",
    "FIXED_UNIT_MS",
    "SHORT_FORMS",
    "TOKEN_UNITS",
    "MS_PER_SECOND",
    "MS_PER_MINUTE",
    "MS_PER_HOUR",
    "MS_PER_DAY",
    "MS_PER_WEEK",
    "normalize_unit",
    "is_calendar_unit",
    "fixed_ms",
]
