from __future__ import annotations

import datetime as dt
import re
from typing import Optional, Pattern, Tuple, Union

# (year, month, day, hour, minute, second, millisecond); month is 1-based.
Fields = Tuple[int, int, int, int, int, int, int]

_ZONE_RE = re.compile(r"(Z|[+-]\d{2}:\d{2})$", re.IGNORECASE)
_DIGITS_RE = re.compile(r"^\d+$")
_DEFAULT_TIME_SEP = re.compile(r"[.:]")
_FRACTION_RE = re.compile(r"(:\d{2})[.,](\d+)")

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
_ONE_MS = dt.timedelta(milliseconds=1)


def has_zone_designator(s: str) -> bool:
    return bool(_ZONE_RE.search(s.strip()))


def looks_iso(s: str) -> bool:
    """True when `s` should be tried as ISO-8601 before the compact form."""
    normalized = s.strip().replace(" ", "T", 1)
    return "T" in normalized.upper() or normalized.upper().endswith("Z")


def _pad_fraction(m: "re.Match[str]") -> str:
    return m.group(1) + "." + m.group(2)[:6].ljust(6, "0")


def _six_digit_fraction(s: str) -> str:
    # Older fromisoformat only takes 3 or 6 fraction digits.
    return _FRACTION_RE.sub(_pad_fraction, s, count=1)


def aware_to_epoch_ms(d: dt.datetime) -> int:
    # Integer arithmetic: timestamp() goes through a float.
    return (d - _EPOCH) // _ONE_MS


def parse_iso_instant_ms(s: str) -> Optional[int]:
    """Epoch ms for an ISO-8601 string carrying `Z` or `+HH:MM`, else None."""
    ss = s.strip().replace(" ", "T", 1)
    if not has_zone_designator(ss):
        return None
    if ss[-1] in "zZ":
        ss = ss[:-1] + "+00:00"
    ss = _six_digit_fraction(ss)
    try:
        d = dt.datetime.fromisoformat(ss)
    except ValueError:
        return None
    if d.tzinfo is None:
        return None
    return aware_to_epoch_ms(d)


def parse_iso_local_fields(s: str) -> Optional[Fields]:
    """Calendar fields of a zone-less ISO-8601 date-time, else None."""
    ss = s.strip().replace(" ", "T", 1)
    if has_zone_designator(ss):
        return None
    ss = _six_digit_fraction(ss)
    try:
        d = dt.datetime.fromisoformat(ss)
    except ValueError:
        return None
    if d.tzinfo is not None:
        return None
    return (d.year, d.month, d.day, d.hour, d.minute, d.second, d.microsecond // 1000)


def _int_part(raw: str, what: str, source: str) -> int:
    if not _DIGITS_RE.match(raw):
        raise ValueError(f"Invalid {what} {raw!r} in {source!r}")
    return int(raw)


def _fraction_ms(raw: str, source: str) -> int:
    if not _DIGITS_RE.match(raw):
        raise ValueError(f"Invalid fractional seconds {raw!r} in {source!r}")
    # "5" is half a second, "123" is 123 ms.
    return min(999, int(round(float("0." + raw) * 1000)))


def parse_compact_fields(
    s: str,
    date_sep: str = "-",
    time_sep: Union[str, Pattern[str], None] = None,
) -> Fields:
    """Parse `YYYY{sep}MM{sep}DD[ HH{tsep}mm{tsep}ss{tsep}fff]`.

    Month and day default to 1, time fields to 0. A fourth time field is a
    decimal fraction of a second. Field ranges are not checked here.

    Raises ValueError on malformed input.
    """
    text = s.strip()
    if not text:
        raise ValueError("Empty date string")

    parts = text.split()
    if len(parts) > 2:
        raise ValueError(f"Unexpected trailing text in {s!r}")

    date_parts = parts[0].split(date_sep)
    if len(date_parts) > 3:
        raise ValueError(f"Too many date fields in {s!r}")
    year = _int_part(date_parts[0], "year", s)
    month = _int_part(date_parts[1], "month", s) if len(date_parts) > 1 else 1
    day = _int_part(date_parts[2], "day", s) if len(date_parts) > 2 else 1

    hour = minute = second = millisecond = 0
    if len(parts) == 2:
        if time_sep is None:
            pattern: Pattern[str] = _DEFAULT_TIME_SEP
        elif isinstance(time_sep, str):
            pattern = re.compile(re.escape(time_sep))
        else:
            pattern = time_sep
        time_parts = pattern.split(parts[1])
        if len(time_parts) > 4:
            raise ValueError(f"Too many time fields in {s!r}")
        hour = _int_part(time_parts[0], "hour", s)
        if len(time_parts) > 1:
            minute = _int_part(time_parts[1], "minute", s)
        if len(time_parts) > 2:
            second = _int_part(time_parts[2], "second", s)
        if len(time_parts) > 3:
            millisecond = _fraction_ms(time_parts[3], s)

    return (year, month, day, hour, minute, second, millisecond)


__all__ = [
    "Fields",
    "aware_to_epoch_ms",
    "has_zone_designator",
    "looks_iso",
    "parse_compact_fields",
    "parse_iso_instant_ms",
    "parse_iso_local_fields",
]
