"""Instants and their calendar breakdown in the reference zone.

An `Instant` is an integer count of milliseconds since 1970-01-01T00:00:00Z.
All calendar views are taken in one fixed reference zone (UTC) so results do
not depend on the host timezone.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Any, Pattern, Union

from .units import MS_PER_DAY
from .util.timeparse import (
    aware_to_epoch_ms,
    looks_iso,
    parse_compact_fields,
    parse_iso_instant_ms,
    parse_iso_local_fields,
)

REFERENCE_TZ = dt.timezone.utc
REFERENCE_TZ_NAME = "UTC"

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=REFERENCE_TZ)


class InstantParseError(ValueError):
    """Raised when a value cannot be turned into an Instant."""

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


@dataclass(frozen=True, order=True)
class Instant:
    epoch_ms: int

    def __post_init__(self) -> None:
        if isinstance(self.epoch_ms, bool) or not isinstance(self.epoch_ms, int):
            raise TypeError(f"epoch_ms must be int, got {type(self.epoch_ms).__name__}")

    @classmethod
    def from_epoch_ms(cls, ms: int) -> "Instant":
        return cls(int(ms))

    def to_datetime(self) -> dt.datetime:
        """Aware datetime in the reference zone."""
        return _EPOCH + dt.timedelta(milliseconds=self.epoch_ms)

    def to_calendar(self) -> "CalendarDateTime":
        return CalendarDateTime.from_instant(self)

    def shifted(self, delta_ms: int) -> "Instant":
        return Instant(self.epoch_ms + int(delta_ms))

    def isoformat(self) -> str:
        return self.to_datetime().isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def __str__(self) -> str:
        return self.isoformat()


@dataclass(frozen=True)
class CalendarDateTime:
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    millisecond: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.millisecond <= 999:
            raise ValueError(f"millisecond must be in 0..999, got {self.millisecond}")
        # datetime does the rest of the range checking (Feb 30, hour 24, ...)
        self.to_datetime()

    @classmethod
    def from_instant(cls, instant: Instant) -> "CalendarDateTime":
        d = instant.to_datetime()
        return cls(d.year, d.month, d.day, d.hour, d.minute, d.second, d.microsecond // 1000)

    @classmethod
    def from_datetime(cls, d: dt.datetime) -> "CalendarDateTime":
        return cls(d.year, d.month, d.day, d.hour, d.minute, d.second, d.microsecond // 1000)

    def to_datetime(self) -> dt.datetime:
        return dt.datetime(
            self.year,
            self.month,
            self.day,
            self.hour,
            self.minute,
            self.second,
            self.millisecond * 1000,
            tzinfo=REFERENCE_TZ,
        )

    def to_instant(self) -> Instant:
        return Instant(aware_to_epoch_ms(self.to_datetime()))

    @property
    def weekday(self) -> int:
        """ISO day of week, Monday=1 .. Sunday=7."""
        return self.to_datetime().isoweekday()

    @property
    def is_midnight(self) -> bool:
        return self.hour == 0 and self.minute == 0 and self.second == 0 and self.millisecond == 0


InstantLike = Union[Instant, int, float, CalendarDateTime, dt.datetime, dt.date, str]


def to_calendar(instant: Instant) -> CalendarDateTime:
    return CalendarDateTime.from_instant(instant)


def to_instant(cal: CalendarDateTime) -> Instant:
    return cal.to_instant()


def _from_fields(fields: tuple, source: Any) -> Instant:
    try:
        return CalendarDateTime(*fields).to_instant()
    except (ValueError, OverflowError) as ex:
        raise InstantParseError(f"Invalid date/time {source!r}: {ex}", source) from ex


def _parse_string(s: str, date_sep: str, time_sep: Union[str, Pattern[str], None]) -> Instant:
    if not s.strip():
        raise InstantParseError("Cannot parse an instant from an empty string", s)

    if looks_iso(s):
        ms = parse_iso_instant_ms(s)
        if ms is not None:
            return Instant(ms)
        fields = parse_iso_local_fields(s)
        if fields is not None:
            return _from_fields(fields, s)
        # Not ISO after all; the compact reader gets the final say.

    try:
        fields = parse_compact_fields(s, date_sep=date_sep, time_sep=time_sep)
    except ValueError as ex:
        raise InstantParseError(f"Invalid date/time {s!r}: {ex}", s) from ex
    return _from_fields(fields, s)


def parse_instant(
    value: InstantLike,
    date_sep: str = "-",
    time_sep: Union[str, Pattern[str], None] = None,
) -> Instant:
    """Coerce one of the accepted input kinds into an Instant.

    Accepted: Instant, epoch milliseconds (int/float), CalendarDateTime,
    datetime.datetime (naive values are read in the reference zone),
    datetime.date (midnight), and strings (ISO-8601 with or without zone, or
    the compact `YYYY-MM-DD HH:mm:ss.fff` form).

    Raises InstantParseError for anything else or for malformed values.
    """
    if isinstance(value, Instant):
        return value
    if isinstance(value, bool) or value is None:
        raise InstantParseError(f"Cannot parse instant from {type(value).__name__}", value)
    if isinstance(value, int):
        return Instant(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InstantParseError(f"Invalid epoch milliseconds {value!r}", value)
        return Instant(int(round(value)))
    if isinstance(value, CalendarDateTime):
        return value.to_instant()
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None and value.utcoffset() is not None:
            return Instant(aware_to_epoch_ms(value))
        return _from_fields(
            (value.year, value.month, value.day, value.hour, value.minute, value.second, value.microsecond // 1000),
            value,
        )
    if isinstance(value, dt.date):
        return _from_fields((value.year, value.month, value.day, 0, 0, 0, 0), value)
    if isinstance(value, str):
        return _parse_string(value, date_sep, time_sep)
    raise InstantParseError(f"Cannot parse instant from {type(value).__name__}", value)


def now() -> Instant:
    return Instant(aware_to_epoch_ms(dt.datetime.now(tz=REFERENCE_TZ)))


def today() -> Instant:
    """Midnight of the current day in the reference zone."""
    ms = now().epoch_ms
    return Instant(ms - ms % MS_PER_DAY)


__all__ = [
    "REFERENCE_TZ",
    "REFERENCE_TZ_NAME",
    "CalendarDateTime",
    "Instant",
    "InstantLike",
    "InstantParseError",
    "now",
    "parse_instant",
    "to_calendar",
    "to_instant",
    "today",
]
