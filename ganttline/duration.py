"""Unit-tagged durations and the compact duration grammar.

Grammar (one token): an unsigned integer immediately followed by one of
`y, mo, m, w, d, h, min, s, ms`. Both `m` and `mo` mean *month*; a minute is
always written `min`. Several tokens separated by whitespace form a composite
duration ("1y 2mo 3d"), applied in the order written.

Malformed tokens are not fatal: they become one day and a warning is logged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from .units import (
    DAY,
    FIXED_UNIT_MS,
    MILLISECOND,
    TOKEN_UNITS,
    is_calendar_unit,
    normalize_unit,
)

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"^(\d+)(y|mo|m|w|d|h|min|s|ms)$")

Number = Union[int, float]


@dataclass(frozen=True)
class DurationPart:
    value: Number
    unit: str

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f"duration value must be a number, got {type(self.value).__name__}")
        object.__setattr__(self, "unit", normalize_unit(self.unit))

    @property
    def is_calendar(self) -> bool:
        return is_calendar_unit(self.unit)

    def negated(self) -> "DurationPart":
        return DurationPart(-self.value, self.unit)

    def __str__(self) -> str:
        v = int(self.value) if float(self.value).is_integer() else self.value
        return f"{v} {self.unit}"


@dataclass(frozen=True)
class Duration:
    """Parts in the order they were written; add_duration applies them left to right."""

    parts: Tuple[DurationPart, ...] = ()

    def __post_init__(self) -> None:
        parts = tuple(self.parts)
        for p in parts:
            if not isinstance(p, DurationPart):
                raise TypeError(f"Duration parts must be DurationPart, got {type(p).__name__}")
        object.__setattr__(self, "parts", parts)

    @classmethod
    def of(cls, value: Number, unit: str) -> "Duration":
        return cls((DurationPart(value, unit),))

    @classmethod
    def from_ms(cls, ms: int) -> "Duration":
        return cls((DurationPart(int(ms), MILLISECOND),))

    @classmethod
    def from_parts(cls, parts: Iterable[DurationPart]) -> "Duration":
        return cls(tuple(parts))

    @property
    def has_calendar_units(self) -> bool:
        return any(p.is_calendar for p in self.parts)

    @property
    def is_zero(self) -> bool:
        return all(p.value == 0 for p in self.parts)

    def fixed_ms(self) -> int:
        """Exact milliseconds; only defined without year/month parts."""
        if self.has_calendar_units:
            raise ValueError("Duration with calendar units has no fixed length; use duration_to_ms()")
        return int(round(sum(p.value * FIXED_UNIT_MS[p.unit] for p in self.parts)))

    def negated(self) -> "Duration":
        return Duration(tuple(p.negated() for p in self.parts))

    def __neg__(self) -> "Duration":
        return self.negated()

    def __str__(self) -> str:
        return " ".join(str(p) for p in self.parts) or "0 millisecond"


def match_duration_token(token: str) -> Optional[DurationPart]:
    """Strict single-token match; None when `token` is not in the grammar."""
    if not isinstance(token, str):
        return None
    m = _TOKEN_RE.match(token.strip())
    if not m:
        return None
    return DurationPart(int(m.group(1)), TOKEN_UNITS[m.group(2)])


def parse_duration_part(token: str) -> DurationPart:
    """Parse one token such as "2h" or "30min"; bad input yields 1 day."""
    part = match_duration_token(token)
    if part is None:
        logger.warning("invalid duration %r, defaulting to 1 day", token)
        return DurationPart(1, DAY)
    return part


def parse_duration(text: str) -> Duration:
    """Parse "1y", "2mo 3d" and the like into a Duration.

    Each whitespace-separated token is read with parse_duration_part, so a
    malformed token contributes one day instead of failing the whole input.
    """
    tokens = text.split() if isinstance(text, str) else []
    if not tokens:
        logger.warning("invalid duration %r, defaulting to 1 day", text)
        return Duration.of(1, DAY)
    return Duration(tuple(parse_duration_part(t) for t in tokens))


__all__ = [
    "Duration",
    "DurationPart",
    "match_duration_token",
    "parse_duration",
    "parse_duration_part",
]
