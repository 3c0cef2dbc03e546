"""Rendering Instants and Durations as text.

Two concerns live here:
  - token templates (`YYYY-MM-DD HH:mm`), longest token first so that `D`
    never matches inside `DD` and `MMM` never inside `MMMM`;
  - "smart" human strings that only mention non-zero units.

Month names come from the CLDR data shipped with Babel.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import List, Optional, Tuple, Union

from babel.core import Locale, UnknownLocaleError
from babel.dates import get_month_names

from .calendar_math import EPOCH, add, add_duration
from .duration import Duration
from .instant import Instant, InstantLike, parse_instant
from .units import (
    DAY,
    HOUR,
    MILLISECOND,
    MINUTE,
    MONTH,
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    SECOND,
    SHORT_FORMS,
    YEAR,
)

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "YYYY-MM-DD HH:mm:ss.SSS"
DEFAULT_LANG = "en"

# Alternation order is the match priority: longest tokens first.
_TOKEN_RE = re.compile(r"YYYY|MMMM|SSS|MMM|MM|DD|HH|mm|ss|D")

# Plain millisecond magnitudes carry no anchor, so years and months are
# approximated with fixed lengths when breaking them down.
_FIXED_BREAKDOWN: Tuple[Tuple[str, int], ...] = (
    (YEAR, 365 * MS_PER_DAY),
    (MONTH, 30 * MS_PER_DAY),
    (DAY, MS_PER_DAY),
    (HOUR, MS_PER_HOUR),
    (MINUTE, MS_PER_MINUTE),
    (SECOND, MS_PER_SECOND),
    (MILLISECOND, 1),
)


@lru_cache(maxsize=32)
def _resolve_locale(lang: str) -> Locale:
    try:
        return Locale.parse((lang or DEFAULT_LANG).replace("-", "_"))
    except (UnknownLocaleError, ValueError):
        logger.warning("unknown locale %r, falling back to %r", lang, DEFAULT_LANG)
        return Locale.parse(DEFAULT_LANG)


def month_name(month: int, lang: str = DEFAULT_LANG, *, abbreviated: bool = False) -> str:
    """Stand-alone month name for a 1-based month in `lang`."""
    width = "abbreviated" if abbreviated else "wide"
    return get_month_names(width, context="stand-alone", locale=_resolve_locale(lang))[month]


def format_instant(instant: InstantLike, template: str = DEFAULT_TEMPLATE, lang: str = DEFAULT_LANG) -> str:
    """Replace `YYYY MMMM MMM MM DD D HH mm ss SSS` tokens in `template`."""
    c = parse_instant(instant).to_calendar()

    def _token(m: "re.Match[str]") -> str:
        tok = m.group(0)
        if tok == "YYYY":
            return str(c.year)
        if tok == "MMMM":
            name = month_name(c.month, lang)
            return name[:1].upper() + name[1:]
        if tok == "MMM":
            return month_name(c.month, lang, abbreviated=True)
        if tok == "MM":
            return f"{c.month:02d}"
        if tok == "DD":
            return f"{c.day:02d}"
        if tok == "D":
            return str(c.day)
        if tok == "HH":
            return f"{c.hour:02d}"
        if tok == "mm":
            return f"{c.minute:02d}"
        if tok == "ss":
            return f"{c.second:02d}"
        return f"{c.millisecond:03d}"

    return _TOKEN_RE.sub(_token, template)


def _label(count: int, unit: str, short_form: bool) -> str:
    if short_form:
        return f"{count}{SHORT_FORMS[unit]}"
    return f"{count} {unit if count == 1 else unit + 's'}"


def _fixed_components(ms: int, show_milliseconds: bool) -> List[Tuple[int, str]]:
    out: List[Tuple[int, str]] = []
    remaining = ms
    for unit, size in _FIXED_BREAKDOWN:
        if unit == MILLISECOND and not show_milliseconds:
            break
        count, remaining = divmod(remaining, size)
        out.append((count, unit))
    return out


def _whole_steps(cursor: Instant, end: Instant, unit: str) -> int:
    """Largest k >= 0 with add(cursor, k, unit) <= end."""
    cc, ce = cursor.to_calendar(), end.to_calendar()
    k = ce.year - cc.year if unit == YEAR else (ce.year - cc.year) * 12 + (ce.month - cc.month)
    k = max(0, k)
    while k > 0 and add(cursor, k, unit) > end:
        k -= 1
    while add(cursor, k + 1, unit) <= end:
        k += 1
    return k


def _calendar_components(start: Instant, end: Instant, show_milliseconds: bool) -> List[Tuple[int, str]]:
    out: List[Tuple[int, str]] = []
    cursor = start
    for unit in (YEAR, MONTH):
        k = _whole_steps(cursor, end, unit)
        out.append((k, unit))
        cursor = add(cursor, k, unit)
    rest = _fixed_components(end.epoch_ms - cursor.epoch_ms, show_milliseconds)
    # Anything left is shorter than a calendar month, so the fixed table
    # only contributes days and below.
    out.extend(c for c in rest if c[1] not in (YEAR, MONTH))
    return out


def format_duration(
    duration: Union[Duration, int, float],
    *,
    show_milliseconds: bool = True,
    max_units: Optional[int] = None,
    short_form: bool = False,
    relative_to: Optional[InstantLike] = None,
) -> str:
    """Human string for a Duration or a millisecond magnitude.

    Only non-zero units are shown, largest first: "1 day, 2 hours" or, with
    `short_form`, "1d 2h". Durations with years or months are balanced on the
    calendar starting at `relative_to` (default: the epoch).
    """
    opts = dict(show_milliseconds=show_milliseconds, max_units=max_units, short_form=short_form)

    if isinstance(duration, Duration):
        start = parse_instant(relative_to) if relative_to is not None else EPOCH
        end = add_duration(start, duration)
        total = end.epoch_ms - start.epoch_ms
        if total == 0:
            return "0ms" if short_form else "0 milliseconds"
        if total < 0:
            return "-" + format_duration(duration.negated(), relative_to=start, **opts)
        components = _calendar_components(start, end, show_milliseconds)
    elif isinstance(duration, (int, float)) and not isinstance(duration, bool):
        ms = int(round(duration))
        if ms == 0:
            return "0ms" if short_form else "0 milliseconds"
        if ms < 0:
            return "-" + format_duration(-ms, **opts)
        components = _fixed_components(ms, show_milliseconds)
    else:
        raise TypeError(f"Cannot format duration from {type(duration).__name__}")

    parts: List[str] = []
    for count, unit in components:
        if count > 0:
            parts.append(_label(count, unit, short_form))
        if max_units and len(parts) >= max_units:
            break

    if not parts and not show_milliseconds:
        return "<1s" if short_form else "less than 1 second"

    return (" " if short_form else ", ").join(parts)


def format_datetime(
    instant: InstantLike,
    *,
    lang: str = DEFAULT_LANG,
    show_milliseconds: bool = True,
    show_seconds: bool = True,
    show_date: bool = True,
    max_time_units: Optional[int] = None,
) -> str:
    """Date plus non-zero time units, e.g. "Jul 10, 2024 at 14 hours, 30 minutes".

    An instant with no time of day reads "... at midnight".
    """
    inst = parse_instant(instant)
    c = inst.to_calendar()

    time_parts: List[str] = []
    if c.hour > 0:
        time_parts.append(_label(c.hour, HOUR, False))
    if c.minute > 0:
        time_parts.append(_label(c.minute, MINUTE, False))
    if show_seconds and c.second > 0:
        time_parts.append(_label(c.second, SECOND, False))
    if show_milliseconds and c.millisecond > 0:
        time_parts.append(_label(c.millisecond, MILLISECOND, False))

    if max_time_units and len(time_parts) > max_time_units:
        del time_parts[max_time_units:]

    if not time_parts:
        if c.is_midnight:
            time_parts.append("midnight")
        elif show_milliseconds:
            time_parts.append("0 milliseconds")
        elif show_seconds:
            time_parts.append("0 seconds")
        else:
            time_parts.append("0 minutes")

    time_str = ", ".join(time_parts)
    if not show_date:
        return time_str
    return f"{format_instant(inst, 'MMM D, YYYY', lang)} at {time_str}"


__all__ = [
    "DEFAULT_LANG",
    "DEFAULT_TEMPLATE",
    "format_datetime",
    "format_duration",
    "format_instant",
    "month_name",
]
