"""Non-working days: which days a bar spans but does not count."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Set, Tuple

from .instant import Instant, InstantLike, parse_instant
from .units import MS_PER_DAY

logger = logging.getLogger(__name__)

IgnorePredicate = Callable[[Instant], bool]

WEEKEND = "weekend"


def _day_key(inst: Instant) -> Tuple[int, int, int]:
    c = inst.to_calendar()
    return (c.year, c.month, c.day)


def is_weekend(instant: InstantLike) -> bool:
    return parse_instant(instant).to_calendar().weekday >= 6


def _never(_: Instant) -> bool:
    return False


def build_ignore_predicate(option: Any) -> IgnorePredicate:
    """Turn the `ignore` option into a single Instant -> bool predicate.

    Accepts a callable, "weekend", a date string, or a list mixing those.
    A day is ignored when any entry matches it. Dates are compared by
    calendar day, so "2024-12-25" ignores the whole day.
    """
    if option is None:
        return _never
    if callable(option) or isinstance(option, str):
        option = [option]

    funcs: List[IgnorePredicate] = []
    days: Set[Tuple[int, int, int]] = set()
    for item in option:
        if callable(item):
            funcs.append(item)
        elif item == WEEKEND:
            funcs.append(is_weekend)
        elif isinstance(item, str):
            days.add(_day_key(parse_instant(item)))
        else:
            raise TypeError(f"ignore entries must be callables or strings, got {type(item).__name__}")

    if not funcs and not days:
        return _never

    def predicate(instant: Instant) -> bool:
        inst = parse_instant(instant)
        if days and _day_key(inst) in days:
            return True
        return any(f(inst) for f in funcs)

    return predicate


def iter_days(start: InstantLike, end: InstantLike) -> Iterable[Instant]:
    """Instants at 24h steps from `start`, stopping before `end`."""
    cur = parse_instant(start)
    stop = parse_instant(end)
    while cur < stop:
        yield cur
        cur = cur.shifted(MS_PER_DAY)


def working_duration(
    start: InstantLike,
    end: InstantLike,
    predicate: Optional[IgnorePredicate] = None,
) -> Tuple[int, int]:
    """(working_days, ignored_days) of the half-open span [start, end)."""
    pred = predicate or _never
    total = ignored = 0
    for day in iter_days(start, end):
        total += 1
        if pred(day):
            ignored += 1
    return total - ignored, ignored


__all__ = [
    "WEEKEND",
    "IgnorePredicate",
    "build_ignore_predicate",
    "is_weekend",
    "iter_days",
    "working_duration",
]
