"""Calendar arithmetic on Instants in the reference zone.

Month/year addition keeps the day of month and lets overflow roll forward
into the following month, the way a native calendar constructor normalizes
out-of-range days: 2024-01-31 + 1 month is 2024-03-02, not 2024-02-29.
"""

from __future__ import annotations

import calendar
import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from .duration import Duration, parse_duration
from .instant import REFERENCE_TZ, CalendarDateTime, Instant, InstantLike, parse_instant
from .units import DAY, FIXED_UNIT_MS, MONTH, WEEK, YEAR, normalize_unit
from .util.timeparse import aware_to_epoch_ms

Number = Union[int, float]

EPOCH = Instant(0)

_TWO_PLACES = Decimal("0.01")


def round2(value: float) -> float:
    """Round half away from zero to 2 decimals (symmetric under negation)."""
    q = Decimal(repr(float(value))).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return float(q) + 0.0


def _shift_months(instant: Instant, months: int) -> Instant:
    cal = instant.to_calendar()
    y, m0 = divmod(cal.year * 12 + (cal.month - 1) + months, 12)
    first = dt.datetime(
        y, m0 + 1, 1, cal.hour, cal.minute, cal.second, cal.millisecond * 1000, tzinfo=REFERENCE_TZ
    )
    # Day overflow rolls into the next month instead of clamping.
    return Instant(aware_to_epoch_ms(first + dt.timedelta(days=cal.day - 1)))


def add(instant: InstantLike, qty: Number, unit: str) -> Instant:
    """Return `instant` moved by `qty` units.

    Fixed units shift by an exact number of milliseconds (fractional
    quantities are rounded to the nearest millisecond). Month and year
    quantities are truncated toward zero and applied to the calendar fields.
    """
    inst = parse_instant(instant)
    u = normalize_unit(unit)
    if u == YEAR:
        return _shift_months(inst, int(qty) * 12)
    if u == MONTH:
        return _shift_months(inst, int(qty))
    if isinstance(qty, int):
        return inst.shifted(qty * FIXED_UNIT_MS[u])
    return inst.shifted(int(round(float(qty) * FIXED_UNIT_MS[u])))


def subtract(instant: InstantLike, qty: Number, unit: str) -> Instant:
    return add(instant, -qty, unit)


def add_duration(instant: InstantLike, duration: Duration) -> Instant:
    """Apply each part in order, each one anchored at the previous result."""
    inst = parse_instant(instant)
    for part in duration.parts:
        inst = add(inst, part.value, part.unit)
    return inst


def floor(instant: InstantLike, unit: str) -> Instant:
    """Start of the `unit` containing `instant`; weeks start on Monday."""
    inst = parse_instant(instant)
    u = normalize_unit(unit)
    c = inst.to_calendar()
    if u == YEAR:
        return CalendarDateTime(c.year, 1, 1).to_instant()
    if u == MONTH:
        return CalendarDateTime(c.year, c.month, 1).to_instant()
    if u == WEEK:
        midnight = CalendarDateTime(c.year, c.month, c.day).to_instant()
        return midnight.shifted(-(c.weekday - 1) * FIXED_UNIT_MS[DAY])
    if u == DAY:
        return CalendarDateTime(c.year, c.month, c.day).to_instant()
    # Remaining units are fixed and divide a day evenly; the reference zone
    # has no offset, so plain modular truncation is exact.
    step = FIXED_UNIT_MS[u]
    return Instant(inst.epoch_ms - inst.epoch_ms % step)


def months_between(a: Instant, b: Instant) -> float:
    """Unrounded calendar months from `b` to `a`.

    The whole part is the field difference, minus one when a's day of month is
    before b's. The remainder is measured against the next month step.
    """
    ca, cb = a.to_calendar(), b.to_calendar()
    whole = (ca.year - cb.year) * 12 + (ca.month - cb.month)
    if ca.day < cb.day:
        whole -= 1
    anchor = _shift_months(b, whole)
    span = _shift_months(b, whole + 1).epoch_ms - anchor.epoch_ms
    return whole + (a.epoch_ms - anchor.epoch_ms) / span


def diff(a: InstantLike, b: InstantLike, unit: str = DAY) -> float:
    """Signed `a - b` in `unit`, rounded to 2 decimals.

    Month and year are calendar-aware (exactly one calendar month apart is
    1.0 whatever the month length); other units are plain millisecond ratios.
    """
    ia, ib = parse_instant(a), parse_instant(b)
    u = normalize_unit(unit)
    if u == MONTH:
        return round2(months_between(ia, ib))
    if u == YEAR:
        return round2(months_between(ia, ib) / 12)
    return round2((ia.epoch_ms - ib.epoch_ms) / FIXED_UNIT_MS[u])


def days_in_month(instant: InstantLike) -> int:
    c = parse_instant(instant).to_calendar()
    return calendar.monthrange(c.year, c.month)[1]


def days_in_year(instant: InstantLike) -> int:
    return 366 if calendar.isleap(parse_instant(instant).to_calendar().year) else 365


def duration_to_ms(duration: Duration, relative_to: Optional[InstantLike] = None) -> int:
    """Milliseconds spanned by `duration` applied at `relative_to` (default epoch)."""
    if not duration.has_calendar_units:
        return duration.fixed_ms()
    anchor = parse_instant(relative_to) if relative_to is not None else EPOCH
    return add_duration(anchor, duration).epoch_ms - anchor.epoch_ms


def duration_total(duration: Duration, unit: str, relative_to: Optional[InstantLike] = None) -> float:
    """Unrounded size of `duration` expressed in `unit`."""
    u = normalize_unit(unit)
    anchor = parse_instant(relative_to) if relative_to is not None else EPOCH
    if u in (YEAR, MONTH):
        months = months_between(add_duration(anchor, duration), anchor)
        return months / 12 if u == YEAR else months
    return duration_to_ms(duration, anchor) / FIXED_UNIT_MS[u]


def convert_to_unit(period: str, unit: str) -> float:
    """Express a compact duration string ("2w") in another unit, from the epoch."""
    return duration_total(parse_duration(period), unit)


__all__ = [
    "EPOCH",
    "add",
    "add_duration",
    "convert_to_unit",
    "days_in_month",
    "days_in_year",
    "diff",
    "duration_to_ms",
    "duration_total",
    "floor",
    "months_between",
    "round2",
    "subtract",
]
