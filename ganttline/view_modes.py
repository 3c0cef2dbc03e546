"""Zoom-level presets and the grid they produce.

A view mode fixes the column step, the column width, the padding around the
task range and how the two header rows are labelled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .calendar_math import add, add_duration, floor
from .duration import Duration, DurationPart, parse_duration
from .formatting import DEFAULT_LANG, format_instant
from .instant import Instant, InstantLike, now as _now, parse_instant
from .units import DAY

logger = logging.getLogger(__name__)

# (instant, previous column instant or None, lang) -> header text
LabelFn = Callable[[Instant, Optional[Instant], str], str]

MAX_GRID_COLUMNS = 10_000


def _fmt(template: str) -> LabelFn:
    def label(d: Instant, _ld: Optional[Instant], lang: str) -> str:
        return format_instant(d, template, lang)

    return label


def _on_change(key: Callable[[Instant], object], template: str) -> LabelFn:
    """Label only the first column, and every column where `key` changes."""

    def label(d: Instant, ld: Optional[Instant], lang: str) -> str:
        if ld is None or key(d) != key(ld):
            return format_instant(d, template, lang)
        return ""

    return label


def _day(i: Instant) -> Tuple[int, int, int]:
    c = i.to_calendar()
    return (c.year, c.month, c.day)


def _month(i: Instant) -> Tuple[int, int]:
    c = i.to_calendar()
    return (c.year, c.month)


def _year(i: Instant) -> int:
    return i.to_calendar().year


def _decade(i: Instant) -> int:
    y = _year(i)
    return y - y % 10


def _half_day_upper(d: Instant, ld: Optional[Instant], lang: str) -> str:
    if ld is not None and _day(d) == _day(ld):
        return ""
    if ld is None or _month(d) != _month(ld):
        return format_instant(d, "D MMM", lang)
    return format_instant(d, "D", lang)


def _week_lower(d: Instant, ld: Optional[Instant], lang: str) -> str:
    end = add(d, 6, DAY)
    end_fmt = "D MMM" if _month(end) != _month(d) else "D"
    begin_fmt = "D MMM" if ld is None or _month(d) != _month(ld) else "D"
    return f"{format_instant(d, begin_fmt, lang)} - {format_instant(end, end_fmt, lang)}"


def _decade_upper(d: Instant, ld: Optional[Instant], _lang: str) -> str:
    if ld is None or _decade(d) != _decade(ld):
        return str(_decade(d))
    return ""


@dataclass(frozen=True)
class ViewMode:
    name: str
    step: str
    date_format: str
    padding: Tuple[str, str]
    upper_text: LabelFn
    lower_text: LabelFn
    column_width: int = 45
    snap_at: Optional[str] = None
    thick_line: Optional[Callable[[Instant], bool]] = None

    @property
    def step_duration(self) -> Duration:
        return parse_duration(self.step)

    @property
    def step_interval(self) -> int:
        return int(self.step_duration.parts[0].value)

    @property
    def step_unit(self) -> str:
        return self.step_duration.parts[0].unit


DEFAULT_VIEW_MODES: Tuple[ViewMode, ...] = (
    ViewMode(
        name="Hour",
        step="1h",
        date_format="YYYY-MM-DD HH:",
        padding=("7d", "7d"),
        lower_text=_fmt("HH"),
        upper_text=_on_change(_day, "D MMMM"),
    ),
    ViewMode(
        name="Quarter Day",
        step="6h",
        date_format="YYYY-MM-DD HH:",
        padding=("7d", "7d"),
        lower_text=_fmt("HH"),
        upper_text=_on_change(_day, "D MMM"),
    ),
    ViewMode(
        name="Half Day",
        step="12h",
        date_format="YYYY-MM-DD HH:",
        padding=("14d", "14d"),
        lower_text=_fmt("HH"),
        upper_text=_half_day_upper,
    ),
    ViewMode(
        name="Day",
        step="1d",
        date_format="YYYY-MM-DD",
        padding=("7d", "7d"),
        lower_text=_on_change(_day, "D"),
        upper_text=_on_change(_month, "MMMM"),
        thick_line=lambda d: d.to_calendar().weekday == 1,
    ),
    ViewMode(
        name="Week",
        step="7d",
        date_format="YYYY-MM-DD",
        padding=("1mo", "1mo"),
        column_width=140,
        lower_text=_week_lower,
        upper_text=_on_change(_month, "MMMM"),
        thick_line=lambda d: d.to_calendar().day <= 7,
    ),
    ViewMode(
        name="Month",
        step="1mo",
        date_format="YYYY-MM",
        padding=("2mo", "2mo"),
        column_width=120,
        lower_text=_fmt("MMMM"),
        upper_text=_on_change(_year, "YYYY"),
        snap_at="7d",
        thick_line=lambda d: (d.to_calendar().month - 1) % 3 == 0,
    ),
    ViewMode(
        name="Year",
        step="1y",
        date_format="YYYY",
        padding=("2y", "2y"),
        column_width=120,
        lower_text=_fmt("YYYY"),
        upper_text=_decade_upper,
        snap_at="30d",
    ),
)


def view_mode_names() -> List[str]:
    return [m.name for m in DEFAULT_VIEW_MODES]


def get_view_mode(name: Union[str, ViewMode]) -> ViewMode:
    """Look up a preset by name (case-insensitive); ViewMode passes through."""
    if isinstance(name, ViewMode):
        return name
    wanted = str(name).strip().lower()
    for m in DEFAULT_VIEW_MODES:
        if m.name.lower() == wanted:
            return m
    raise ValueError(f"Unknown view mode: {name!r} (expected one of {view_mode_names()})")


def grid_dates(start: InstantLike, end: InstantLike, step: Union[str, Duration]) -> List[Instant]:
    """Column instants from `start` up to and including `end`, stepping on the calendar.

    Each column is computed from `start` (k * step), so month columns do not
    drift after a short month.
    """
    s, e = parse_instant(start), parse_instant(end)
    d = step if isinstance(step, Duration) else parse_duration(step)
    if d.is_zero:
        raise ValueError("grid step must be non-zero")
    out: List[Instant] = []
    k = 0
    while True:
        cur = add_duration(s, Duration(tuple(DurationPart(p.value * k, p.unit) for p in d.parts)))
        if cur > e:
            break
        out.append(cur)
        k += 1
        if k > MAX_GRID_COLUMNS:
            logger.warning("grid from %s to %s truncated at %d columns", s, e, MAX_GRID_COLUMNS)
            break
    return out


def grid_range(
    starts: Sequence[InstantLike],
    ends: Sequence[InstantLike],
    mode: Union[str, ViewMode],
    now: Optional[InstantLike] = None,
) -> Tuple[Instant, Instant]:
    """(grid_start, grid_end) covering all tasks plus the mode's padding.

    The earliest start is floored to the step unit first. With no tasks the
    range is built around `now`.
    """
    vm = get_view_mode(mode)
    if starts:
        earliest = min(parse_instant(s) for s in starts)
    else:
        earliest = parse_instant(now) if now is not None else _now()
    latest = max((parse_instant(e) for e in ends), default=earliest)

    pad_start, pad_end = (parse_duration(p) for p in vm.padding)
    grid_start = add_duration(floor(earliest, vm.step_unit), pad_start.negated())
    grid_end = add_duration(latest, pad_end)
    return grid_start, grid_end


def header_labels(
    instant: InstantLike,
    previous: Optional[InstantLike],
    mode: Union[str, ViewMode],
    lang: str = DEFAULT_LANG,
) -> Tuple[str, str]:
    """(upper, lower) header text for the column at `instant`."""
    vm = get_view_mode(mode)
    d = parse_instant(instant)
    ld = parse_instant(previous) if previous is not None else None
    return vm.upper_text(d, ld, lang), vm.lower_text(d, ld, lang)


__all__ = [
    "DEFAULT_VIEW_MODES",
    "ViewMode",
    "get_view_mode",
    "grid_dates",
    "grid_range",
    "header_labels",
    "view_mode_names",
]
