"""Pure time <-> pixel transform.

The viewport only knows the instant at x=0 and the scale. What is visible,
scroll bounds and rendering policy belong to the caller.

Scale for calendar steps is measured from a fixed anchor, the epoch
(1970-01-01T00:00:00Z): a "1 month" step is taken to be January's 31 days and
a "1 year" step 365 days. Other anchor months would differ by up to ~3%; this
skew is accepted so that x positions are stable and independent of "now".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from .calendar_math import EPOCH, add, duration_to_ms
from .duration import Duration
from .instant import Instant, InstantLike, parse_instant
from .units import DAY, normalize_unit

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_WIDTH = 45
DEFAULT_STEP_INTERVAL = 1
DEFAULT_STEP_UNIT = DAY

SCALE_ANCHOR = EPOCH


@dataclass(frozen=True)
class ScaleConfig:
    column_width: float = DEFAULT_COLUMN_WIDTH
    step_interval: int = DEFAULT_STEP_INTERVAL
    step_unit: str = DEFAULT_STEP_UNIT

    @classmethod
    def checked(
        cls,
        column_width: Any = None,
        step_interval: Any = None,
        step_unit: Any = None,
    ) -> "ScaleConfig":
        """Build a scale, replacing invalid parts with defaults (logged)."""
        width = column_width if column_width is not None else DEFAULT_COLUMN_WIDTH
        if (
            isinstance(width, bool)
            or not isinstance(width, (int, float))
            or not (math.isfinite(width) and width > 0)
        ):
            logger.warning("invalid column width %r, using default %s", column_width, DEFAULT_COLUMN_WIDTH)
            width = DEFAULT_COLUMN_WIDTH

        interval = step_interval if step_interval is not None else DEFAULT_STEP_INTERVAL
        unit = step_unit if step_unit is not None else DEFAULT_STEP_UNIT
        try:
            unit = normalize_unit(unit)
            ok = not isinstance(interval, bool) and isinstance(interval, int) and interval >= 1
        except ValueError:
            ok = False
        if not ok:
            logger.warning(
                "invalid step %r %r, using default step of %s %s",
                step_interval,
                step_unit,
                DEFAULT_STEP_INTERVAL,
                DEFAULT_STEP_UNIT,
            )
            interval, unit = DEFAULT_STEP_INTERVAL, DEFAULT_STEP_UNIT

        return cls(column_width=width, step_interval=interval, step_unit=unit)

    @property
    def step_ms(self) -> int:
        """Length of one step measured from the scale anchor."""
        return add(SCALE_ANCHOR, self.step_interval, self.step_unit).epoch_ms - SCALE_ANCHOR.epoch_ms

    @property
    def ms_per_pixel(self) -> float:
        return self.step_ms / self.column_width


class Viewport:
    def __init__(
        self,
        origin: Optional[InstantLike] = None,
        column_width: Any = DEFAULT_COLUMN_WIDTH,
        step_interval: Any = DEFAULT_STEP_INTERVAL,
        step_unit: Any = DEFAULT_STEP_UNIT,
    ) -> None:
        if origin is None:
            raise ValueError("Viewport requires an origin")
        self.origin: Instant = parse_instant(origin)
        self.scale = ScaleConfig.checked(column_width, step_interval, step_unit)
        self._update_scale()

    def _update_scale(self) -> None:
        self.ms_per_pixel = self.scale.ms_per_pixel

    @property
    def column_width(self) -> float:
        return self.scale.column_width

    @property
    def step_interval(self) -> int:
        return self.scale.step_interval

    @property
    def step_unit(self) -> str:
        return self.scale.step_unit

    def date_to_x(self, instant: InstantLike) -> float:
        return (parse_instant(instant).epoch_ms - self.origin.epoch_ms) / self.ms_per_pixel

    def x_to_date(self, x: float) -> Instant:
        return Instant(int(round(self.origin.epoch_ms + x * self.ms_per_pixel)))

    def duration_to_pixels(self, duration: Duration) -> float:
        """Width of `duration`; calendar parts are measured from the scale anchor."""
        return duration_to_ms(duration, SCALE_ANCHOR) / self.ms_per_pixel

    def pixels_to_duration(self, pixels: float) -> Duration:
        return Duration.from_ms(int(round(pixels * self.ms_per_pixel)))

    def range_to_pixels(self, start: InstantLike, end: InstantLike) -> float:
        return (parse_instant(end).epoch_ms - parse_instant(start).epoch_ms) / self.ms_per_pixel

    def is_in_range(self, instant: InstantLike, start_x: float, end_x: float) -> bool:
        x = self.date_to_x(instant)
        return start_x <= x <= end_x

    def set_origin(self, instant: InstantLike) -> None:
        self.origin = parse_instant(instant)

    def shift_origin(self, delta_pixels: float) -> Instant:
        """Move the origin by a pixel delta (positive = into the future)."""
        self.origin = self.x_to_date(delta_pixels)
        return self.origin

    def set_scale(self, column_width: Any, step_interval: Any = None, step_unit: Any = None) -> None:
        self.scale = ScaleConfig.checked(
            column_width,
            self.scale.step_interval if step_interval is None else step_interval,
            self.scale.step_unit if step_unit is None else step_unit,
        )
        self._update_scale()

    def __repr__(self) -> str:
        return (
            f"Viewport(origin={self.origin}, column_width={self.column_width}, "
            f"step={self.step_interval} {self.step_unit}, ms_per_pixel={self.ms_per_pixel:g})"
        )


__all__ = [
    "DEFAULT_COLUMN_WIDTH",
    "DEFAULT_STEP_INTERVAL",
    "DEFAULT_STEP_UNIT",
    "SCALE_ANCHOR",
    "ScaleConfig",
    "Viewport",
]
