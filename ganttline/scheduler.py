from __future__ import annotations

import logging
import math
from collections import deque
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from .calendar_math import duration_to_ms
from .duration import Duration, parse_duration
from .instant import Instant, InstantLike, parse_instant
from .viewport import DEFAULT_COLUMN_WIDTH, SCALE_ANCHOR, Viewport

logger = logging.getLogger(__name__)

DurationLike = Union[Duration, str]

SNAP_TO_STEP = "unit"
DRAG_THRESHOLD_PX = 10.0

# Gesture states
IDLE = "idle"
PENDING = "pending"
DRAGGING = "dragging"

# Gesture kinds
MOVE = "move"
RESIZE_LEFT = "resize_left"
RESIZE_RIGHT = "resize_right"


def _as_duration(d: DurationLike) -> Duration:
    return d if isinstance(d, Duration) else parse_duration(d)


def _round_half_up(x: float) -> int:
    # Halves go toward +infinity, so -22.5 -> -22 and 22.5 -> 23.
    return int(math.floor(x + 0.5))


def snap_width(
    step: DurationLike,
    snap_at: Optional[DurationLike] = None,
    column_width: float = DEFAULT_COLUMN_WIDTH,
) -> float:
    """Pixel width of one snap increment for a grid of `step` per column."""
    step_d = _as_duration(step)
    snap_d = step_d if snap_at is None or snap_at == SNAP_TO_STEP else _as_duration(snap_at)
    step_ms = duration_to_ms(step_d, SCALE_ANCHOR)
    snap_ms = duration_to_ms(snap_d, SCALE_ANCHOR)
    if step_ms <= 0 or snap_ms <= 0:
        return 0.0
    return snap_ms / step_ms * column_width


def snap_pixel_delta(
    raw_delta_px: float,
    step: DurationLike,
    snap_at: Optional[DurationLike] = None,
    column_width: float = DEFAULT_COLUMN_WIDTH,
) -> float:
    """Round a drag offset to the nearest multiple of one snap increment.

    `snap_at` of None or "unit" snaps to the step itself. Idempotent: a
    snapped value snaps to itself.
    """
    width = snap_width(step, snap_at, column_width)
    if width <= 0:
        logger.warning("zero-length snap (step=%r, snap_at=%r); not snapping", step, snap_at)
        return float(raw_delta_px)
    return _round_half_up(raw_delta_px / width) * width


# --- dependency resolution -----------------------------------------------------

DependencyGraph = Mapping[str, Iterable[str]]


def dependents_map(graph: DependencyGraph) -> Dict[str, Set[str]]:
    """Invert task -> dependencies into task -> tasks that depend on it."""
    out: Dict[str, Set[str]] = {}
    for task_id, deps in graph.items():
        out.setdefault(task_id, set())
        for dep in deps:
            out.setdefault(dep, set()).add(task_id)
    return out


def transitive_dependents(task_id: str, graph: DependencyGraph) -> List[str]:
    """Every task that directly or indirectly depends on `task_id`, BFS order."""
    inverse = dependents_map(graph)
    result: List[str] = []
    seen = {task_id}
    queue = deque([task_id])
    while queue:
        current = queue.popleft()
        for dep in sorted(inverse.get(current, ())):
            if dep not in seen:
                seen.add(dep)
                result.append(dep)
                queue.append(dep)
    return result


def affected_task_ids(task_id: str, graph: DependencyGraph, cascade: bool = True) -> Set[str]:
    """Tasks that move with `task_id`: itself, plus its dependents when cascading."""
    if not cascade:
        return {task_id}
    return {task_id, *transitive_dependents(task_id, graph)}


# --- drag gestures -------------------------------------------------------------


class DragTracker:
    """Pointer gesture state machine: idle -> pending -> dragging.

    A press starts a pending gesture. Moving beyond `threshold_px` turns it
    into a drag; every later move reports the snapped delta. Releasing a drag
    returns the committed snapped delta, releasing a pending gesture is a
    click and returns None.
    """

    def __init__(
        self,
        snap: Callable[[float], float],
        threshold_px: float = DRAG_THRESHOLD_PX,
    ) -> None:
        self._snap = snap
        self.threshold_px = threshold_px
        self.state = IDLE
        self.kind = MOVE
        self.start_x = 0.0
        self.delta_px = 0.0

    @classmethod
    def for_viewport(
        cls,
        viewport: Viewport,
        snap_at: Optional[DurationLike] = None,
        threshold_px: float = DRAG_THRESHOLD_PX,
    ) -> "DragTracker":
        step = Duration.of(viewport.step_interval, viewport.step_unit)
        width = viewport.column_width
        return cls(lambda dx: snap_pixel_delta(dx, step, snap_at, width), threshold_px)

    def press(self, x: float, kind: str = MOVE) -> None:
        if kind not in (MOVE, RESIZE_LEFT, RESIZE_RIGHT):
            raise ValueError(f"Unknown gesture kind: {kind!r}")
        self.state = PENDING
        self.kind = kind
        self.start_x = float(x)
        self.delta_px = 0.0

    def move(self, x: float) -> Optional[float]:
        if self.state == IDLE:
            return None
        raw = float(x) - self.start_x
        if self.state == PENDING:
            if abs(raw) <= self.threshold_px:
                return None
            self.state = DRAGGING
        self.delta_px = self._snap(raw)
        return self.delta_px

    def release(self, x: float) -> Optional[float]:
        committed: Optional[float] = None
        if self.state == PENDING:
            self.move(x)
        if self.state == DRAGGING:
            committed = self._snap(float(x) - self.start_x)
        self.cancel()
        return committed

    def cancel(self) -> None:
        self.state = IDLE
        self.delta_px = 0.0


def apply_drag(
    start: InstantLike,
    end: InstantLike,
    delta_px: float,
    viewport: Viewport,
    kind: str = MOVE,
) -> Tuple[Instant, Instant]:
    """New (start, end) of a bar after a committed gesture of `delta_px`."""
    s, e = parse_instant(start), parse_instant(end)
    delta_ms = int(round(delta_px * viewport.ms_per_pixel))
    if kind == MOVE:
        return s.shifted(delta_ms), e.shifted(delta_ms)
    if kind == RESIZE_LEFT:
        return min(s.shifted(delta_ms), e), e
    if kind == RESIZE_RIGHT:
        return s, max(e.shifted(delta_ms), s)
    raise ValueError(f"Unknown gesture kind: {kind!r}")


__all__ = [
    "DRAGGING",
    "DRAG_THRESHOLD_PX",
    "IDLE",
    "MOVE",
    "PENDING",
    "RESIZE_LEFT",
    "RESIZE_RIGHT",
    "SNAP_TO_STEP",
    "DependencyGraph",
    "DragTracker",
    "affected_task_ids",
    "apply_drag",
    "dependents_map",
    "snap_pixel_delta",
    "snap_width",
    "transitive_dependents",
]
