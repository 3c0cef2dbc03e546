# ganttline/tasks.py
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .calendar_math import add, add_duration, diff
from .duration import Duration, parse_duration
from .instant import Instant, InstantParseError, parse_instant
from .units import HOUR, YEAR

logger = logging.getLogger(__name__)

MAX_SPAN_YEARS = 10


class TaskValidationError(ValueError):
    """A task record cannot be placed on the timeline."""

    def __init__(self, message: str, task_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.task_id = task_id


@dataclass(frozen=True)
class TaskSpan:
    id: str
    name: str
    start: Instant
    end: Instant            # exclusive; a midnight end was widened to the full day
    duration: Optional[Duration] = None
    dependencies: Tuple[str, ...] = ()
    progress: float = 0
    index: int = 0

    # Constraints exactly as given in the record (for export)
    original: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_spec(self) -> Dict[str, Any]:
        """Minimal record reproducing this task: the user's constraints, not derived values."""
        out: Dict[str, Any] = {"id": self.id, "name": self.name, "progress": self.progress}
        orig = self.original
        out["start"] = orig.get("start") or self.start.isoformat()
        if orig.get("end"):
            out["end"] = orig["end"]
        elif orig.get("duration"):
            out["duration"] = orig["duration"]
        else:
            out["end"] = self.end.isoformat()
        if self.dependencies:
            out["dependencies"] = ", ".join(self.dependencies)
        return out


@dataclass(frozen=True)
class TaskLoadResult:
    tasks: Tuple[TaskSpan, ...]
    errors: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not self.errors

    def by_id(self) -> Dict[str, TaskSpan]:
        return {t.id: t for t in self.tasks}

    def dependency_graph(self) -> Dict[str, Tuple[str, ...]]:
        return {t.id: t.dependencies for t in self.tasks}

    def oldest_start(self) -> Optional[Instant]:
        return min((t.start for t in self.tasks), default=None)

    def latest_end(self) -> Optional[Instant]:
        return max((t.end for t in self.tasks), default=None)


def _norm_id(v: Any) -> str:
    if isinstance(v, str):
        return v.strip().replace(" ", "_")
    return f"{v}"


def _generate_id(name: Any) -> str:
    return f"{name}_{secrets.token_hex(5)}"


def _parse_dependencies(raw: Any) -> Tuple[str, ...]:
    if isinstance(raw, str):
        items: Iterable[Any] = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        items = raw
    else:
        return ()
    return tuple(d for d in (_norm_id(x) for x in items) if d)


def _derive_span(
    raw: Mapping[str, Any], label: str, task_id: str
) -> Tuple[Instant, Instant, Optional[Duration]]:
    start = parse_instant(raw["start"])

    end: Optional[Instant] = None
    duration: Optional[Duration] = None
    if raw.get("duration") is not None:
        duration = parse_duration(raw["duration"])
        end = add_duration(start, duration)

    if raw.get("end") is not None:
        declared = parse_instant(raw["end"])
        if end is None:
            end = declared
        elif end != declared:
            raise TaskValidationError(f"end date of {label} contradicts its start and duration", task_id)
        else:
            logger.warning("end of %s is redundantly defined by duration", label)

    if end is None:
        raise TaskValidationError(f"{label} has neither end date nor duration", task_id)
    if end < start:
        raise TaskValidationError(f"start of task can't be after end of task: in {label}", task_id)
    if diff(end, start, YEAR) > MAX_SPAN_YEARS:
        raise TaskValidationError(f"the duration of {label} is too long (above ten years)", task_id)

    # A bare date as end means "through that day".
    if end.to_calendar().is_midnight:
        end = add(end, 24, HOUR)

    return start, end, duration


def parse_task(raw: Mapping[str, Any], index: int = 0) -> TaskSpan:
    """Validate one raw record and derive its span.

    Raises TaskValidationError (or InstantParseError for unreadable dates).
    """
    if not isinstance(raw, Mapping):
        raise TaskValidationError(f"task record must be an object, got {type(raw).__name__}")

    name = raw.get("name")
    raw_id = raw.get("id")
    task_id = _norm_id(raw_id) if raw_id else _generate_id(name)
    label = f'task "{name}" (ID: "{task_id}")'

    if not raw.get("start"):
        raise TaskValidationError(f"{label} doesn't have a start date", task_id)
    try:
        start, end, duration = _derive_span(raw, label, task_id)
    except (TaskValidationError, InstantParseError):
        raise
    except (ValueError, OverflowError) as e:
        # Dates the calendar cannot represent (year past 9999 and the like)
        raise TaskValidationError(f"{label} has dates out of range: {e}", task_id) from e

    progress = raw.get("progress")
    if isinstance(progress, bool) or not isinstance(progress, (int, float)):
        progress = 0

    return TaskSpan(
        id=task_id,
        name="" if name is None else str(name),
        start=start,
        end=end,
        duration=duration,
        dependencies=_parse_dependencies(raw.get("dependencies")),
        progress=progress,
        index=index,
        original={k: raw.get(k) for k in ("start", "end", "duration")},
    )


def load_tasks(records: Iterable[Mapping[str, Any]]) -> TaskLoadResult:
    """Parse every record; a bad record is logged and skipped, never fatal."""
    tasks: List[TaskSpan] = []
    errors: List[str] = []
    for i, raw in enumerate(records):
        try:
            tasks.append(parse_task(raw, index=len(tasks)))
        except (TaskValidationError, InstantParseError) as e:
            logger.error("skipping record #%d: %s", i, e)
            errors.append(f"record #{i}: {e}")
    return TaskLoadResult(tasks=tuple(tasks), errors=tuple(errors))


__all__ = [
    "MAX_SPAN_YEARS",
    "TaskLoadResult",
    "TaskSpan",
    "TaskValidationError",
    "load_tasks",
    "parse_task",
]
