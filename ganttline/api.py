"""ganttline.api

Stable *library* entrypoint for ganttline.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Mapping, Union

from ganttline.calendar_math import (
    add,
    add_duration,
    convert_to_unit,
    days_in_month,
    days_in_year,
    diff,
    duration_to_ms,
    floor,
    subtract,
)
from ganttline.config import (
    GanttConfig,
    load_config,
    resolve_cascade,
    resolve_date_format,
    resolve_snap_at,
    resolve_step,
)
from ganttline.duration import Duration, DurationPart, parse_duration
from ganttline.formatting import format_datetime, format_duration, format_instant, month_name
from ganttline.ignore import build_ignore_predicate, working_duration
from ganttline.instant import (
    CalendarDateTime,
    Instant,
    InstantParseError,
    now,
    parse_instant,
    to_calendar,
    to_instant,
    today,
)
from ganttline.scheduler import (
    DragTracker,
    affected_task_ids,
    apply_drag,
    dependents_map,
    snap_pixel_delta,
)
from ganttline.tasks import TaskLoadResult, TaskSpan, TaskValidationError, load_tasks, parse_task
from ganttline.view_modes import (
    DEFAULT_VIEW_MODES,
    ViewMode,
    get_view_mode,
    grid_dates,
    grid_range,
    header_labels,
)
from ganttline.viewport import ScaleConfig, Viewport

JsonPath = Union[str, Path]

# Template formatter under its short name.
format = format_instant


def _records_from_obj(obj: Any) -> List[Mapping[str, Any]]:
    if isinstance(obj, dict):
        obj = obj.get("tasks")
    if not isinstance(obj, list):
        raise ValueError("task file must be a JSON list or an object with a 'tasks' list")
    return obj


def load_tasks_from_json(path: JsonPath) -> TaskLoadResult:
    """Read a JSON task file (list of records, or {"tasks": [...]}) and load it."""
    p = Path(path)
    obj = json.loads(p.read_text(encoding="utf-8"))
    return load_tasks(_records_from_obj(obj))


# --- Public API exports ---------------------------------------------------
_PUBLIC_EXPORTS = (
    "CalendarDateTime",
    "DEFAULT_VIEW_MODES",
    "DragTracker",
    "Duration",
    "DurationPart",
    "GanttConfig",
    "Instant",
    "InstantParseError",
    "ScaleConfig",
    "TaskLoadResult",
    "TaskSpan",
    "TaskValidationError",
    "ViewMode",
    "Viewport",
    "add",
    "add_duration",
    "affected_task_ids",
    "apply_drag",
    "build_ignore_predicate",
    "convert_to_unit",
    "days_in_month",
    "days_in_year",
    "dependents_map",
    "diff",
    "duration_to_ms",
    "floor",
    "format",
    "format_datetime",
    "format_duration",
    "format_instant",
    "get_view_mode",
    "grid_dates",
    "grid_range",
    "header_labels",
    "load_config",
    "load_tasks",
    "load_tasks_from_json",
    "month_name",
    "now",
    "parse_duration",
    "parse_instant",
    "parse_task",
    "resolve_cascade",
    "resolve_date_format",
    "resolve_snap_at",
    "resolve_step",
    "snap_pixel_delta",
    "subtract",
    "to_calendar",
    "to_instant",
    "today",
    "working_duration",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
