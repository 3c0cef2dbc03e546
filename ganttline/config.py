# ganttline/config.py
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

from .duration import Duration, parse_duration
from .formatting import DEFAULT_LANG
from .ignore import IgnorePredicate, build_ignore_predicate
from .scheduler import SNAP_TO_STEP
from .view_modes import ViewMode, get_view_mode
from .viewport import ScaleConfig

logger = logging.getLogger(__name__)

GanttConfig = Dict[str, Any]

ENV_LANGUAGE = "GANTTLINE_LANGUAGE"
ENV_LOG_LEVEL = "GANTTLINE_LOG_LEVEL"

DEFAULT_CONFIG: Mapping[str, Any] = {
    "view_mode": "Day",
    "column_width": None,      # None -> the view mode's width
    "snap_at": None,           # None -> the view mode's snap, else one step
    "move_dependencies": True,
    "ignore": [],
    "language": DEFAULT_LANG,
    "date_format": None,       # None -> the view mode's format
}


def load_config(overrides: Optional[Mapping[str, Any]] = None) -> GanttConfig:
    """Defaults, then environment, then `overrides`. Unknown keys are kept."""
    cfg: GanttConfig = dict(DEFAULT_CONFIG)
    lang = os.getenv(ENV_LANGUAGE)
    if lang:
        cfg["language"] = lang
    if overrides:
        cfg.update(overrides)
    return cfg


def resolve_view_mode(cfg: Mapping[str, Any]) -> ViewMode:
    return get_view_mode(cfg.get("view_mode") or DEFAULT_CONFIG["view_mode"])


def resolve_step(cfg: Mapping[str, Any]) -> ScaleConfig:
    """Validated scale for `cfg`; invalid width/step fall back to defaults."""
    mode = resolve_view_mode(cfg)
    width = cfg.get("column_width")
    return ScaleConfig.checked(
        column_width=mode.column_width if width is None else width,
        step_interval=mode.step_interval,
        step_unit=mode.step_unit,
    )


def resolve_snap_at(cfg: Mapping[str, Any]) -> Duration:
    """Snap increment: cfg["snap_at"], else the view mode's, else one step."""
    mode = resolve_view_mode(cfg)
    raw = cfg.get("snap_at") or mode.snap_at or SNAP_TO_STEP
    if raw == SNAP_TO_STEP:
        return mode.step_duration
    return parse_duration(raw)


def resolve_ignore(cfg: Mapping[str, Any]) -> IgnorePredicate:
    return build_ignore_predicate(cfg.get("ignore"))


def resolve_language(cfg: Mapping[str, Any]) -> str:
    return str(cfg.get("language") or DEFAULT_LANG)


def resolve_cascade(cfg: Mapping[str, Any]) -> bool:
    """Whether dragging a task also moves its dependents."""
    value = cfg.get("move_dependencies")
    return True if value is None else bool(value)


def resolve_date_format(cfg: Mapping[str, Any]) -> str:
    return str(cfg.get("date_format") or resolve_view_mode(cfg).date_format)


def log_level_from_env(default: str = "WARNING") -> int:
    name = (os.getenv(ENV_LOG_LEVEL) or default).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        logger.warning("unknown log level %r in %s, using %s", name, ENV_LOG_LEVEL, default)
        level = logging.getLevelName(default)
    return level


__all__ = [
    "DEFAULT_CONFIG",
    "ENV_LANGUAGE",
    "ENV_LOG_LEVEL",
    "GanttConfig",
    "load_config",
    "log_level_from_env",
    "resolve_cascade",
    "resolve_date_format",
    "resolve_ignore",
    "resolve_language",
    "resolve_snap_at",
    "resolve_step",
    "resolve_view_mode",
]
