#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ganttline.api import load_tasks_from_json
from ganttline.config import (
    load_config,
    log_level_from_env,
    resolve_date_format,
    resolve_language,
    resolve_step,
)
from ganttline.formatting import format_instant
from ganttline.instant import InstantParseError, parse_instant
from ganttline.util.console import die, setup_logging
from ganttline.view_modes import get_view_mode, grid_dates, grid_range, header_labels
from ganttline.viewport import Viewport

try:
    import orjson  # type: ignore
except Exception:  # pragma: no cover
    orjson = None  # type: ignore

TOOL = "grid-dump"

logger = logging.getLogger(__name__)


def _dumps(obj: Any) -> str:
    if orjson is not None:
        return orjson.dumps(obj, option=orjson.OPT_INDENT_2).decode("utf-8")
    return json.dumps(obj, ensure_ascii=False, indent=2)


def build_columns(
    start: Any,
    end: Any,
    view_mode: str,
    lang: str = "en",
    column_width: Optional[float] = None,
    date_format: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """One entry per grid column: x offset, instant, formatted date and header labels."""
    cfg = load_config({"view_mode": view_mode, "column_width": column_width, "date_format": date_format})
    mode = get_view_mode(view_mode)
    scale = resolve_step(cfg)
    fmt = resolve_date_format(cfg)
    s = parse_instant(start)
    vp = Viewport(s, scale.column_width, scale.step_interval, scale.step_unit)

    cols: List[Dict[str, Any]] = []
    prev = None
    for d in grid_dates(s, end, mode.step):
        upper, lower = header_labels(d, prev, mode, lang)
        cols.append(
            {
                "x": round(vp.date_to_x(d), 3),
                "instant": d.isoformat(),
                "date": format_instant(d, fmt, lang),
                "upper": upper,
                "lower": lower,
                "thick": bool(mode.thick_line(d)) if mode.thick_line else False,
            }
        )
        prev = d
    return cols


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Dump the grid columns of a timeline as JSON.")
    ap.add_argument("--start", default=None, help="Range start (any instant form)")
    ap.add_argument("--end", default=None, help="Range end (any instant form)")
    ap.add_argument("--tasks", default=None, help="JSON task file; range derived from its tasks plus padding")
    ap.add_argument("--view-mode", default="Day", help="View mode name (default: Day)")
    ap.add_argument("--lang", default=None, help="Locale for labels (default: env GANTTLINE_LANGUAGE or en)")
    ap.add_argument("--column-width", type=float, default=None, help="Override the view mode column width")
    ap.add_argument("--date-format", default=None, help="Template for each column's date (default: the view mode's)")
    ap.add_argument("--out", default=None, help="Write JSON here instead of stdout")
    args = ap.parse_args(argv)

    setup_logging(log_level_from_env())

    try:
        mode = get_view_mode(args.view_mode)
        if args.tasks:
            loaded = load_tasks_from_json(Path(args.tasks))
            start, end = grid_range(
                [t.start for t in loaded.tasks], [t.end for t in loaded.tasks], mode
            )
        elif args.start and args.end:
            start, end = parse_instant(args.start), parse_instant(args.end)
        else:
            return die(TOOL, "either --tasks or both --start and --end are required")

        lang = args.lang or resolve_language(load_config())
        cols = build_columns(start, end, mode.name, lang, args.column_width, args.date_format)
    except (InstantParseError, ValueError, OSError) as e:
        return die(TOOL, str(e))

    text = _dumps({"view_mode": mode.name, "start": start.isoformat(), "end": end.isoformat(), "columns": cols})
    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
        logger.info("wrote %d columns to %s", len(cols), out)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
