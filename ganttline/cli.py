from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Union

from .calendar_math import add, diff, floor
from .config import log_level_from_env
from .duration import Duration, parse_duration
from .formatting import DEFAULT_LANG, DEFAULT_TEMPLATE, format_duration, format_instant
from .instant import InstantParseError, parse_instant
from .scheduler import snap_pixel_delta
from .units import DAY
from .util.console import die, setup_logging

TOOL = "cli"


def _number(s: str) -> Union[int, float]:
    v = float(s)
    return int(v) if v.is_integer() else v


def _fmt_num(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else str(v)


def _duration_arg(s: str) -> Union[int, Duration]:
    try:
        return int(s)
    except ValueError:
        return parse_duration(s)


def _cmd_add(args: argparse.Namespace) -> str:
    return add(args.instant, args.qty, args.unit).isoformat()


def _cmd_diff(args: argparse.Namespace) -> str:
    return _fmt_num(diff(args.a, args.b, args.unit))


def _cmd_floor(args: argparse.Namespace) -> str:
    return floor(args.instant, args.unit).isoformat()


def _cmd_format(args: argparse.Namespace) -> str:
    return format_instant(args.instant, args.template, args.lang)


def _cmd_duration(args: argparse.Namespace) -> str:
    return format_duration(
        _duration_arg(args.value),
        show_milliseconds=not args.no_ms,
        max_units=args.max_units,
        short_form=args.short,
        relative_to=parse_instant(args.relative_to) if args.relative_to else None,
    )


def _cmd_snap(args: argparse.Namespace) -> str:
    return _fmt_num(snap_pixel_delta(args.dx, args.step, args.snap_at, args.column_width))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="ganttline", description="Timeline date arithmetic and formatting.")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="Add QTY UNIT to an instant")
    p.add_argument("instant")
    p.add_argument("qty", type=_number)
    p.add_argument("unit")
    p.set_defaults(func=_cmd_add)

    p = sub.add_parser("diff", help="Signed A - B in a unit (2 decimals)")
    p.add_argument("a")
    p.add_argument("b")
    p.add_argument("--unit", default=DAY, help="Unit for the result (default: day)")
    p.set_defaults(func=_cmd_diff)

    p = sub.add_parser("floor", help="Start of the unit containing an instant")
    p.add_argument("instant")
    p.add_argument("unit")
    p.set_defaults(func=_cmd_floor)

    p = sub.add_parser("format", help="Render an instant with a token template")
    p.add_argument("instant")
    p.add_argument("--template", default=DEFAULT_TEMPLATE, help=f"Token template (default: {DEFAULT_TEMPLATE})")
    p.add_argument("--lang", default=DEFAULT_LANG, help="Locale for month names (default: en)")
    p.set_defaults(func=_cmd_format)

    p = sub.add_parser("duration", help="Human-readable duration (milliseconds or e.g. '1y 2mo')")
    p.add_argument("value")
    p.add_argument("--short", action="store_true", help="Compact form, e.g. '1d 2h'")
    p.add_argument("--no-ms", action="store_true", help="Hide milliseconds")
    p.add_argument("--max-units", type=int, default=None, help="Show at most N units")
    p.add_argument("--relative-to", default=None, help="Anchor instant for calendar units")
    p.set_defaults(func=_cmd_duration)

    p = sub.add_parser("snap", help="Snap a pixel drag offset to the grid")
    p.add_argument("dx", type=float)
    p.add_argument("--step", default="1d", help="Column step (default: 1d)")
    p.add_argument("--snap-at", default=None, help="Snap increment (default: one step)")
    p.add_argument("--column-width", type=float, default=45, help="Pixels per column (default: 45)")
    p.set_defaults(func=_cmd_snap)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging(log_level_from_env())
    args = build_parser().parse_args(argv)
    try:
        out = args.func(args)
    except (InstantParseError, ValueError, TypeError) as e:
        return die(TOOL, str(e))
    print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
