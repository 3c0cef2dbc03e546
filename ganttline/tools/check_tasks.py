#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ganttline.api import load_tasks_from_json
from ganttline.config import load_config, log_level_from_env, resolve_cascade, resolve_ignore
from ganttline.ignore import working_duration
from ganttline.scheduler import affected_task_ids
from ganttline.util.console import die, eprint, setup_logging

TOOL = "check-tasks"

RC_OK = 0
RC_USAGE = 2
RC_INVALID = 3


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Load a JSON task file and report records that cannot be placed.")
    ap.add_argument("path", help="JSON file: list of task records, or {\"tasks\": [...]}")
    ap.add_argument("--ignore", action="append", default=None,
                    help="Non-working days: 'weekend' or a date; repeatable")
    ap.add_argument("--quiet", action="store_true", help="Only report failures")
    ap.add_argument("--no-cascade", action="store_true", help="Count only the task itself as moving when dragged")
    args = ap.parse_args(argv)

    setup_logging(log_level_from_env())

    p = Path(args.path)
    if not p.exists():
        return die(TOOL, f"file not found: {p}", RC_USAGE)
    try:
        result = load_tasks_from_json(p)
        cfg = load_config({"ignore": args.ignore or [], "move_dependencies": not args.no_cascade})
        pred = resolve_ignore(cfg)
    except (ValueError, OSError) as e:
        return die(TOOL, str(e), RC_USAGE)

    if not args.quiet:
        known = {t.id for t in result.tasks}
        graph = result.dependency_graph()
        cascade = resolve_cascade(cfg)
        for t in result.tasks:
            working, ignored = working_duration(t.start, t.end, pred)
            missing = [d for d in t.dependencies if d not in known]
            moved = len(affected_task_ids(t.id, graph, cascade=cascade)) - 1
            line = (
                f"{t.id}: {t.start.isoformat()} -> {t.end.isoformat()} "
                f"({working} working, {ignored} ignored days; moves {moved} more)"
            )
            if missing:
                line += f" [unknown dependencies: {', '.join(missing)}]"
            print(line)

    for err in result.errors:
        eprint(f"[ganttline-{TOOL}] SKIPPED {err}")

    print(f"{len(result.tasks)} loaded, {len(result.errors)} skipped")
    return RC_INVALID if result.errors else RC_OK


if __name__ == "__main__":
    sys.exit(main())
