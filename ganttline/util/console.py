# ganttline/util/console.py
from __future__ import annotations

import logging
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def die(tool: str, msg: str, rc: int = 2) -> int:
    eprint(f"[ganttline-{tool}] ERROR: {msg}")
    return rc


def setup_logging(level: int) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
