"""ganttline.tools package

Command-line utilities run with `python -m ganttline.tools.<name>`.

Keep this package's __init__ free of eager imports so module execution has no
import-time side effects.
"""

__all__: list[str] = []
