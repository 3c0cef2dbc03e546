from __future__ import annotations

import contextlib
import io
import unittest

from ganttline.cli import main


def _run(*argv: str):
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        rc = main(list(argv))
    return rc, out.getvalue().strip(), err.getvalue()


class TestCliContract(unittest.TestCase):
    def test_add(self) -> None:
        self.assertEqual(_run("add", "2024-01-31", "1", "month"), (0, "2024-03-02T00:00:00.000Z", ""))
        rc, out, _ = _run("add", "2024-01-01", "-1.5", "hour")
        self.assertEqual((rc, out), (0, "2023-12-31T22:30:00.000Z"))

    def test_diff(self) -> None:
        self.assertEqual(_run("diff", "2024-03-01", "2024-02-01")[:2], (0, "29"))
        self.assertEqual(_run("diff", "2024-04-16", "2024-04-01", "--unit", "month")[:2], (0, "0.5"))

    def test_floor_and_format(self) -> None:
        self.assertEqual(_run("floor", "2024-07-10T14:35:00Z", "week")[:2], (0, "2024-07-08T00:00:00.000Z"))
        self.assertEqual(_run("format", "2024-07-10", "--template", "D MMMM YYYY")[:2], (0, "10 July 2024"))

    def test_duration(self) -> None:
        self.assertEqual(_run("duration", "0")[:2], (0, "0 milliseconds"))
        self.assertEqual(_run("duration", "90000000", "--short")[:2], (0, "1d 1h"))
        self.assertEqual(_run("duration", "1y 2mo")[:2], (0, "1 year, 2 months"))

    def test_snap(self) -> None:
        self.assertEqual(_run("snap", "22")[:2], (0, "0"))
        self.assertEqual(_run("snap", "23")[:2], (0, "45"))
        self.assertEqual(_run("snap", "30", "--step", "1d", "--snap-at", "6h")[:2], (0, "33.75"))

    def test_bad_instant_is_reported(self) -> None:
        rc, out, err = _run("add", "nope", "1", "day")
        self.assertEqual(rc, 2)
        self.assertEqual(out, "")
        self.assertIn("[ganttline-cli] ERROR:", err)


if __name__ == "__main__":
    unittest.main(verbosity=2)
