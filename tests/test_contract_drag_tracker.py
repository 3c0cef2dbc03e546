from __future__ import annotations

import unittest

from ganttline.instant import parse_instant
from ganttline.scheduler import (
    DRAGGING,
    IDLE,
    MOVE,
    PENDING,
    RESIZE_LEFT,
    RESIZE_RIGHT,
    DragTracker,
    apply_drag,
    snap_pixel_delta,
)
from ganttline.viewport import Viewport

P = parse_instant


def _day_snap(dx: float) -> float:
    return snap_pixel_delta(dx, "1d")


class TestDragTrackerContract(unittest.TestCase):
    def test_threshold_separates_click_from_drag(self) -> None:
        t = DragTracker(_day_snap)
        self.assertEqual(t.state, IDLE)
        t.press(100)
        self.assertEqual(t.state, PENDING)
        self.assertIsNone(t.move(105))
        self.assertIsNone(t.move(110))
        self.assertEqual(t.state, PENDING)
        self.assertEqual(t.move(123), 45)
        self.assertEqual(t.state, DRAGGING)

    def test_drag_reports_snapped_deltas_and_commits_on_release(self) -> None:
        t = DragTracker(_day_snap)
        t.press(100)
        t.move(130)
        # Back inside the threshold, still a drag.
        self.assertEqual(t.move(110), 0)
        self.assertEqual(t.state, DRAGGING)
        self.assertEqual(t.release(150), 45)
        self.assertEqual(t.state, IDLE)

    def test_click_releases_without_delta(self) -> None:
        t = DragTracker(_day_snap)
        t.press(100)
        self.assertIsNone(t.release(104))
        self.assertEqual(t.state, IDLE)

    def test_release_far_away_without_moves_is_a_drag(self) -> None:
        t = DragTracker(_day_snap)
        t.press(0)
        self.assertEqual(t.release(-30), -45)

    def test_cancel_and_idle_moves(self) -> None:
        t = DragTracker(_day_snap)
        self.assertIsNone(t.move(500))
        t.press(0)
        t.move(100)
        t.cancel()
        self.assertEqual(t.state, IDLE)
        self.assertIsNone(t.release(100))

    def test_custom_threshold_and_kind(self) -> None:
        t = DragTracker(_day_snap, threshold_px=2)
        t.press(0, kind=RESIZE_RIGHT)
        self.assertEqual(t.kind, RESIZE_RIGHT)
        self.assertEqual(t.move(3), 0)
        with self.assertRaises(ValueError):
            t.press(0, kind="rotate")

    def test_for_viewport_uses_the_viewport_grid(self) -> None:
        vp = Viewport(origin="2024-01-01", column_width=120, step_interval=1, step_unit="month")
        t = DragTracker.for_viewport(vp, snap_at="7d")
        t.press(0)
        self.assertAlmostEqual(t.release(30), 7 / 31 * 120)


class TestApplyDragContract(unittest.TestCase):
    def setUp(self) -> None:
        self.vp = Viewport(origin="2024-01-01", column_width=45)

    def test_move_shifts_both_ends(self) -> None:
        self.assertEqual(
            apply_drag("2024-01-02", "2024-01-04", 45, self.vp, MOVE),
            (P("2024-01-03"), P("2024-01-05")),
        )

    def test_resize_edges(self) -> None:
        self.assertEqual(
            apply_drag("2024-01-02", "2024-01-04", -45, self.vp, RESIZE_LEFT),
            (P("2024-01-01"), P("2024-01-04")),
        )
        self.assertEqual(
            apply_drag("2024-01-02", "2024-01-04", 90, self.vp, RESIZE_RIGHT),
            (P("2024-01-02"), P("2024-01-06")),
        )

    def test_resize_never_inverts_the_bar(self) -> None:
        start, end = apply_drag("2024-01-02", "2024-01-04", -200, self.vp, RESIZE_RIGHT)
        self.assertEqual(start, end)
        start, end = apply_drag("2024-01-02", "2024-01-04", 200, self.vp, RESIZE_LEFT)
        self.assertEqual(start, end)


if __name__ == "__main__":
    unittest.main(verbosity=2)
