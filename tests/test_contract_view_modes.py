from __future__ import annotations

import unittest

from ganttline.instant import parse_instant
from ganttline.view_modes import (
    DEFAULT_VIEW_MODES,
    get_view_mode,
    grid_dates,
    grid_range,
    header_labels,
    view_mode_names,
)

P = parse_instant


class TestViewModePresetsContract(unittest.TestCase):
    def test_names_and_order(self) -> None:
        self.assertEqual(view_mode_names(), ["Hour", "Quarter Day", "Half Day", "Day", "Week", "Month", "Year"])
        self.assertEqual(len(DEFAULT_VIEW_MODES), 7)

    def test_widths_and_snaps(self) -> None:
        self.assertEqual(get_view_mode("Week").column_width, 140)
        self.assertEqual(get_view_mode("month").column_width, 120)
        self.assertEqual(get_view_mode("Month").snap_at, "7d")
        self.assertEqual(get_view_mode("Year").snap_at, "30d")
        self.assertEqual(get_view_mode("Day").column_width, 45)
        self.assertIsNone(get_view_mode("Hour").snap_at)

    def test_step_parts(self) -> None:
        m = get_view_mode("Quarter Day")
        self.assertEqual((m.step_interval, m.step_unit), (6, "hour"))
        m = get_view_mode("Month")
        self.assertEqual((m.step_interval, m.step_unit), (1, "month"))

    def test_unknown_mode(self) -> None:
        with self.assertRaises(ValueError):
            get_view_mode("Decade")
        m = get_view_mode("Day")
        self.assertIs(get_view_mode(m), m)


class TestGridContract(unittest.TestCase):
    def test_grid_dates_inclusive(self) -> None:
        self.assertEqual(
            grid_dates("2024-01-01", "2024-01-03", "1d"),
            [P("2024-01-01"), P("2024-01-02"), P("2024-01-03")],
        )

    def test_month_columns_step_on_the_calendar(self) -> None:
        self.assertEqual(
            grid_dates("2024-01-01", "2024-04-15", "1mo"),
            [P("2024-01-01"), P("2024-02-01"), P("2024-03-01"), P("2024-04-01")],
        )

    def test_zero_step_rejected(self) -> None:
        with self.assertRaises(ValueError):
            grid_dates("2024-01-01", "2024-01-03", "0d")

    def test_grid_range_floors_and_pads(self) -> None:
        self.assertEqual(
            grid_range([P("2024-01-10 15:00")], [P("2024-01-20")], "Day"),
            (P("2024-01-03"), P("2024-01-27")),
        )
        self.assertEqual(
            grid_range(["2024-03-15"], ["2024-04-10"], "Month"),
            (P("2024-01-01"), P("2024-06-10")),
        )

    def test_grid_range_without_tasks_uses_now(self) -> None:
        start, end = grid_range([], [], "Day", now="2024-05-05 10:00")
        self.assertEqual((start, end), (P("2024-04-28"), P("2024-05-12 10:00")))


class TestHeaderLabelsContract(unittest.TestCase):
    def test_day_mode(self) -> None:
        self.assertEqual(header_labels("2024-07-01", None, "Day"), ("July", "1"))
        self.assertEqual(header_labels("2024-07-02", "2024-07-01", "Day"), ("", "2"))
        self.assertEqual(header_labels("2024-08-01", "2024-07-31", "Day"), ("August", "1"))

    def test_week_mode(self) -> None:
        self.assertEqual(header_labels("2024-07-29", "2024-07-22", "Week"), ("", "29 - 4 Aug"))
        self.assertEqual(header_labels("2024-07-01", None, "Week"), ("July", "1 Jul - 7"))

    def test_hour_and_year_modes(self) -> None:
        self.assertEqual(header_labels("2024-07-01 13:00", "2024-07-01 12:00", "Hour"), ("", "13"))
        self.assertEqual(header_labels("2024-07-01", "2024-06-30 23:00", "Hour"), ("1 July", "00"))
        self.assertEqual(header_labels("2024-01-01", None, "Year"), ("2020", "2024"))
        self.assertEqual(header_labels("2025-01-01", "2024-01-01", "Year"), ("", "2025"))

    def test_localized(self) -> None:
        self.assertEqual(header_labels("2024-07-01", None, "Month", "de"), ("2024", "Juli"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
