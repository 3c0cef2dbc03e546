from __future__ import annotations

import logging
import os
import unittest
from unittest import mock

from ganttline.config import (
    DEFAULT_CONFIG,
    ENV_LANGUAGE,
    ENV_LOG_LEVEL,
    load_config,
    log_level_from_env,
    resolve_cascade,
    resolve_date_format,
    resolve_ignore,
    resolve_language,
    resolve_snap_at,
    resolve_step,
)
from ganttline.duration import Duration, parse_duration
from ganttline.instant import parse_instant


class TestConfigContract(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            cfg = load_config()
        self.assertEqual(cfg, dict(DEFAULT_CONFIG))
        scale = resolve_step(cfg)
        self.assertEqual((scale.column_width, scale.step_interval, scale.step_unit), (45, 1, "day"))

    def test_view_mode_drives_the_scale(self) -> None:
        scale = resolve_step({"view_mode": "Week"})
        self.assertEqual((scale.column_width, scale.step_interval, scale.step_unit), (140, 7, "day"))
        scale = resolve_step({"view_mode": "Month", "column_width": 200})
        self.assertEqual((scale.column_width, scale.step_unit), (200, "month"))

    def test_bad_width_falls_back(self) -> None:
        with self.assertLogs("ganttline.viewport", level="WARNING"):
            scale = resolve_step({"column_width": -1})
        self.assertEqual(scale.column_width, 45)

    def test_snap_resolution_chain(self) -> None:
        self.assertEqual(resolve_snap_at({"view_mode": "Month"}), parse_duration("7d"))
        self.assertEqual(resolve_snap_at({"view_mode": "Day"}), Duration.of(1, "day"))
        self.assertEqual(resolve_snap_at({"view_mode": "Month", "snap_at": "1h"}), parse_duration("1h"))
        self.assertEqual(resolve_snap_at({"view_mode": "Hour", "snap_at": "unit"}), parse_duration("1h"))

    def test_overrides_and_environment(self) -> None:
        with mock.patch.dict(os.environ, {ENV_LANGUAGE: "de"}):
            cfg = load_config({"view_mode": "Year", "extra": 1})
        self.assertEqual(cfg["view_mode"], "Year")
        self.assertEqual(cfg["extra"], 1)
        self.assertEqual(resolve_language(cfg), "de")

    def test_explicit_override_beats_environment(self) -> None:
        with mock.patch.dict(os.environ, {ENV_LANGUAGE: "fr"}):
            self.assertEqual(resolve_language(load_config({"language": "de"})), "de")
            self.assertEqual(resolve_language(load_config()), "fr")

    def test_cascade_and_date_format(self) -> None:
        self.assertTrue(resolve_cascade(dict(DEFAULT_CONFIG)))
        self.assertTrue(resolve_cascade({}))
        self.assertFalse(resolve_cascade({"move_dependencies": False}))
        self.assertEqual(resolve_date_format({"view_mode": "Month"}), "YYYY-MM")
        self.assertEqual(resolve_date_format(dict(DEFAULT_CONFIG)), "YYYY-MM-DD")
        self.assertEqual(resolve_date_format({"date_format": "DD/MM"}), "DD/MM")

    def test_ignore_option(self) -> None:
        pred = resolve_ignore({"ignore": "weekend"})
        self.assertTrue(pred(parse_instant("2024-07-13")))

    def test_log_level(self) -> None:
        with mock.patch.dict(os.environ, {ENV_LOG_LEVEL: "debug"}):
            self.assertEqual(log_level_from_env(), logging.DEBUG)
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(log_level_from_env(), logging.WARNING)
        with mock.patch.dict(os.environ, {ENV_LOG_LEVEL: "chatty"}):
            with self.assertLogs("ganttline.config", level="WARNING"):
                self.assertEqual(log_level_from_env(), logging.WARNING)


if __name__ == "__main__":
    unittest.main(verbosity=2)
