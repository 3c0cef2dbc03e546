from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]

TASKS = [
    {"id": "A", "name": "Design", "start": "2024-01-08", "end": "2024-01-12"},
    {"id": "B", "name": "Build", "start": "2024-01-15", "duration": "1w", "dependencies": "A"},
]


def _run(*args: str, env=None):
    cmd = [sys.executable, "-m", *args]
    full_env = dict(os.environ, **(env or {}))
    p = subprocess.run(cmd, cwd=str(REPO_ROOT), capture_output=True, text=True, env=full_env)
    return p, (p.stdout or "") + "\n" + (p.stderr or "")


class TestGridDumpToolContract:
    def test_range_to_json_file(self, tmp_path: Path):
        out = tmp_path / "grid.json"
        p, combined = _run(
            "ganttline.tools.grid_dump",
            "--start", "2024-01-01", "--end", "2024-01-03", "--view-mode", "Day", "--out", str(out),
        )
        assert p.returncode == 0, combined

        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["view_mode"] == "Day"
        cols = data["columns"]
        assert [c["x"] for c in cols] == [0, 45, 90]
        assert cols[0]["instant"] == "2024-01-01T00:00:00.000Z"
        assert cols[0]["date"] == "2024-01-01"
        assert (cols[0]["upper"], cols[0]["lower"]) == ("January", "1")
        assert cols[1]["upper"] == ""
        assert cols[0]["thick"] is True  # 2024-01-01 is a Monday

    def test_range_from_task_file(self, tmp_path: Path):
        tasks = tmp_path / "tasks.json"
        tasks.write_text(json.dumps({"tasks": TASKS}), encoding="utf-8")
        p, combined = _run("ganttline.tools.grid_dump", "--tasks", str(tasks), "--view-mode", "Week")
        assert p.returncode == 0, combined

        data = json.loads(p.stdout)
        # floor(2024-01-08, day) - 1 month
        assert data["start"] == "2023-12-08T00:00:00.000Z"
        assert data["columns"][0]["x"] == 0
        assert data["columns"][1]["x"] == 140

    def test_lang_flag_beats_environment(self):
        p, combined = _run(
            "ganttline.tools.grid_dump",
            "--start", "2024-07-01", "--end", "2024-07-01", "--view-mode", "Month", "--lang", "de",
            env={"GANTTLINE_LANGUAGE": "fr"},
        )
        assert p.returncode == 0, combined
        cols = json.loads(p.stdout)["columns"]
        assert cols[0]["lower"] == "Juli"
        assert cols[0]["date"] == "2024-07"

    def test_environment_language_is_the_default(self):
        p, combined = _run(
            "ganttline.tools.grid_dump",
            "--start", "2024-07-01", "--end", "2024-07-01", "--view-mode", "Month",
            env={"GANTTLINE_LANGUAGE": "fr"},
        )
        assert p.returncode == 0, combined
        assert json.loads(p.stdout)["columns"][0]["lower"] == "Juillet"

    def test_missing_range_is_an_error(self):
        p, combined = _run("ganttline.tools.grid_dump", "--view-mode", "Day")
        assert p.returncode == 2, combined
        assert "[ganttline-grid-dump] ERROR:" in p.stderr


class TestCheckTasksToolContract:
    def test_valid_file(self, tmp_path: Path):
        f = tmp_path / "tasks.json"
        f.write_text(json.dumps(TASKS), encoding="utf-8")
        p, combined = _run("ganttline.tools.check_tasks", str(f), "--ignore", "weekend")
        assert p.returncode == 0, combined
        assert "A: 2024-01-08T00:00:00.000Z -> 2024-01-13T00:00:00.000Z (5 working, 0 ignored days; moves 1 more)" in p.stdout
        assert "B: 2024-01-15T00:00:00.000Z -> 2024-01-23T00:00:00.000Z" in p.stdout
        assert "2 loaded, 0 skipped" in p.stdout

    def test_no_cascade_moves_only_the_task(self, tmp_path: Path):
        f = tmp_path / "tasks.json"
        f.write_text(json.dumps(TASKS), encoding="utf-8")
        p, combined = _run("ganttline.tools.check_tasks", str(f), "--no-cascade")
        assert p.returncode == 0, combined
        assert "A: 2024-01-08T00:00:00.000Z -> 2024-01-13T00:00:00.000Z (5 working, 0 ignored days; moves 0 more)" in p.stdout

    def test_bad_records_exit_3(self, tmp_path: Path):
        f = tmp_path / "tasks.json"
        f.write_text(json.dumps(TASKS + [{"id": "C", "name": "Open", "start": "2024-02-01"}]), encoding="utf-8")
        p, combined = _run("ganttline.tools.check_tasks", str(f), "--quiet")
        assert p.returncode == 3, combined
        assert "SKIPPED record #2" in p.stderr
        assert "2 loaded, 1 skipped" in p.stdout

    def test_out_of_range_record_is_skipped(self, tmp_path: Path):
        f = tmp_path / "tasks.json"
        huge = {"id": "Z", "name": "Forever", "start": "2024-01-01", "duration": "10000y"}
        f.write_text(json.dumps([huge] + TASKS), encoding="utf-8")
        p, combined = _run("ganttline.tools.check_tasks", str(f), "--quiet")
        assert p.returncode == 3, combined
        assert "SKIPPED record #0" in p.stderr
        assert "out of range" in p.stderr
        assert "2 loaded, 1 skipped" in p.stdout

    def test_missing_file(self, tmp_path: Path):
        p, combined = _run("ganttline.tools.check_tasks", str(tmp_path / "nope.json"))
        assert p.returncode == 2, combined
        assert "file not found" in p.stderr
