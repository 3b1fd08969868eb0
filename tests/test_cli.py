from __future__ import annotations

from pathlib import Path

import pytest

from mission_control.cli import main
from mission_control.common.config import data_path
from mission_control.common.store import ACTIVITIES_FILE, TASKS_FILE, JsonArrayStore


def _run(config_file: Path, *args: str) -> int:
    return main(["--config", str(config_file), *args])


def test_log_and_stats(config_file: Path, cfg: dict, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(config_file, "log", "--type", "deploy", "--title", "Deploy v2", "--project", "factursimple",
                "--metadata", '{"sha": "abc"}') == 0
    stored = JsonArrayStore(data_path(cfg, ACTIVITIES_FILE)).load()
    assert stored[0]["title"] == "Deploy v2"
    assert stored[0]["metadata"] == {"sha": "abc"}

    capsys.readouterr()
    assert _run(config_file, "stats") == 0
    out = capsys.readouterr().out
    assert "1 total, 1 today, 1 this week" in out
    assert "factursimple" in out


def test_sync_list_and_remove_task(config_file: Path, cfg: dict, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(config_file, "sync-task", "--cron-id", "standup", "--name", "Standup",
                "--every-minutes", "1440", "--next-run", "2026-02-02T09:00") == 0
    assert _run(config_file, "sync-task", "--cron-id", "cleanup", "--name", "Cleanup",
                "--expr", "0 3 * * *", "--disabled") == 0

    tasks = JsonArrayStore(data_path(cfg, TASKS_FILE)).load()
    assert [t["cronId"] for t in tasks] == ["standup", "cleanup"]
    assert tasks[0]["schedule"] == {"kind": "every", "everyMs": 86_400_000}
    assert tasks[1]["enabled"] is False

    capsys.readouterr()
    assert _run(config_file, "tasks", "--week", "2026-02-04") == 0
    out = capsys.readouterr().out
    assert "Week of 2026-02-02" in out
    assert out.count("09:00") == 7

    assert _run(config_file, "remove-task", "--cron-id", "standup") == 0
    assert "Removed task standup" in capsys.readouterr().out
    assert _run(config_file, "remove-task", "--cron-id", "standup") == 0
    assert "No task with cronId standup" in capsys.readouterr().out


def test_search(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(config_file, "search", "generator") == 0
    out = capsys.readouterr().out
    assert "factursimple/notes.md" in out


def test_search_short_query(config_file: Path) -> None:
    assert _run(config_file, "search", "x") == 2
