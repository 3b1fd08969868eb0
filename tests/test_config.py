from __future__ import annotations

from pathlib import Path

import pytest

from mission_control.common.config import REPO_DIR, data_path, load_config


class TestLoadConfig:
    def test_defaults_when_file_missing(self, tmp_path: Path) -> None:
        cfg = load_config(tmp_path / "absent.yaml")
        assert cfg["activities"]["max_entries"] == 10_000
        assert cfg["dashboard"]["poll_interval_seconds"] == 30
        assert cfg["data_dir"] == str(Path.home() / ".openclaw/workspace/control-center/data")

    def test_file_values_merge_over_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(f"data_dir: {tmp_path}/d\ndashboard:\n  port: 9000\n", encoding="utf-8")
        cfg = load_config(path)
        assert cfg["data_dir"] == f"{tmp_path}/d"
        assert cfg["dashboard"]["port"] == 9000
        assert cfg["dashboard"]["poll_interval_seconds"] == 30

    def test_relative_paths_anchor_at_repo(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("overview_file: config/overview.yaml\n", encoding="utf-8")
        assert load_config(path)["overview_file"] == str(REPO_DIR / "config" / "overview.yaml")

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MISSION_CONTROL_DATA_DIR", str(tmp_path / "env-data"))
        monkeypatch.setenv("MISSION_CONTROL_WORKSPACE_DIR", str(tmp_path))
        cfg = load_config(tmp_path / "absent.yaml")
        assert cfg["data_dir"] == str(tmp_path / "env-data")
        assert cfg["workspace_dir"] == str(tmp_path)
        assert data_path(cfg, "tasks.json") == tmp_path / "env-data" / "tasks.json"

    @pytest.mark.parametrize("value", ["0", "-5", "lots"])
    def test_rejects_bad_max_entries(self, tmp_path: Path, value: str) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(f"activities:\n  max_entries: {value}\n", encoding="utf-8")
        with pytest.raises(ValueError, match="max_entries"):
            load_config(path)

    def test_rejects_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)
