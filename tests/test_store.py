from __future__ import annotations

import json
from pathlib import Path

from mission_control.common.store import JsonArrayStore


class TestLoad:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert JsonArrayStore(tmp_path / "nope.json").load() == []

    def test_corrupt_file_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "activities.json"
        path.write_text("[{\"id\": 1,", encoding="utf-8")
        assert JsonArrayStore(path).load() == []

    def test_non_array_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text('{"cronId": "a"}', encoding="utf-8")
        assert JsonArrayStore(path).load() == []

    def test_reads_array(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text('[{"cronId": "a"}, {"cronId": "b"}]', encoding="utf-8")
        assert [t["cronId"] for t in JsonArrayStore(path).load()] == ["a", "b"]

    def test_skips_non_object_entries(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text('["junk", {"cronId": "a"}, 3, null, [1]]', encoding="utf-8")
        assert JsonArrayStore(path).load() == [{"cronId": "a"}]


class TestSave:
    def test_creates_parent_dirs(self, tmp_path: Path) -> None:
        path = tmp_path / "deep" / "data" / "activities.json"
        JsonArrayStore(path).save([{"id": "x"}])
        assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "x"}]

    def test_pretty_printed(self, tmp_path: Path) -> None:
        path = tmp_path / "activities.json"
        JsonArrayStore(path).save([{"id": "x", "title": "Deploy"}])
        assert '\n  {\n    "id": "x"' in path.read_text(encoding="utf-8")

    def test_overwrites_whole_file(self, tmp_path: Path) -> None:
        store = JsonArrayStore(tmp_path / "tasks.json")
        store.save([{"cronId": "a"}, {"cronId": "b"}])
        store.save([{"cronId": "c"}])
        assert store.load() == [{"cronId": "c"}]

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        store = JsonArrayStore(tmp_path / "tasks.json")
        store.save([{"cronId": "a"}])
        assert [p.name for p in tmp_path.iterdir()] == ["tasks.json"]
