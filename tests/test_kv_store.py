"""Tests for JsonFileStore."""

import json

import pytest

from heyfocus.services.kv_store import JsonFileStore


class TestJsonFileStore:
    """Tests for the JSON file key/value store."""

    def test_missing_file_is_empty(self, store_path):
        store = JsonFileStore(store_path)
        assert store.keys() == []
        assert store.get("data") is None
        assert store.get("data", {}) == {}

    def test_set_is_not_written_until_save(self, store_path):
        store = JsonFileStore(store_path)
        store.set("data", {"tasks": []})
        assert not store_path.exists()

        store.save()
        assert json.loads(store_path.read_text()) == {"data": {"tasks": []}}

    def test_reload_after_save(self, store_path):
        store = JsonFileStore(store_path)
        store.set("logs_2026-03-02", [{"event": "TASK_CREATED"}])
        store.save()

        reloaded = JsonFileStore(store_path)
        assert reloaded.get("logs_2026-03-02") == [{"event": "TASK_CREATED"}]

    def test_delete(self, store_path):
        store = JsonFileStore(store_path)
        store.set("a", 1)
        assert store.delete("a") is True
        assert store.delete("a") is False
        assert store.keys() == []

    def test_corrupt_file_starts_empty(self, store_path):
        store_path.write_text("{not json")
        assert JsonFileStore(store_path).keys() == []

    def test_non_object_file_starts_empty(self, store_path):
        store_path.write_text("[1, 2, 3]")
        assert JsonFileStore(store_path).keys() == []

    def test_creates_parent_directory(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "dir" / "store.json")
        store.set("a", 1)
        store.save()
        assert (tmp_path / "nested" / "dir" / "store.json").exists()

    def test_save_leaves_no_temp_files(self, store_path):
        store = JsonFileStore(store_path)
        store.set("a", 1)
        store.save()
        store.save()
        assert [p.name for p in store_path.parent.iterdir()] == [store_path.name]

    def test_save_failure_raises_and_cleans_up(self, store_path, monkeypatch):
        store = JsonFileStore(store_path)
        store.set("a", 1)

        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("heyfocus.services.kv_store.os.replace", fail_replace)
        with pytest.raises(OSError):
            store.save()
        assert list(store_path.parent.iterdir()) == []
