from __future__ import annotations

import json

from carcatalog.core.upload_cache import UploadCacheStore


def test_put_persists_across_instances(tmp_path):
    path = tmp_path / "uploads.json"
    UploadCacheStore(path).put("abc", "mem://photos/1.jpg")

    reopened = UploadCacheStore(path)
    assert reopened.get("abc") == "mem://photos/1.jpg"
    assert "abc" in reopened
    assert len(reopened) == 1
    assert json.loads(path.read_text()) == {"entries": {"abc": "mem://photos/1.jpg"}}


def test_clear_wipes_everything(tmp_path):
    store = UploadCacheStore(tmp_path / "uploads.json")
    store.put("a", "1")
    store.put("b", "2")
    store.clear()
    assert len(store) == 0
    assert UploadCacheStore(tmp_path / "uploads.json").get("a") is None


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "uploads.json"
    path.write_text("{not json")
    store = UploadCacheStore(path)
    assert store.get("anything") is None
    store.put("k", "v")
    assert UploadCacheStore(path).get("k") == "v"


def test_non_utf8_file_loads_empty(tmp_path):
    path = tmp_path / "uploads.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    store = UploadCacheStore(path)
    assert len(store) == 0
    assert store.get("k") is None
    store.put("k", "v")
    assert UploadCacheStore(path).get("k") == "v"
