"""Tests for local cache backends."""

import json
from pathlib import Path

from kalki_news.store import JsonFileCache, MemoryCache


def test_memory_cache_get_set() -> None:
    cache = MemoryCache({"a": "1"})
    assert cache.get("a") == "1"
    assert cache.get("missing") is None
    cache.set("b", "2")
    assert cache.get("b") == "2"


def test_json_file_cache_missing_file_is_empty(tmp_path: Path) -> None:
    cache = JsonFileCache(tmp_path / "cache.json")
    assert cache.get("anything") is None
    assert not cache.path.exists()


def test_json_file_cache_persists(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "cache.json"
    JsonFileCache(path).set("slot", '["x"]')

    assert json.loads(path.read_text()) == {"slot": '["x"]'}
    assert JsonFileCache(path).get("slot") == '["x"]'


def test_json_file_cache_keeps_other_slots(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    cache = JsonFileCache(path)
    cache.set("a", "1")
    cache.set("b", "2")
    assert JsonFileCache(path).get("a") == "1"
    assert JsonFileCache(path).get("b") == "2"


def test_json_file_cache_corrupt_file_is_empty(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("{broken")
    cache = JsonFileCache(path)
    assert cache.get("slot") is None

    cache.set("slot", "value")
    assert json.loads(path.read_text()) == {"slot": "value"}


def test_json_file_cache_ignores_non_object(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("[1, 2, 3]")
    assert JsonFileCache(path).get("0") is None


def test_json_file_cache_drops_non_string_values(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"good": "x", "bad": 5}))
    cache = JsonFileCache(path)
    assert cache.get("good") == "x"
    assert cache.get("bad") is None


def test_json_file_cache_invalid_utf8_is_empty(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_bytes(b'{"vok_saved_articles": "\xff\xfe"}')
    cache = JsonFileCache(path)
    assert cache.get("vok_saved_articles") is None

    cache.set("slot", "value")
    assert json.loads(path.read_text()) == {"slot": "value"}
