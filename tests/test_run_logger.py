"""Tests for RunLogger."""

import json
from datetime import UTC, datetime
from pathlib import Path

from kalki_news.data import FetchErrorKind
from kalki_news.run_logger import RunLogger


def test_disabled_logger_writes_nothing(tmp_path: Path) -> None:
    logger = RunLogger(tmp_path / "logs", enabled=False)
    assert logger.record("fetch_news", {}, duration_seconds=1.0) is None
    assert logger.last_log_path is None
    assert not (tmp_path / "logs").exists()


def test_record_writes_json(tmp_path: Path) -> None:
    logger = RunLogger(tmp_path / "logs")
    path = logger.record(
        "fetch_news",
        {"region": "Karnataka", "genre": "All"},
        duration_seconds=1.234567,
        item_count=8,
        dropped_count=2,
        input_tokens=100,
        output_tokens=900,
    )

    assert path is not None
    assert path == logger.last_log_path
    assert path.parent == tmp_path / "logs"
    assert path.name.startswith("fetch_news_")
    data = json.loads(path.read_text())
    assert data["request"] == {"region": "Karnataka", "genre": "All"}
    assert data["duration_seconds"] == 1.2346
    assert data["item_count"] == 8
    assert data["dropped_count"] == 2
    assert data["error_kind"] == "none"
    assert data["error"] is None


def test_record_error(tmp_path: Path) -> None:
    logger = RunLogger(tmp_path)
    path = logger.record(
        "fetch_news",
        {},
        duration_seconds=0.5,
        error_kind=FetchErrorKind.QUOTA,
        error="429 Too Many Requests",
    )

    assert path is not None
    data = json.loads(path.read_text())
    assert data["error_kind"] == "quota"
    assert data["error"] == "429 Too Many Requests"


def test_each_record_gets_its_own_file(tmp_path: Path) -> None:
    logger = RunLogger(tmp_path)
    first = logger.record("fetch_news", {}, duration_seconds=0.1)
    second = logger.record("fetch_news", {}, duration_seconds=0.1)
    assert first != second
    assert len(list(tmp_path.glob("fetch_news_*.json"))) == 2


def test_record_uses_given_start_time(tmp_path: Path) -> None:
    logger = RunLogger(tmp_path)
    started = datetime(2026, 2, 12, 14, 30, 0, tzinfo=UTC)

    path = logger.record("fetch_news", {}, duration_seconds=12.0, started_at=started)

    assert path is not None
    assert path.name.startswith("fetch_news_2026-02-12T14-30-00_")
    assert json.loads(path.read_text())["started_at"] == started.isoformat()
