"""Run logger for recording feed fetches to JSON files."""

import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from kalki_news.data import FetchErrorKind


class FetchRecord(BaseModel):
    """Record of a single call to the generative service."""

    run_id: str
    operation: str
    request: dict[str, Any]
    started_at: str
    duration_seconds: float = 0.0
    item_count: int = 0
    dropped_count: int = 0
    error_kind: FetchErrorKind = FetchErrorKind.NONE
    error: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0


class RunLogger:
    """Writes one JSON file per fetch for later inspection.

    When ``enabled=False``, all methods are no-ops.

    Args:
        log_dir: Directory to write JSON log files.
        enabled: If False, all methods become no-ops.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        """Whether logging is active."""
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """Path to the last written log file, or None."""
        return self._last_log_path

    def record(
        self,
        operation: str,
        request: dict[str, Any],
        *,
        duration_seconds: float,
        item_count: int = 0,
        dropped_count: int = 0,
        error_kind: FetchErrorKind = FetchErrorKind.NONE,
        error: str | None = None,
        input_tokens: int = 0,
        output_tokens: int = 0,
        started_at: datetime | None = None,
    ) -> Path | None:
        """Write a fetch record to disk.

        Args:
            operation: Name of the call (e.g. "fetch_news", "city_lookup").
            request: The parameters the call was made with.
            duration_seconds: Wall-clock time including retries.
            item_count: Stories returned to the caller.
            dropped_count: Records discarded by validation or de-duplication.
            error_kind: Classification of the failure, if any.
            error: Error text, if any.
            input_tokens: Prompt tokens billed for the final attempt.
            output_tokens: Completion tokens billed for the final attempt.
            started_at: When the call began (defaults to now).

        Returns:
            Path to the written JSON file, or None if logging is disabled.
        """
        if not self._enabled:
            return None

        started = started_at or datetime.now(tz=UTC)
        entry = FetchRecord(
            run_id=str(uuid.uuid4()),
            operation=operation,
            request=request,
            started_at=started.isoformat(),
            duration_seconds=round(duration_seconds, 4),
            item_count=item_count,
            dropped_count=dropped_count,
            error_kind=error_kind,
            error=error,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

        self._log_dir.mkdir(parents=True, exist_ok=True)

        # fetch_news_2026-02-12T14-30-00_ab12cd34.json
        ts = started.strftime("%Y-%m-%dT%H-%M-%S")
        filepath = self._log_dir / f"{operation}_{ts}_{entry.run_id[:8]}.json"
        filepath.write_text(entry.model_dump_json(indent=2))
        self._last_log_path = filepath
        return filepath
