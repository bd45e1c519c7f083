"""Local durable caches for the offline mirror of the user's library."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class MemoryCache:
    """In-process cache. Contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value


class JsonFileCache:
    """Cache backed by a single JSON object file mapping slot name to string.

    A missing, unreadable or malformed file is treated as empty. Every
    ``set`` rewrites the whole file.

    Args:
        path: Location of the cache file. Parent directories are created on
            first write.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._slots: dict[str, str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        slots = self._load()
        slots[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(slots, ensure_ascii=False, indent=2), encoding="utf-8")

    def _load(self) -> dict[str, str]:
        if self._slots is not None:
            return self._slots

        self._slots = {}
        if not self._path.exists():
            return self._slots
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable cache file %s, starting empty", self._path)
            return self._slots
        if not isinstance(raw, dict):
            logger.warning("Cache file %s is not an object, starting empty", self._path)
            return self._slots

        self._slots = {k: v for k, v in raw.items() if isinstance(v, str)}
        return self._slots
