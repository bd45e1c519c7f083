"""Placeholder artwork for stories that arrive without an image."""

import time
from urllib.parse import quote

PLACEHOLDER_URL = "https://picsum.photos/seed/{seed}/1000/600"


def placeholder_image_url(news_id: str, index: int, *, now_ms: int | None = None) -> str:
    """Build a deterministic placeholder image URL.

    The same id always maps to the same image. Records with no id fall back
    to a seed made from their position and the current time.

    Args:
        news_id: Story identifier, possibly empty.
        index: Position of the story in its batch.
        now_ms: Override for the current epoch milliseconds.
    """
    seed = news_id.strip()
    if not seed:
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        seed = f"{index}-{now_ms}"
    return PLACEHOLDER_URL.format(seed=quote(seed, safe=""))


def has_usable_image(url: str | None) -> bool:
    """Return True if ``url`` is an absolute http(s) URL."""
    if not url:
        return False
    return url.strip().lower().startswith(("http://", "https://"))
