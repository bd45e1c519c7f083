"""News feed sources."""

from kalki_news.fetch.base import NewsSource
from kalki_news.fetch.claude import (
    DEFAULT_CITY,
    DEFAULT_CITY_LABEL,
    ClaudeNewsFetcher,
    build_news_prompt,
    parse_news_items,
)

__all__ = [
    "DEFAULT_CITY",
    "DEFAULT_CITY_LABEL",
    "ClaudeNewsFetcher",
    "NewsSource",
    "build_news_prompt",
    "parse_news_items",
]
