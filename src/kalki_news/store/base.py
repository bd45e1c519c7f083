from dataclasses import dataclass
from typing import Protocol

from kalki_news.data import BookmarkKind, NewsItem, Reaction


@dataclass(frozen=True)
class BookmarkRecord:
    """A bookmark as stored remotely: the kind plus an article snapshot."""

    kind: BookmarkKind
    item: NewsItem


class LocalCache(Protocol):
    """Process-local durable key-value slots holding JSON strings."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class RemoteStore(Protocol):
    """Interface for the synced bookmark and reaction tables.

    Implementations raise on failure; callers decide how to degrade.
    """

    async def load_bookmarks(self, user_id: str) -> list[BookmarkRecord]: ...

    async def load_reactions(self, user_id: str) -> dict[str, Reaction]: ...

    async def upsert_bookmark(self, user_id: str, kind: BookmarkKind, item: NewsItem) -> None: ...

    async def delete_bookmark(self, user_id: str, kind: BookmarkKind, news_id: str) -> None: ...

    async def upsert_reaction(self, user_id: str, news_id: str, reaction: Reaction) -> None: ...

    async def delete_reaction(self, user_id: str, news_id: str) -> None: ...

    async def aclose(self) -> None: ...
