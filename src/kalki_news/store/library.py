"""The user's library: bookmarks and reactions mirrored locally and remotely.

Every mutation is applied to memory and the local cache before the first
``await``, so the returned snapshot is immediately consistent. The remote
write follows as a best-effort step whose outcome is tracked per record as a
:class:`SyncStatus`; failures are logged and never rolled back.

Remote writes for the same article are serialized through a per-article
lock, so they reach the store in the order they were requested.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace

from pydantic import ValidationError

from kalki_news.data import BookmarkKind, NewsItem, Reaction, SyncStatus
from kalki_news.store.base import LocalCache, RemoteStore

logger = logging.getLogger(__name__)

SAVED_SLOT = "vok_saved_articles"
READ_LATER_SLOT = "vok_read_later_articles"
REACTIONS_SLOT = "vok_reactions"

REACTION_RECORD = "reaction"

# (record kind, news id); record kind is a BookmarkKind value or "reaction"
RecordKey = tuple[str, str]


@dataclass(frozen=True)
class LibraryState:
    """Immutable snapshot of one user's library."""

    saved: tuple[NewsItem, ...] = ()
    read_later: tuple[NewsItem, ...] = ()
    reactions: dict[str, Reaction] = field(default_factory=dict)
    cloud_connected: bool = False

    def is_saved(self, news_id: str) -> bool:
        return any(item.id == news_id for item in self.saved)

    def is_read_later(self, news_id: str) -> bool:
        return any(item.id == news_id for item in self.read_later)

    def reaction_for(self, news_id: str) -> Reaction | None:
        return self.reactions.get(news_id)

    def items(self, kind: BookmarkKind) -> tuple[NewsItem, ...]:
        return self.saved if kind == BookmarkKind.SAVED else self.read_later


def _load_items(cache: LocalCache, slot: str) -> tuple[NewsItem, ...]:
    raw = cache.get(slot)
    if not raw:
        return ()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Corrupt cache slot %s, starting empty", slot)
        return ()
    if not isinstance(data, list):
        logger.warning("Cache slot %s is not a list, starting empty", slot)
        return ()

    items: list[NewsItem] = []
    for entry in data:
        try:
            items.append(NewsItem.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed cached story in %s", slot)
    return tuple(items)


def _load_reactions(cache: LocalCache) -> dict[str, Reaction]:
    raw = cache.get(REACTIONS_SLOT)
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Corrupt cache slot %s, starting empty", REACTIONS_SLOT)
        return {}
    if not isinstance(data, dict):
        return {}
    # Cleared reactions may have been stored as null
    return {
        news_id: Reaction(value)
        for news_id, value in data.items()
        if value in (Reaction.UP, Reaction.DOWN)
    }


class LibraryStore:
    """Saved / read-later bookmarks and reactions for one user identity.

    Args:
        user_id: Anonymous or authenticated user id records are keyed by.
        cache: Local durable cache, loaded synchronously on construction.
        remote: Optional remote store. When None the library is local-only.
    """

    def __init__(
        self,
        user_id: str,
        cache: LocalCache,
        remote: RemoteStore | None = None,
    ) -> None:
        self._user_id = user_id
        self._cache = cache
        self._remote = remote
        self._state = LibraryState(
            saved=_load_items(cache, SAVED_SLOT),
            read_later=_load_items(cache, READ_LATER_SLOT),
            reactions=_load_reactions(cache),
        )
        self._sync: dict[RecordKey, SyncStatus] = {}
        self._inflight: dict[RecordKey, int] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def state(self) -> LibraryState:
        """Current snapshot."""
        return self._state

    @property
    def has_remote(self) -> bool:
        return self._remote is not None

    def sync_status(self, kind: str, news_id: str) -> SyncStatus | None:
        """Remote write state of a record, or None if it was never written."""
        return self._sync.get((str(kind), news_id))

    def pending_keys(self) -> list[RecordKey]:
        return [key for key, status in self._sync.items() if status == SyncStatus.PENDING]

    def failed_keys(self) -> list[RecordKey]:
        return [key for key, status in self._sync.items() if status == SyncStatus.FAILED]

    async def aclose(self) -> None:
        """Release the remote store's connections. The local cache needs none."""
        if self._remote is not None:
            await self._remote.aclose()

    async def sync_remote(self) -> LibraryState:
        """Replace local state with the remote records for this user.

        On failure the local state is kept and ``cloud_connected`` is False.
        """
        if self._remote is None:
            return self._state

        try:
            bookmarks = await self._remote.load_bookmarks(self._user_id)
            reactions = await self._remote.load_reactions(self._user_id)
        except Exception as e:
            logger.warning("Remote sync failed, keeping local library: %s", e)
            self._state = replace(self._state, cloud_connected=False)
            return self._state

        saved = tuple(b.item for b in bookmarks if b.kind == BookmarkKind.SAVED)
        read_later = tuple(b.item for b in bookmarks if b.kind == BookmarkKind.READ_LATER)
        self._state = LibraryState(
            saved=saved, read_later=read_later, reactions=reactions, cloud_connected=True
        )
        self._sync = {(b.kind.value, b.item.id): SyncStatus.SYNCED for b in bookmarks}
        self._sync.update({(REACTION_RECORD, nid): SyncStatus.SYNCED for nid in reactions})
        self._persist()
        logger.info(
            "Synced library: %d saved, %d read later, %d reactions",
            len(saved),
            len(read_later),
            len(reactions),
        )
        return self._state

    async def toggle_save(self, item: NewsItem) -> LibraryState:
        """Add ``item`` to, or remove it from, the saved list."""
        return await self._toggle_bookmark(BookmarkKind.SAVED, item)

    async def toggle_read_later(self, item: NewsItem) -> LibraryState:
        """Add ``item`` to, or remove it from, the read-later list."""
        return await self._toggle_bookmark(BookmarkKind.READ_LATER, item)

    async def react(self, news_id: str, reaction: Reaction) -> LibraryState:
        """Set a reaction; repeating the current reaction clears it."""
        current = self._state.reactions.get(news_id)
        reactions = dict(self._state.reactions)
        if current == reaction:
            reactions.pop(news_id, None)
            new: Reaction | None = None
        else:
            reactions[news_id] = reaction
            new = reaction
        self._state = replace(self._state, reactions=reactions)
        self._persist()

        await self._push(REACTION_RECORD, news_id, self._reaction_write(news_id, new))
        return self._state

    async def retry_failed(self) -> int:
        """Replay the current local value of every failed record.

        Returns:
            Number of records that are synced afterwards.
        """
        synced = 0
        for kind, news_id in self.failed_keys():
            if kind == REACTION_RECORD:
                write = self._reaction_write(news_id, self._state.reactions.get(news_id))
            else:
                bookmark_kind = BookmarkKind(kind)
                item = next(
                    (i for i in self._state.items(bookmark_kind) if i.id == news_id), None
                )
                write = self._bookmark_write(bookmark_kind, news_id, item)
            await self._push(kind, news_id, write)
            if self._sync.get((kind, news_id)) == SyncStatus.SYNCED:
                synced += 1
        return synced

    async def _toggle_bookmark(self, kind: BookmarkKind, item: NewsItem) -> LibraryState:
        items = self._state.items(kind)
        if any(i.id == item.id for i in items):
            updated = tuple(i for i in items if i.id != item.id)
            stored: NewsItem | None = None
        else:
            updated = (*items, item)
            stored = item

        if kind == BookmarkKind.SAVED:
            self._state = replace(self._state, saved=updated)
        else:
            self._state = replace(self._state, read_later=updated)
        self._persist()

        await self._push(kind.value, item.id, self._bookmark_write(kind, item.id, stored))
        return self._state

    def _bookmark_write(
        self, kind: BookmarkKind, news_id: str, item: NewsItem | None
    ) -> Callable[[RemoteStore], Awaitable[None]]:
        if item is None:
            return lambda remote: remote.delete_bookmark(self._user_id, kind, news_id)
        return lambda remote: remote.upsert_bookmark(self._user_id, kind, item)

    def _reaction_write(
        self, news_id: str, reaction: Reaction | None
    ) -> Callable[[RemoteStore], Awaitable[None]]:
        if reaction is None:
            return lambda remote: remote.delete_reaction(self._user_id, news_id)
        return lambda remote: remote.upsert_reaction(self._user_id, news_id, reaction)

    async def _push(
        self,
        kind: str,
        news_id: str,
        write: Callable[[RemoteStore], Awaitable[None]],
    ) -> None:
        remote = self._remote
        if remote is None:
            return

        key = (kind, news_id)
        self._sync[key] = SyncStatus.PENDING
        self._inflight[key] = self._inflight.get(key, 0) + 1
        lock = self._locks.setdefault(news_id, asyncio.Lock())
        async with lock:
            try:
                await write(remote)
                status = SyncStatus.SYNCED
            except Exception as e:
                logger.warning("Remote write for %s %r failed: %s", kind, news_id, e)
                status = SyncStatus.FAILED

        self._inflight[key] -= 1
        # A queued write for the same record supersedes this outcome
        if self._inflight[key] == 0:
            del self._inflight[key]
            self._sync[key] = status
        if not any(nid == news_id for _, nid in self._inflight):
            self._locks.pop(news_id, None)
        connected = status == SyncStatus.SYNCED
        if self._state.cloud_connected != connected:
            self._state = replace(self._state, cloud_connected=connected)

    def _persist(self) -> None:
        state = self._state
        try:
            self._cache.set(SAVED_SLOT, json.dumps([i.to_wire() for i in state.saved]))
            self._cache.set(READ_LATER_SLOT, json.dumps([i.to_wire() for i in state.read_later]))
            self._cache.set(
                REACTIONS_SLOT, json.dumps({k: v.value for k, v in state.reactions.items()})
            )
        except OSError:
            logger.error("Failed to write local library cache", exc_info=True)
