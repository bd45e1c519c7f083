"""Tests for LibraryStore."""

import asyncio
import json
from pathlib import Path

import pytest

from kalki_news.data import BookmarkKind, NewsGenre, NewsItem, Reaction, SyncStatus
from kalki_news.errors import RemoteStoreError
from kalki_news.store import (
    READ_LATER_SLOT,
    REACTION_RECORD,
    REACTIONS_SLOT,
    SAVED_SLOT,
    BookmarkRecord,
    JsonFileCache,
    LibraryStore,
    MemoryCache,
)


def _item(news_id: str) -> NewsItem:
    return NewsItem(
        id=news_id,
        title=f"Story {news_id}",
        summary="Summary",
        source="Prajavani",
        category=NewsGenre.POLITICS,
    )


class FakeRemote:
    """In-memory RemoteStore that records every call."""

    def __init__(self) -> None:
        self.bookmarks: dict[tuple[str, str, BookmarkKind], NewsItem] = {}
        self.reactions: dict[tuple[str, str], Reaction] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_writes = False
        self.fail_reads = False
        self.upsert_delay = 0.0
        self.closed = False

    async def load_bookmarks(self, user_id: str) -> list[BookmarkRecord]:
        if self.fail_reads:
            raise RemoteStoreError("unreachable")
        return [
            BookmarkRecord(kind=kind, item=item)
            for (uid, _, kind), item in self.bookmarks.items()
            if uid == user_id
        ]

    async def load_reactions(self, user_id: str) -> dict[str, Reaction]:
        if self.fail_reads:
            raise RemoteStoreError("unreachable")
        return {nid: r for (uid, nid), r in self.reactions.items() if uid == user_id}

    async def upsert_bookmark(self, user_id: str, kind: BookmarkKind, item: NewsItem) -> None:
        self.calls.append(("upsert_bookmark", item.id))
        if self.upsert_delay:
            await asyncio.sleep(self.upsert_delay)
        self._check()
        self.bookmarks[(user_id, item.id, kind)] = item

    async def delete_bookmark(self, user_id: str, kind: BookmarkKind, news_id: str) -> None:
        self.calls.append(("delete_bookmark", news_id))
        self._check()
        self.bookmarks.pop((user_id, news_id, kind), None)

    async def upsert_reaction(self, user_id: str, news_id: str, reaction: Reaction) -> None:
        self.calls.append(("upsert_reaction", news_id))
        self._check()
        self.reactions[(user_id, news_id)] = reaction

    async def delete_reaction(self, user_id: str, news_id: str) -> None:
        self.calls.append(("delete_reaction", news_id))
        self._check()
        self.reactions.pop((user_id, news_id), None)

    async def aclose(self) -> None:
        self.closed = True

    def _check(self) -> None:
        if self.fail_writes:
            raise RemoteStoreError("write rejected", status_code=500)


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


async def test_toggle_save_twice_restores_state(cache: MemoryCache) -> None:
    store = LibraryStore("u1", cache)
    item = _item("n1")

    state = await store.toggle_save(item)
    assert state.is_saved("n1")
    assert json.loads(cache.get(SAVED_SLOT) or "[]")[0]["id"] == "n1"

    state = await store.toggle_save(item)
    assert not state.is_saved("n1")
    assert state.saved == ()
    assert json.loads(cache.get(SAVED_SLOT) or "[]") == []


async def test_saved_and_read_later_are_independent(cache: MemoryCache) -> None:
    store = LibraryStore("u1", cache)
    item = _item("n1")

    await store.toggle_save(item)
    state = await store.toggle_read_later(item)
    assert state.is_saved("n1")
    assert state.is_read_later("n1")

    state = await store.toggle_save(item)
    assert not state.is_saved("n1")
    assert state.is_read_later("n1")


async def test_toggle_appends_in_order(cache: MemoryCache) -> None:
    store = LibraryStore("u1", cache)
    for news_id in ("a", "b", "c"):
        await store.toggle_read_later(_item(news_id))
    await store.toggle_read_later(_item("b"))
    assert [i.id for i in store.state.read_later] == ["a", "c"]


async def test_same_reaction_clears(cache: MemoryCache) -> None:
    store = LibraryStore("u1", cache)

    state = await store.react("n1", Reaction.UP)
    assert state.reaction_for("n1") == Reaction.UP

    state = await store.react("n1", Reaction.UP)
    assert state.reaction_for("n1") is None
    assert json.loads(cache.get(REACTIONS_SLOT) or "{}") == {}


async def test_different_reaction_replaces(cache: MemoryCache) -> None:
    store = LibraryStore("u1", cache)
    await store.react("n1", Reaction.UP)
    state = await store.react("n1", Reaction.DOWN)
    assert state.reaction_for("n1") == Reaction.DOWN
    assert json.loads(cache.get(REACTIONS_SLOT) or "{}") == {"n1": "down"}


async def test_state_reloads_from_cache(cache: MemoryCache) -> None:
    store = LibraryStore("u1", cache)
    await store.toggle_save(_item("n1"))
    await store.toggle_read_later(_item("n2"))
    await store.react("n3", Reaction.DOWN)

    reloaded = LibraryStore("u1", cache)
    assert reloaded.state.is_saved("n1")
    assert reloaded.state.is_read_later("n2")
    assert reloaded.state.reaction_for("n3") == Reaction.DOWN


def test_corrupt_cache_starts_empty() -> None:
    cache = MemoryCache(
        {
            SAVED_SLOT: "{not json",
            READ_LATER_SLOT: json.dumps({"id": "x"}),
            REACTIONS_SLOT: json.dumps({"n1": "sideways", "n2": None, "n3": "up"}),
        }
    )
    store = LibraryStore("u1", cache)
    assert store.state.saved == ()
    assert store.state.read_later == ()
    assert store.state.reactions == {"n3": Reaction.UP}


def test_malformed_cached_story_is_skipped() -> None:
    cache = MemoryCache(
        {SAVED_SLOT: json.dumps([{"id": "broken"}, _item("ok").to_wire()])}
    )
    store = LibraryStore("u1", cache)
    assert [i.id for i in store.state.saved] == ["ok"]


async def test_local_only_mode_never_tracks_sync(cache: MemoryCache) -> None:
    store = LibraryStore("u1", cache)
    assert not store.has_remote

    state = await store.sync_remote()
    await store.toggle_save(_item("n1"))

    assert state.cloud_connected is False
    assert store.sync_status(BookmarkKind.SAVED, "n1") is None


async def test_remote_writes_follow_mutations(cache: MemoryCache, remote: FakeRemote) -> None:
    store = LibraryStore("u1", cache, remote)
    item = _item("n1")

    state = await store.toggle_save(item)
    assert remote.bookmarks[("u1", "n1", BookmarkKind.SAVED)] == item
    assert store.sync_status(BookmarkKind.SAVED, "n1") == SyncStatus.SYNCED
    assert state.cloud_connected is True

    await store.react("n1", Reaction.UP)
    await store.react("n1", Reaction.UP)
    assert remote.calls == [
        ("upsert_bookmark", "n1"),
        ("upsert_reaction", "n1"),
        ("delete_reaction", "n1"),
    ]
    assert remote.reactions == {}


async def test_sync_remote_replaces_local(cache: MemoryCache, remote: FakeRemote) -> None:
    store = LibraryStore("u1", cache, remote)
    await store.toggle_save(_item("local-only"))
    remote.bookmarks = {
        ("u1", "r1", BookmarkKind.SAVED): _item("r1"),
        ("u1", "r2", BookmarkKind.READ_LATER): _item("r2"),
        ("someone-else", "r3", BookmarkKind.SAVED): _item("r3"),
    }
    remote.reactions = {("u1", "r1"): Reaction.DOWN}

    state = await store.sync_remote()

    assert [i.id for i in state.saved] == ["r1"]
    assert [i.id for i in state.read_later] == ["r2"]
    assert state.reactions == {"r1": Reaction.DOWN}
    assert state.cloud_connected is True
    assert store.sync_status(REACTION_RECORD, "r1") == SyncStatus.SYNCED
    assert [i["id"] for i in json.loads(cache.get(SAVED_SLOT) or "[]")] == ["r1"]


async def test_sync_remote_failure_keeps_local(cache: MemoryCache, remote: FakeRemote) -> None:
    store = LibraryStore("u1", cache)
    await store.toggle_save(_item("n1"))

    remote.fail_reads = True
    store = LibraryStore("u1", cache, remote)
    state = await store.sync_remote()

    assert state.is_saved("n1")
    assert state.cloud_connected is False


async def test_failed_write_keeps_local_and_marks_failed(
    cache: MemoryCache, remote: FakeRemote
) -> None:
    store = LibraryStore("u1", cache, remote)
    remote.fail_writes = True

    state = await store.toggle_save(_item("n1"))

    assert state.is_saved("n1")
    assert state.cloud_connected is False
    assert store.sync_status(BookmarkKind.SAVED, "n1") == SyncStatus.FAILED
    assert store.failed_keys() == [(BookmarkKind.SAVED.value, "n1")]
    assert LibraryStore("u1", cache).state.is_saved("n1")


async def test_retry_failed_replays_current_value(
    cache: MemoryCache, remote: FakeRemote
) -> None:
    store = LibraryStore("u1", cache, remote)
    remote.fail_writes = True
    await store.toggle_save(_item("n1"))
    await store.react("n2", Reaction.UP)

    remote.fail_writes = False
    synced = await store.retry_failed()

    assert synced == 2
    assert store.failed_keys() == []
    assert ("u1", "n1", BookmarkKind.SAVED) in remote.bookmarks
    assert remote.reactions == {("u1", "n2"): Reaction.UP}
    assert store.state.cloud_connected is True


async def test_retry_failed_replays_removal(cache: MemoryCache, remote: FakeRemote) -> None:
    store = LibraryStore("u1", cache, remote)
    await store.toggle_save(_item("n1"))

    remote.fail_writes = True
    await store.toggle_save(_item("n1"))
    assert ("u1", "n1", BookmarkKind.SAVED) in remote.bookmarks

    remote.fail_writes = False
    await store.retry_failed()
    assert remote.bookmarks == {}
    assert remote.calls[-1] == ("delete_bookmark", "n1")


async def test_writes_for_same_article_apply_in_request_order(
    cache: MemoryCache, remote: FakeRemote
) -> None:
    store = LibraryStore("u1", cache, remote)
    remote.upsert_delay = 0.02
    item = _item("n1")

    await asyncio.gather(store.toggle_save(item), store.toggle_save(item))

    assert remote.calls == [("upsert_bookmark", "n1"), ("delete_bookmark", "n1")]
    assert remote.bookmarks == {}
    assert not store.state.is_saved("n1")
    assert store.sync_status(BookmarkKind.SAVED, "n1") == SyncStatus.SYNCED


async def test_pending_while_write_in_flight(cache: MemoryCache) -> None:
    gate = asyncio.Event()

    class SlowRemote(FakeRemote):
        async def upsert_bookmark(self, user_id: str, kind: BookmarkKind, item: NewsItem) -> None:
            await gate.wait()
            await super().upsert_bookmark(user_id, kind, item)

    store = LibraryStore("u1", cache, SlowRemote())
    task = asyncio.create_task(store.toggle_save(_item("n1")))
    await asyncio.sleep(0)

    assert store.state.is_saved("n1")
    assert store.pending_keys() == [(BookmarkKind.SAVED.value, "n1")]

    gate.set()
    await task
    assert store.pending_keys() == []
    assert store.sync_status(BookmarkKind.SAVED, "n1") == SyncStatus.SYNCED


def test_undecodable_cache_file_starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_bytes(b'{"vok_saved_articles": "\xff\xfe"}')

    store = LibraryStore("u1", JsonFileCache(path))

    assert store.state.saved == ()
    assert store.state.reactions == {}


async def test_undecodable_cache_file_is_rewritten(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_bytes(b"\x80\x81 not utf-8")

    await LibraryStore("u1", JsonFileCache(path)).toggle_save(_item("n1"))

    assert LibraryStore("u1", JsonFileCache(path)).state.is_saved("n1")


async def test_locks_released_after_writes(cache: MemoryCache, remote: FakeRemote) -> None:
    store = LibraryStore("u1", cache, remote)
    remote.upsert_delay = 0.01
    item = _item("n1")

    await asyncio.gather(store.toggle_save(item), store.react("n1", Reaction.UP))
    await store.toggle_read_later(_item("n2"))

    assert store._locks == {}
    assert store._inflight == {}


async def test_aclose_closes_remote(cache: MemoryCache, remote: FakeRemote) -> None:
    store = LibraryStore("u1", cache, remote)
    await store.aclose()
    assert remote.closed is True


async def test_aclose_without_remote(cache: MemoryCache) -> None:
    await LibraryStore("u1", cache).aclose()
