"""Persistence for the user's library and the hosted database client."""

from kalki_news.store.base import BookmarkRecord, LocalCache, RemoteStore
from kalki_news.store.identity import ANON_ID_SLOT, get_anonymous_user_id, resolve_identity
from kalki_news.store.library import (
    READ_LATER_SLOT,
    REACTION_RECORD,
    REACTIONS_SLOT,
    SAVED_SLOT,
    LibraryState,
    LibraryStore,
)
from kalki_news.store.local import JsonFileCache, MemoryCache
from kalki_news.store.supabase import SupabaseClient, SupabaseRemoteStore

__all__ = [
    "ANON_ID_SLOT",
    "BookmarkRecord",
    "JsonFileCache",
    "LibraryState",
    "LibraryStore",
    "LocalCache",
    "MemoryCache",
    "READ_LATER_SLOT",
    "REACTIONS_SLOT",
    "REACTION_RECORD",
    "RemoteStore",
    "SAVED_SLOT",
    "SupabaseClient",
    "SupabaseRemoteStore",
    "get_anonymous_user_id",
    "resolve_identity",
]
