"""Supabase access over its REST (PostgREST) and auth endpoints."""

import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from kalki_news.data import BookmarkKind, NewsItem, Reaction
from kalki_news.errors import RemoteStoreError
from kalki_news.store.base import BookmarkRecord

logger = logging.getLogger(__name__)

BOOKMARKS_TABLE = "bookmarks"
REACTIONS_TABLE = "reactions"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _filter_params(
    *,
    eq: Mapping[str, Any] | None = None,
    in_: Mapping[str, Iterable[Any]] | None = None,
    lte: Mapping[str, Any] | None = None,
) -> list[tuple[str, str]]:
    """Translate column filters into PostgREST query parameters."""
    params: list[tuple[str, str]] = []
    for column, value in (eq or {}).items():
        if value is None:
            params.append((column, "is.null"))
        else:
            params.append((column, f"eq.{_format_value(value)}"))
    for column, values in (in_ or {}).items():
        joined = ",".join(f'"{_format_value(v)}"' for v in values)
        params.append((column, f"in.({joined})"))
    for column, value in (lte or {}).items():
        params.append((column, f"lte.{_format_value(value)}"))
    return params


class SupabaseClient:
    """Minimal async client for a Supabase project.

    Covers the record operations the app needs (select, insert, upsert,
    update, delete) plus the current-user lookup of the auth service.

    Args:
        url: Project URL (defaults to SUPABASE_URL env var).
        key: API key (defaults to the env var named by ``key_env``).
        key_env: Env var holding the key (default: SUPABASE_ANON_KEY).
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        key: str | None = None,
        key_env: str = "SUPABASE_ANON_KEY",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        resolved_url = (url or os.environ.get("SUPABASE_URL", "")).rstrip("/")
        resolved_key = key or os.environ.get(key_env)
        if not resolved_url or not resolved_key:
            raise ValueError(
                f"Supabase URL and key required. Pass url/key or set SUPABASE_URL and {key_env}."
            )
        self._url = resolved_url
        self._key = resolved_key
        self._client = httpx.AsyncClient(
            base_url=resolved_url,
            headers={"apikey": resolved_key, "Authorization": f"Bearer {resolved_key}"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        eq: Mapping[str, Any] | None = None,
        in_: Mapping[str, Iterable[Any]] | None = None,
        lte: Mapping[str, Any] | None = None,
        order: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return the rows of ``table`` matching every filter."""
        params = [("select", columns), *_filter_params(eq=eq, in_=in_, lte=lte)]
        if order:
            params.append(("order", f"{order}.{'asc' if ascending else 'desc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))
        return await self._request("GET", table, params=params)

    async def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored."""
        rows = await self._request(
            "POST", table, json=dict(row), headers={"Prefer": "return=representation"}
        )
        return self._single(rows, table)

    async def upsert(
        self,
        table: str,
        row: Mapping[str, Any],
        *,
        on_conflict: str | None = None,
    ) -> None:
        """Insert a row, merging into an existing one on key conflict."""
        params = [("on_conflict", on_conflict)] if on_conflict else None
        await self._request(
            "POST",
            table,
            params=params,
            json=dict(row),
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        eq: Mapping[str, Any],
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them."""
        return await self._request(
            "PATCH",
            table,
            params=_filter_params(eq=eq),
            json=dict(values),
            headers={"Prefer": "return=representation"},
        )

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> None:
        """Delete matching rows."""
        if not eq:
            raise ValueError("Refusing to delete without a filter")
        await self._request("DELETE", table, params=_filter_params(eq=eq))

    async def get_user(self, access_token: str) -> dict[str, Any] | None:
        """Return the auth user for a session token, or None if it is invalid."""
        try:
            response = await self._client.get(
                "/auth/v1/user", headers={"Authorization": f"Bearer {access_token}"}
            )
        except httpx.HTTPError as e:
            raise RemoteStoreError(str(e)) from e
        if response.status_code in (401, 403):
            return None
        self._raise_for_status(response)
        return response.json()

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        try:
            response = await self._client.request(
                method, f"/rest/v1/{table}", params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{method} {table} failed: {e}") from e

        self._raise_for_status(response)
        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if not response.is_error:
            return
        try:
            body = response.json()
        except ValueError:
            body = None
        message = (body.get("message") if isinstance(body, dict) else None) or response.text
        raise RemoteStoreError(message[:400], status_code=response.status_code)

    @staticmethod
    def _single(rows: list[dict[str, Any]], table: str) -> dict[str, Any]:
        if not rows:
            raise RemoteStoreError(f"No row returned from {table}")
        return rows[0]


class SupabaseRemoteStore:
    """Bookmark and reaction tables of the hosted database.

    ``bookmarks`` rows are keyed by (user_id, news_id, type) and carry a
    camelCase snapshot of the article in ``content``. ``reactions`` rows are
    keyed by (user_id, news_id).
    """

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def load_bookmarks(self, user_id: str) -> list[BookmarkRecord]:
        rows = await self._client.select(BOOKMARKS_TABLE, eq={"user_id": user_id})
        records: list[BookmarkRecord] = []
        for row in rows:
            try:
                kind = BookmarkKind(row.get("type"))
                item = NewsItem.model_validate(row.get("content"))
            except (ValueError, ValidationError):
                logger.warning("Skipping malformed bookmark row for %r", row.get("news_id"))
                continue
            records.append(BookmarkRecord(kind=kind, item=item))
        return records

    async def load_reactions(self, user_id: str) -> dict[str, Reaction]:
        rows = await self._client.select(REACTIONS_TABLE, eq={"user_id": user_id})
        reactions: dict[str, Reaction] = {}
        for row in rows:
            value = row.get("reaction_type")
            if value in (Reaction.UP, Reaction.DOWN):
                reactions[row["news_id"]] = Reaction(value)
        return reactions

    async def upsert_bookmark(self, user_id: str, kind: BookmarkKind, item: NewsItem) -> None:
        await self._client.upsert(
            BOOKMARKS_TABLE,
            {"user_id": user_id, "news_id": item.id, "type": kind.value, "content": item.to_wire()},
            on_conflict="user_id,news_id,type",
        )

    async def delete_bookmark(self, user_id: str, kind: BookmarkKind, news_id: str) -> None:
        await self._client.delete(
            BOOKMARKS_TABLE, eq={"user_id": user_id, "news_id": news_id, "type": kind.value}
        )

    async def upsert_reaction(self, user_id: str, news_id: str, reaction: Reaction) -> None:
        await self._client.upsert(
            REACTIONS_TABLE,
            {"user_id": user_id, "news_id": news_id, "reaction_type": reaction.value},
            on_conflict="user_id,news_id",
        )

    async def delete_reaction(self, user_id: str, news_id: str) -> None:
        await self._client.delete(REACTIONS_TABLE, eq={"user_id": user_id, "news_id": news_id})

    async def aclose(self) -> None:
        """Close the underlying client."""
        await self._client.aclose()
