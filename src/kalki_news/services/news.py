"""Article catalogue, saved articles and user interests in the hosted database."""

import asyncio

from kalki_news.data import NewsArticle, SavedArticle, UserInterest
from kalki_news.store.supabase import SupabaseClient

ALL = "All"


class NewsService:
    """CRUD over ``news_articles``, ``saved_articles`` and ``user_interests``.

    Errors from the store propagate as ``RemoteStoreError``.

    Args:
        client: Connected Supabase client.
    """

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get_articles(
        self,
        category: str | None = None,
        region: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[NewsArticle]:
        """Latest articles, optionally narrowed by category and region.

        ``"All"`` (or None) disables the corresponding filter.
        """
        eq: dict[str, str] = {}
        if category and category != ALL:
            eq["category"] = category
        if region and region != ALL:
            eq["region"] = region

        rows = await self._client.select(
            "news_articles",
            eq=eq,
            order="published_at",
            ascending=False,
            limit=limit,
            offset=offset,
        )
        return [NewsArticle.model_validate(row) for row in rows]

    async def get_article_by_id(self, article_id: str) -> NewsArticle | None:
        rows = await self._client.select("news_articles", eq={"id": article_id}, limit=1)
        return NewsArticle.model_validate(rows[0]) if rows else None

    async def get_trending_articles(self, limit: int = 10) -> list[NewsArticle]:
        """Latest urgent articles."""
        rows = await self._client.select(
            "news_articles",
            eq={"is_urgent": True},
            order="published_at",
            ascending=False,
            limit=limit,
        )
        return [NewsArticle.model_validate(row) for row in rows]

    async def get_articles_by_interests(self, user_id: str, limit: int = 20) -> list[NewsArticle]:
        """Articles matching any of the user's (category, region) interests.

        Each interest contributes up to 5 of its latest articles; the merged
        list is sorted newest first and cut to ``limit``. Users without
        interests get the plain latest feed.
        """
        interests = await self.get_user_interests(user_id)
        if not interests:
            return await self.get_articles(limit=limit)

        results = await asyncio.gather(
            *[
                self._client.select(
                    "news_articles",
                    eq={"category": interest.category, "region": interest.region},
                    order="published_at",
                    ascending=False,
                    limit=5,
                )
                for interest in interests
            ]
        )
        articles = [NewsArticle.model_validate(row) for rows in results for row in rows]
        articles.sort(key=lambda a: a.published_at, reverse=True)
        return articles[:limit]

    async def save_article(self, user_id: str, article_id: str) -> SavedArticle:
        row = await self._client.insert(
            "saved_articles", {"user_id": user_id, "article_id": article_id}
        )
        return SavedArticle.model_validate(row)

    async def unsave_article(self, user_id: str, article_id: str) -> None:
        await self._client.delete(
            "saved_articles", eq={"user_id": user_id, "article_id": article_id}
        )

    async def get_saved_articles(
        self, user_id: str, limit: int = 20, offset: int = 0
    ) -> list[NewsArticle]:
        """Articles the user saved, most recently saved first."""
        saved = await self._client.select(
            "saved_articles",
            columns="article_id",
            eq={"user_id": user_id},
            order="saved_at",
            ascending=False,
            limit=limit,
            offset=offset,
        )
        if not saved:
            return []

        article_ids = [row["article_id"] for row in saved]
        rows = await self._client.select("news_articles", in_={"id": article_ids})
        by_id = {row["id"]: NewsArticle.model_validate(row) for row in rows}
        return [by_id[aid] for aid in article_ids if aid in by_id]

    async def is_article_saved(self, user_id: str, article_id: str) -> bool:
        rows = await self._client.select(
            "saved_articles",
            columns="id",
            eq={"user_id": user_id, "article_id": article_id},
            limit=1,
        )
        return bool(rows)

    async def add_interest(self, user_id: str, category: str, region: str) -> UserInterest:
        row = await self._client.insert(
            "user_interests", {"user_id": user_id, "category": category, "region": region}
        )
        return UserInterest.model_validate(row)

    async def remove_interest(self, user_id: str, category: str, region: str) -> None:
        await self._client.delete(
            "user_interests",
            eq={"user_id": user_id, "category": category, "region": region},
        )

    async def get_user_interests(self, user_id: str) -> list[UserInterest]:
        rows = await self._client.select("user_interests", eq={"user_id": user_id})
        return [UserInterest.model_validate(row) for row in rows]
