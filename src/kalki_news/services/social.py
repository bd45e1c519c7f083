"""Connected social accounts and scheduled posts in the hosted database."""

from datetime import UTC, datetime
from typing import Any

from kalki_news.data import PostStatus, SocialMediaAccount, SocialMediaPost
from kalki_news.errors import RemoteStoreError
from kalki_news.store.supabase import SupabaseClient

ACCOUNTS_TABLE = "social_media_accounts"
POSTS_TABLE = "social_media_posts"


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


class SocialMediaService:
    """CRUD over ``social_media_accounts`` and ``social_media_posts``.

    Args:
        client: Connected Supabase client.
    """

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get_connected_accounts(self, user_id: str) -> list[SocialMediaAccount]:
        rows = await self._client.select(
            ACCOUNTS_TABLE, eq={"user_id": user_id, "is_connected": True}
        )
        return [SocialMediaAccount.model_validate(row) for row in rows]

    async def connect_account(
        self,
        user_id: str,
        platform: str,
        account_name: str,
        account_id: str,
        access_token: str,
        refresh_token: str | None = None,
    ) -> SocialMediaAccount:
        row = await self._client.insert(
            ACCOUNTS_TABLE,
            {
                "user_id": user_id,
                "platform": platform,
                "account_name": account_name,
                "account_id": account_id,
                "access_token": access_token,
                "refresh_token": refresh_token,
            },
        )
        return SocialMediaAccount.model_validate(row)

    async def disconnect_account(self, account_id: str) -> None:
        await self._client.update(ACCOUNTS_TABLE, {"is_connected": False}, eq={"id": account_id})

    async def create_post(
        self,
        user_id: str,
        article_id: str,
        social_account_id: str,
        platform: str,
        post_content: str,
        scheduled_at: str | None = None,
    ) -> SocialMediaPost:
        """Create a post: ``scheduled`` if a time is given, otherwise ``draft``."""
        row = await self._client.insert(
            POSTS_TABLE,
            {
                "user_id": user_id,
                "article_id": article_id,
                "social_account_id": social_account_id,
                "platform": platform,
                "post_content": post_content,
                "scheduled_at": scheduled_at,
                "status": (PostStatus.SCHEDULED if scheduled_at else PostStatus.DRAFT).value,
            },
        )
        return SocialMediaPost.model_validate(row)

    async def get_posts(
        self, user_id: str, status: PostStatus | None = None
    ) -> list[SocialMediaPost]:
        """The user's posts, newest first, optionally by status."""
        eq: dict[str, Any] = {"user_id": user_id}
        if status:
            eq["status"] = status.value
        rows = await self._client.select(
            POSTS_TABLE, eq=eq, order="created_at", ascending=False
        )
        return [SocialMediaPost.model_validate(row) for row in rows]

    async def update_post_status(
        self,
        post_id: str,
        status: PostStatus,
        external_post_id: str | None = None,
    ) -> SocialMediaPost:
        """Move a post to ``status``; publishing stamps ``published_at``."""
        values: dict[str, Any] = {"status": status.value}
        if status == PostStatus.PUBLISHED:
            values["published_at"] = _now_iso()
        if external_post_id:
            values["external_post_id"] = external_post_id

        rows = await self._client.update(POSTS_TABLE, values, eq={"id": post_id})
        if not rows:
            raise RemoteStoreError(f"Post {post_id} not found", status_code=404)
        return SocialMediaPost.model_validate(rows[0])

    async def delete_post(self, post_id: str) -> None:
        await self._client.delete(POSTS_TABLE, eq={"id": post_id})

    async def get_scheduled_posts(self) -> list[SocialMediaPost]:
        """Scheduled posts whose time has come."""
        rows = await self._client.select(
            POSTS_TABLE,
            eq={"status": PostStatus.SCHEDULED.value},
            lte={"scheduled_at": _now_iso()},
        )
        return [SocialMediaPost.model_validate(row) for row in rows]

    async def publish_post(self, post_id: str, external_post_id: str) -> SocialMediaPost:
        return await self.update_post_status(post_id, PostStatus.PUBLISHED, external_post_id)
