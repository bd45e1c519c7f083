"""Row models for the hosted database tables.

These mirror the remote schema one-to-one (snake_case columns) and are used
by the services in :mod:`kalki_news.services`.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class PostStatus(StrEnum):
    """Lifecycle of a scheduled social-media post."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    FAILED = "failed"


class SocialPlatform(StrEnum):
    """Platforms the publish relay can post to."""

    TWITTER = "twitter"
    FACEBOOK = "facebook"


class NewsArticle(BaseModel):
    """A row of ``news_articles``."""

    id: str
    title: str
    summary: str
    full_description: str | None = None
    source: str
    source_url: str
    category: str
    region: str
    image_url: str | None = None
    is_urgent: bool = False
    is_verified: bool = False
    published_at: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserInterest(BaseModel):
    """A row of ``user_interests``."""

    id: str
    user_id: str
    category: str
    region: str
    created_at: datetime | None = None


class SavedArticle(BaseModel):
    """A row of ``saved_articles``."""

    id: str
    user_id: str
    article_id: str
    saved_at: datetime | None = None


class SocialMediaAccount(BaseModel):
    """A row of ``social_media_accounts``."""

    id: str
    user_id: str
    platform: str
    account_name: str
    account_id: str
    access_token: str
    refresh_token: str | None = None
    is_connected: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SocialMediaPost(BaseModel):
    """A row of ``social_media_posts``."""

    id: str
    user_id: str
    article_id: str
    social_account_id: str
    platform: str
    post_content: str
    scheduled_at: datetime | None = None
    published_at: datetime | None = None
    status: PostStatus = PostStatus.DRAFT
    external_post_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
