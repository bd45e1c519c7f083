"""Data models for Voice of Kalki."""

from kalki_news.data.models import (
    BookmarkKind,
    FetchErrorKind,
    Language,
    NewsGenre,
    NewsItem,
    Reaction,
    Region,
    SyncStatus,
    UserIdentity,
)
from kalki_news.data.records import (
    NewsArticle,
    PostStatus,
    SavedArticle,
    SocialMediaAccount,
    SocialMediaPost,
    SocialPlatform,
    UserInterest,
)

__all__ = [
    "BookmarkKind",
    "FetchErrorKind",
    "Language",
    "NewsArticle",
    "NewsGenre",
    "NewsItem",
    "PostStatus",
    "Reaction",
    "Region",
    "SavedArticle",
    "SocialMediaAccount",
    "SocialMediaPost",
    "SocialPlatform",
    "SyncStatus",
    "UserIdentity",
    "UserInterest",
]
