"""Voice of Kalki: AI-aggregated regional news with a synced personal library."""

from kalki_news.config import KalkiConfig, create_controller, create_from_config, load_config
from kalki_news.data import (
    BookmarkKind,
    FetchErrorKind,
    Language,
    NewsArticle,
    NewsGenre,
    NewsItem,
    PostStatus,
    Reaction,
    Region,
    SavedArticle,
    SocialMediaAccount,
    SocialMediaPost,
    SocialPlatform,
    SyncStatus,
    UserIdentity,
    UserInterest,
)
from kalki_news.errors import KalkiError, PublishError, QuotaExhaustedError, RemoteStoreError
from kalki_news.feed import FeedController, FeedState
from kalki_news.fetch import ClaudeNewsFetcher, NewsSource
from kalki_news.filtering import FilterState, filter_news
from kalki_news.images import placeholder_image_url
from kalki_news.retry import call_with_retry, is_quota_error, with_retry
from kalki_news.run_logger import RunLogger
from kalki_news.services import NewsService, SocialMediaService
from kalki_news.store import (
    JsonFileCache,
    LibraryState,
    LibraryStore,
    LocalCache,
    MemoryCache,
    RemoteStore,
    SupabaseClient,
    SupabaseRemoteStore,
    get_anonymous_user_id,
    resolve_identity,
)

__all__ = [
    # Models
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
    # Errors
    "KalkiError",
    "PublishError",
    "QuotaExhaustedError",
    "RemoteStoreError",
    # Functions
    "call_with_retry",
    "filter_news",
    "get_anonymous_user_id",
    "is_quota_error",
    "placeholder_image_url",
    "resolve_identity",
    "with_retry",
    # Protocols
    "LocalCache",
    "NewsSource",
    "RemoteStore",
    # Fetching
    "ClaudeNewsFetcher",
    # Storage
    "JsonFileCache",
    "LibraryState",
    "LibraryStore",
    "MemoryCache",
    "SupabaseClient",
    "SupabaseRemoteStore",
    # Services
    "NewsService",
    "SocialMediaService",
    # Feed
    "FeedController",
    "FeedState",
    "FilterState",
    # Logging
    "RunLogger",
    # Config
    "KalkiConfig",
    "create_controller",
    "create_from_config",
    "load_config",
]
