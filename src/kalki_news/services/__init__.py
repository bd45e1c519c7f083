"""Services over the hosted database tables."""

from kalki_news.services.news import NewsService
from kalki_news.services.social import SocialMediaService

__all__ = ["NewsService", "SocialMediaService"]
