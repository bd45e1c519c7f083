"""Social-media publish relay."""

from kalki_news.publish.app import CORS_HEADERS, PUBLISH_PATH, PublishRequest, create_app
from kalki_news.publish.platforms import publish_to_platform

__all__ = [
    "CORS_HEADERS",
    "PUBLISH_PATH",
    "PublishRequest",
    "create_app",
    "publish_to_platform",
]
