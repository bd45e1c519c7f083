"""Outbound posting to social platforms."""

import logging

import httpx

from kalki_news.data import SocialPlatform
from kalki_news.errors import PublishError

logger = logging.getLogger(__name__)

TWITTER_API_URL = "https://api.twitter.com/2/tweets"
FACEBOOK_FEED_URL = "https://graph.facebook.com/v18.0/me/feed"


async def publish_to_platform(
    client: httpx.AsyncClient,
    platform: str,
    content: str,
    access_token: str,
) -> str:
    """Post ``content`` on behalf of the token owner.

    Args:
        client: HTTP client to send the request with.
        platform: ``"twitter"`` or ``"facebook"``.
        content: Post text.
        access_token: User token for the platform.

    Returns:
        The platform's id for the new post.

    Raises:
        PublishError: Unknown platform or the platform rejected the post.
    """
    if platform == SocialPlatform.TWITTER:
        response = await client.post(
            TWITTER_API_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            json={"text": content},
        )
        if response.is_error:
            raise PublishError(f"Twitter API error: {response.reason_phrase}")
        return str(response.json()["data"]["id"])

    if platform == SocialPlatform.FACEBOOK:
        response = await client.post(
            FACEBOOK_FEED_URL,
            params={"access_token": access_token},
            json={"message": content},
        )
        if response.is_error:
            raise PublishError(f"Facebook API error: {response.reason_phrase}")
        return str(response.json()["id"])

    logger.warning("Unsupported platform %r", platform)
    raise PublishError("Failed to publish post")
