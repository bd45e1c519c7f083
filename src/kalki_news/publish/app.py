"""HTTP relay that publishes a stored post to its social platform.

Serve with e.g. ``uvicorn kalki_news.publish.app:app``. Every response,
including errors and the CORS preflight, carries the same CORS headers.
"""

import logging
import os
from datetime import UTC, datetime
from typing import Any

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from kalki_news.data import PostStatus
from kalki_news.publish.platforms import publish_to_platform
from kalki_news.services.social import POSTS_TABLE
from kalki_news.store.supabase import SupabaseClient

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}

PUBLISH_PATH = "/publish_social_post"


class PublishRequest(BaseModel):
    """Body of a publish call. Empty strings count as missing."""

    post_id: str = ""
    platform: str = ""
    content: str = ""
    access_token: str = ""

    def is_complete(self) -> bool:
        return all((self.post_id, self.platform, self.content, self.access_token))


def _json(status_code: int, body: dict[str, Any]) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=CORS_HEADERS)


async def _mark_failed(
    supabase_url: str,
    service_key: str,
    post_id: str,
    transport: httpx.AsyncBaseTransport | None,
) -> None:
    try:
        async with SupabaseClient(url=supabase_url, key=service_key, transport=transport) as db:
            await db.update(POSTS_TABLE, {"status": PostStatus.FAILED.value}, eq={"id": post_id})
    except Exception:
        logger.warning("Could not mark post %s as failed", post_id, exc_info=True)


def create_app(
    *,
    supabase_url: str | None = None,
    service_key: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the relay application.

    Args:
        supabase_url: Project URL (defaults to SUPABASE_URL at request time).
        service_key: Service-role key (defaults to SUPABASE_SERVICE_ROLE_KEY
            at request time).
        transport: Optional httpx transport shared by the store and platform
            calls, mainly for tests.
    """
    app = FastAPI(title="Voice of Kalki publish relay")

    @app.options(PUBLISH_PATH)
    async def preflight() -> Response:
        return Response(status_code=200, headers=CORS_HEADERS)

    @app.post(PUBLISH_PATH)
    async def publish(request: Request) -> JSONResponse:
        url = supabase_url or os.environ.get("SUPABASE_URL")
        key = service_key or os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        if not url or not key:
            return _json(500, {"error": "Missing Supabase configuration"})

        post_id = ""
        try:
            raw = await request.json()
            body = PublishRequest.model_validate(raw if isinstance(raw, dict) else {})
            if not body.is_complete():
                return _json(400, {"error": "Missing required fields"})
            post_id = body.post_id

            async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
                external_id = await publish_to_platform(
                    client, body.platform, body.content, body.access_token
                )

            async with SupabaseClient(url=url, key=key, transport=transport) as db:
                await db.update(
                    POSTS_TABLE,
                    {
                        "status": PostStatus.PUBLISHED.value,
                        "published_at": datetime.now(tz=UTC).isoformat(),
                        "external_post_id": external_id,
                    },
                    eq={"id": post_id},
                )
        except Exception as e:
            logger.warning("Publishing post %r failed: %s", post_id, e)
            if post_id:
                await _mark_failed(url, key, post_id, transport)
            return _json(500, {"error": str(e) or "Unknown error occurred"})

        logger.info("Published post %s on %s as %s", post_id, body.platform, external_id)
        return _json(
            200,
            {
                "success": True,
                "message": "Post published successfully",
                "external_post_id": external_id,
            },
        )

    return app


app = create_app()
