"""User identity resolution: anonymous local ids or hosted-auth accounts."""

import logging
import uuid

from kalki_news.data import UserIdentity
from kalki_news.errors import RemoteStoreError
from kalki_news.store.base import LocalCache
from kalki_news.store.supabase import SupabaseClient

logger = logging.getLogger(__name__)

ANON_ID_SLOT = "vok_anon_id"


def get_anonymous_user_id(cache: LocalCache) -> str:
    """Return the persisted anonymous id, creating one on first use."""
    user_id = cache.get(ANON_ID_SLOT)
    if not user_id:
        user_id = str(uuid.uuid4())
        cache.set(ANON_ID_SLOT, user_id)
    return user_id


async def resolve_identity(
    cache: LocalCache,
    *,
    auth: SupabaseClient | None = None,
    access_token: str | None = None,
) -> UserIdentity:
    """Pick the identity the library should be keyed by.

    A valid session token yields the authenticated account; anything else
    (no token, no auth service, rejected token, unreachable service) falls
    back to the anonymous id. Bookmarks made under one identity are not
    carried over to the other.
    """
    if auth is not None and access_token:
        try:
            user = await auth.get_user(access_token)
        except RemoteStoreError as e:
            logger.warning("Auth lookup failed, using anonymous identity: %s", e)
            user = None
        if user and user.get("id"):
            return UserIdentity(user_id=user["id"], anonymous=False, email=user.get("email"))

    return UserIdentity(user_id=get_anonymous_user_id(cache), anonymous=True)
