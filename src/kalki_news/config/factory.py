"""Factory functions to create components from configuration."""

import logging
from pathlib import Path

from kalki_news.config.models import (
    CacheConfig,
    GeneratorConfig,
    KalkiConfig,
    LoggingConfig,
    RemoteStoreConfig,
)
from kalki_news.feed import FeedController, FeedState
from kalki_news.fetch import ClaudeNewsFetcher
from kalki_news.run_logger import RunLogger
from kalki_news.store import (
    JsonFileCache,
    LibraryStore,
    SupabaseClient,
    SupabaseRemoteStore,
    resolve_identity,
)

logger = logging.getLogger(__name__)


def create_fetcher(
    config: GeneratorConfig,
    run_logger: RunLogger | None = None,
) -> ClaudeNewsFetcher:
    """Create the news fetcher from config."""
    return ClaudeNewsFetcher(
        model=config.model,
        max_tokens=config.max_tokens,
        max_searches=config.max_searches,
        retries=config.retries,
        initial_delay=config.initial_delay_seconds,
        fallback_city=config.fallback_city,
        fallback_city_label=config.fallback_city_label,
        run_logger=run_logger,
    )


def create_cache(config: CacheConfig) -> JsonFileCache:
    """Create the local cache from config."""
    return JsonFileCache(Path(config.path).expanduser())


def create_remote_client(config: RemoteStoreConfig | None) -> SupabaseClient | None:
    """Create the hosted database client, or None for local-only mode.

    Missing credentials are not an error: the app degrades to the local
    cache and says so in the log.
    """
    if config is None:
        return None
    try:
        return SupabaseClient(
            url=config.url, key_env=config.key_env, timeout=config.timeout_seconds
        )
    except ValueError as e:
        logger.warning("Remote store disabled: %s", e)
        return None


def create_from_config(
    config: KalkiConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> tuple[ClaudeNewsFetcher, JsonFileCache, SupabaseClient | None, RunLogger | None]:
    """Create the standalone components from root config.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        Tuple of (fetcher, cache, remote_client, run_logger).
        remote_client is None in local-only mode; run_logger is None if
        logging is disabled.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    fetcher = create_fetcher(config.generator, run_logger=run_logger)
    cache = create_cache(config.cache)
    client = create_remote_client(config.remote)
    return (fetcher, cache, client, run_logger)


async def create_controller(
    config: KalkiConfig,
    *,
    access_token: str | None = None,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> FeedController:
    """Create a ready feed controller: identity resolved, library synced.

    The controller owns the remote client; close it with ``aclose()`` or use
    it as an async context manager.

    Args:
        config: Root configuration.
        access_token: Optional session token for an authenticated identity.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.
    """
    fetcher, cache, client, _run_logger = create_from_config(
        config, log_override=log_override, log_dir_override=log_dir_override
    )
    identity = await resolve_identity(cache, auth=client, access_token=access_token)
    remote = SupabaseRemoteStore(client) if client is not None else None
    library = LibraryStore(identity.user_id, cache, remote)
    await library.sync_remote()
    return FeedController(fetcher, library, FeedState(city=config.generator.fallback_city))
