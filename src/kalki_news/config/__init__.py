"""Configuration module for Voice of Kalki."""

from kalki_news.config.factory import (
    create_cache,
    create_controller,
    create_fetcher,
    create_from_config,
    create_remote_client,
)
from kalki_news.config.loader import get_default_config_path, load_config
from kalki_news.config.models import (
    CacheConfig,
    GeneratorConfig,
    KalkiConfig,
    LoggingConfig,
    RemoteStoreConfig,
)

__all__ = [
    "CacheConfig",
    "GeneratorConfig",
    "KalkiConfig",
    "LoggingConfig",
    "RemoteStoreConfig",
    "create_cache",
    "create_controller",
    "create_fetcher",
    "create_from_config",
    "create_remote_client",
    "get_default_config_path",
    "load_config",
]
