"""Pydantic configuration models for Voice of Kalki components."""

from pydantic import BaseModel, Field

# ============================================================
# Generator Config
# ============================================================


class GeneratorConfig(BaseModel):
    """Configuration for ClaudeNewsFetcher."""

    model: str = "claude-haiku-4-5-20251001"
    max_tokens: int = 8192
    max_searches: int = 5
    retries: int = Field(default=3, ge=0)
    initial_delay_seconds: float = Field(default=2.0, ge=0.0)
    fallback_city: str = "Bengaluru"
    fallback_city_label: str = "Bengaluru, Karnataka"

    model_config = {"frozen": True}


# ============================================================
# Storage Configs
# ============================================================


class RemoteStoreConfig(BaseModel):
    """Hosted database connection. Omit to run local-only."""

    url: str | None = None
    key_env: str = "SUPABASE_ANON_KEY"
    timeout_seconds: float = 15.0

    model_config = {"frozen": True}


class CacheConfig(BaseModel):
    """Local durable cache location."""

    path: str = "~/.kalki/cache.json"

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for per-fetch JSON run records."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class KalkiConfig(BaseModel):
    """Root configuration for Voice of Kalki."""

    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    remote: RemoteStoreConfig | None = None
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
