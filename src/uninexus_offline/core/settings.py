"""Application settings and configuration.

This module defines all configuration options for the UniNexus offline sync
service. Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="UniNexus Offline Sync", alias="UNINEXUS_APP_NAME")
    app_version: str = Field(default="0.1.0", alias="UNINEXUS_APP_VERSION")
    debug: bool = Field(default=False, alias="UNINEXUS_DEBUG")
    log_level: str = Field(default="INFO", alias="UNINEXUS_LOG_LEVEL")

    # Remote UniNexus API
    api_base_url: str = Field(default="http://localhost:5000", alias="UNINEXUS_API_URL")
    http_timeout_seconds: float = Field(default=10.0, alias="UNINEXUS_HTTP_TIMEOUT_SECONDS")

    # Durable storage backend: "sql", "redis" or "memory"
    storage_backend: str = Field(default="sql", alias="UNINEXUS_STORAGE_BACKEND")
    storage_url: str = Field(
        default="sqlite:///./uninexus_offline.db",
        alias="UNINEXUS_STORAGE_URL",
    )
    redis_url: str = Field(default="redis://localhost:6379/0", alias="UNINEXUS_REDIS_URL")
    sql_debug: bool = Field(default=False, alias="UNINEXUS_SQL_DEBUG")

    # Storage key namespaces
    cache_prefix: str = Field(default="@uninexus_cache_", alias="UNINEXUS_CACHE_PREFIX")
    draft_prefix: str = Field(default="@uninexus_draft_", alias="UNINEXUS_DRAFT_PREFIX")
    pending_queue_key: str = Field(
        default="@uninexus_pending_queue",
        alias="UNINEXUS_PENDING_QUEUE_KEY",
    )
    failed_queue_key: str = Field(
        default="@uninexus_failed_queue",
        alias="UNINEXUS_FAILED_QUEUE_KEY",
    )
    token_key: str = Field(default="@uninexus_token", alias="UNINEXUS_TOKEN_KEY")

    # Replay policy
    max_retries: int = Field(default=3, ge=1, alias="UNINEXUS_MAX_RETRIES")

    # Cache lifetimes in milliseconds
    default_cache_ttl_ms: int = Field(
        default=1000 * 60 * 60,
        alias="UNINEXUS_DEFAULT_CACHE_TTL_MS",
    )
    feed_cache_ttl_ms: int = Field(
        default=1000 * 60 * 30,
        alias="UNINEXUS_FEED_CACHE_TTL_MS",
    )
    messages_cache_ttl_ms: int = Field(
        default=1000 * 60 * 15,
        alias="UNINEXUS_MESSAGES_CACHE_TTL_MS",
    )

    # Connectivity monitoring
    reachability_url: str | None = Field(default=None, alias="UNINEXUS_REACHABILITY_URL")
    connectivity_poll_interval_seconds: float = Field(
        default=5.0,
        alias="UNINEXUS_CONNECTIVITY_POLL_INTERVAL_SECONDS",
    )
    connectivity_probe_timeout_seconds: float = Field(
        default=3.0,
        alias="UNINEXUS_CONNECTIVITY_PROBE_TIMEOUT_SECONDS",
    )
    sync_on_reconnect: bool = Field(default=True, alias="UNINEXUS_SYNC_ON_RECONNECT")

    # CORS configuration for the local control API
    cors_origins: list[str] = Field(default=["*"], alias="UNINEXUS_CORS_ORIGINS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="UNINEXUS_CORS_ALLOW_METHODS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def effective_reachability_url(self) -> str:
        """Return the URL probed to confirm internet reachability.

        Falls back to the API base URL when no dedicated probe is configured.
        """
        return self.reachability_url or self.api_base_url

    @property
    def cache_durations(self) -> dict[str, int]:
        """Return the cache lifetimes as a convenience dictionary."""
        return {
            "default_ms": self.default_cache_ttl_ms,
            "feed_ms": self.feed_cache_ttl_ms,
            "messages_ms": self.messages_cache_ttl_ms,
        }


settings = Settings()
