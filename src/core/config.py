"""Client configuration.

Why it lives here:
- Environment variables (pydantic-settings) are read in one place.
- Adapters (transport, enrichment) read config the same way.

Every setting can come from the environment with the `WP_FETCH_` prefix,
e.g. `WP_FETCH_BASE_URL=https://example.com`.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Central settings for the WordPress client.

    Why pydantic-settings:
    - Types and validation at the edge (env vars, kwargs).
    - A single configuration contract for transport and facade.
    """

    model_config = SettingsConfigDict(
        env_prefix="WP_FETCH_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    base_url: str | None = Field(
        default=None,
        description="Site root, e.g. 'https://example.com' (no API path).",
    )
    api_path: str = Field(
        default="/wp-json/wp/v2",
        min_length=1,
        description="REST namespace appended to the base URL.",
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Per-attempt deadline for a GET (seconds).",
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts per GET, counting the first one.",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Delay before the first retry (seconds).",
    )
    retry_backoff_factor: float = Field(
        default=1.0,
        ge=1.0,
        description="Multiplier applied to the delay after each failure (1 = fixed delay).",
    )
    user_agent: str = Field(
        default="wp-headless-fetch/0.1",
        min_length=1,
        description="User-Agent sent with every request.",
    )
    media_page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Page size used when listing the media library.",
    )
    media_max_pages: int = Field(
        default=20,
        ge=1,
        description="Upper bound on media library pages fetched in one listing.",
    )
    cache_enabled: bool = Field(
        default=True,
        description="Memoize listings (posts, media library) for the client's lifetime.",
    )
    cache_max_entries: int | None = Field(
        default=None,
        ge=1,
        description="LRU bound for the response cache (None = never evict).",
    )

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    @field_validator("api_path")
    @classmethod
    def _normalize_api_path(cls, value: str) -> str:
        return "/" + value.strip().strip("/")

    @property
    def api_root(self) -> str:
        """`{base_url}/wp-json/wp/v2` (empty base when unconfigured)."""

        return f"{self.base_url or ''}{self.api_path}"
