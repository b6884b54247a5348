"""D1 connection settings loaded from environment variables.

Settings are resolved once at the edge of an application and handed to
``D1Client.from_settings()``; the client never reads the environment itself.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"


class D1Settings(BaseSettings):
    """Cloudflare account, database and credentials for the D1 API.

    Example::

        settings = D1Settings()  # reads .env + real env
        client = D1Client.from_settings(settings)
    """

    model_config = SettingsConfigDict(
        env_prefix="CLOUDFLARE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    account_id: str = ""
    """Cloudflare account identifier."""

    database_id: str = ""
    """D1 database identifier."""

    api_token: str = Field(
        default="",
        validation_alias=AliasChoices("CLOUDFLARE_API_TOKEN", "CLOUDFLARE_API_KEY"),
    )
    """Bearer token with D1 edit permission."""

    api_base_url: str = DEFAULT_API_BASE_URL
    """Root of the Cloudflare v4 REST API."""

    timeout: float = 30.0
    """Per-request timeout in seconds."""


@lru_cache
def get_settings() -> D1Settings:
    """Return the cached settings singleton."""
    return D1Settings()
