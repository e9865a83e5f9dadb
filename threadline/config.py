"""Threadline configuration management."""

import logging

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class ThreadlineSettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Identity — the bot's own handle on the platform, rendered as (YOU)
    bot_handle: str = Field(default="", description="Platform handle of the bot account")

    # Persistence — history lookup only
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection string for persisted conversation history",
    )
    history_limit: int = Field(default=50, ge=1, description="Max history rows per sender")

    # Thread walking
    max_hops: int = Field(default=50, ge=1, description="Max parent lookups per thread walk")

    # Media
    image_timeout: float = Field(default=30.0, gt=0, description="Per-image fetch timeout (seconds)")
    max_image_bytes: int = Field(default=10 * 1024 * 1024, gt=0, description="Max accepted image size")
    max_concurrent_fetches: int = Field(default=4, ge=1, description="Parallel image downloads")

    model_config = {"env_prefix": "THREADLINE_", "env_file": ".env", "extra": "ignore"}


def load_settings(**overrides) -> ThreadlineSettings:
    """Load settings from environment, with explicit overrides taking precedence."""
    settings = ThreadlineSettings(**{k: v for k, v in overrides.items() if v is not None})

    logger = logging.getLogger("threadline.config")
    if not settings.bot_handle:
        logger.warning(
            "THREADLINE_BOT_HANDLE is not set — only senders named 'agent' "
            "will be labelled as (YOU) in rendered transcripts."
        )

    return settings
