"""Configuration settings for the SkyBrief backend."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("skybrief.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    skybrief_env: str = os.getenv("SKYBRIEF_ENV", "local")
    log_level: str = os.getenv("SKYBRIEF_LOG_LEVEL", "INFO")
    retention_days: int = int(os.getenv("SKYBRIEF_RETENTION_DAYS", "30"))

    # aviationweather.gov data API
    weather_base_url: str = os.getenv(
        "WEATHER_BASE_URL", "https://aviationweather.gov/api/data"
    )
    weather_timeout: float = float(os.getenv("WEATHER_TIMEOUT", "10.0"))

    # Briefing generation
    briefing_batch_size: int = int(os.getenv("BRIEFING_BATCH_SIZE", "10"))
    persist_briefings: bool = _get_bool("PERSIST_BRIEFINGS", default=True)


settings = Settings()

if settings.briefing_batch_size < 1:
    logger.warning(
        "BRIEFING_BATCH_SIZE=%s is invalid; falling back to 1",
        settings.briefing_batch_size,
    )
    settings.briefing_batch_size = 1

__all__ = ["settings", "Settings"]
