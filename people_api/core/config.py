"""
Configuration helpers for the People API.

Routers, repositories and scripts read settings from here instead of
fetching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    log_level: str
    person_cache_ttl_seconds: int
    active_count_cache_ttl_seconds: int
    cache_max_size: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=(os.getenv("DATABASE_URL") or "").strip(),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        person_cache_ttl_seconds=_int(os.getenv("PERSON_CACHE_TTL_SECONDS", "1800"), 1800),
        active_count_cache_ttl_seconds=_int(os.getenv("ACTIVE_COUNT_CACHE_TTL_SECONDS", "21600"), 21600),
        cache_max_size=_int(os.getenv("CACHE_MAX_SIZE", "10000"), 10000),
    )
