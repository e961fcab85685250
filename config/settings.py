"""Configuration management using pydantic-settings."""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage connection
    database_url: str = "sqlite:///./nhl_tracker.db"

    # NHL API configuration
    nhl_search_api_url: str = "https://search.d3.nhle.com/api/v1"
    nhl_stats_api_url: str = "https://statsapi.web.nhl.com/api/v1"
    # "search" = search endpoint + season stats endpoint
    # "legacy" = team rosters + person record with nested stats
    stats_provider: str = "search"
    request_timeout: int = 30

    # Player directory
    directory_limit: int = 50000
    directory_cache_ttl_seconds: Optional[int] = None  # None = keep for process lifetime
    search_min_length: int = 2
    search_result_limit: int = 25

    # Stats refresh
    refresh_by_name: bool = False
    refresh_max_workers: int = 1

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
