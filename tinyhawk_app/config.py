from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Application
    app_name: str = "TinyHawk"
    app_version: str = "1.0.0"

    # Database
    database_url: str = "sqlite:///./tinyhawk.db"

    # Public base URL for short links. When unset, the request's own
    # scheme and host are used instead.
    base_url: Optional[str] = None
    cors_origins: str = "*"  # Comma-separated list of allowed origins

    # Short code allocation
    short_code_length: int = 6
    max_retries: int = 6
    short_code_strategy: str = "nanoid"  # Options: "nanoid", "base62"

    # Background click recording
    task_executor: str = "asyncio"  # Options: "asyncio", "inline"

    # Geo enrichment
    geo_provider: str = "ipapi"  # Options: "ipapi", "ipstack", "ipinfo", "null"
    geo_api_key: str = ""
    geo_timeout: float = 4.0  # Seconds
    geo_cache_backend: str = "memory"  # Options: "redis", "memory", "null"
    geo_cache_ttl: int = 86400  # Cache TTL in seconds (1 day)
    redis_url: str = "redis://localhost:6379/0"

    # Analytics
    stats_default_days: int = 30
    stats_event_limit: int = 500  # Newest events used for breakdowns
    stats_recent_limit: int = 50  # Individual clicks returned for display
    top_referrer_limit: int = 10

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Create settings instance
settings = Settings()
