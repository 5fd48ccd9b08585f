"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # FPL API
    fpl_api_base_url: str = "https://fantasy.premierleague.com/api"
    fpl_image_base_url: str = (
        "https://resources.premierleague.com/premierleague/photos/players/110x140"
    )

    # League used for the "points behind the leader" comparison
    league_id: int = 314

    # Server
    port: int = 3000

    # CORS - comma-separated list of allowed origins ("*" allows any)
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    # Cache TTL in seconds
    cache_ttl_bootstrap: int = 3600  # 1 hour for bootstrap-static

    # Upstream requests
    request_timeout: float = 10.0
    max_concurrent_requests: int = 10

    # Gameweeks fetched concurrently per analysis batch
    analysis_batch_size: int = 5

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
