"""Unit tests for configuration module."""

import os
from unittest.mock import patch

from fpl_analyzer.config import Settings, get_settings


class TestSettings:
    """Tests for Settings configuration class."""

    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)

        assert settings.fpl_api_base_url == "https://fantasy.premierleague.com/api"
        assert settings.fpl_image_base_url.endswith("/photos/players/110x140")
        assert settings.league_id == 314
        assert settings.port == 3000
        assert settings.cors_origins == "*"
        assert settings.log_level == "INFO"
        assert settings.cache_ttl_bootstrap == 3600
        assert settings.max_concurrent_requests == 10
        assert settings.analysis_batch_size == 5

    def test_cors_origins_list_wildcard(self):
        settings = Settings(_env_file=None)

        assert settings.cors_origins_list == ["*"]

    def test_cors_origins_list_multiple(self):
        """Multiple CORS origins should be parsed correctly."""
        settings = Settings(cors_origins="http://localhost:3000, https://app.example.com")

        assert settings.cors_origins_list == ["http://localhost:3000", "https://app.example.com"]

    def test_cors_origins_list_strips_whitespace(self):
        """Whitespace around CORS origins should be stripped."""
        settings = Settings(cors_origins="  http://a.com  ,  http://b.com  ")

        assert settings.cors_origins_list == ["http://a.com", "http://b.com"]

    @patch.dict(os.environ, {"FPL_API_BASE_URL": "https://custom.api.com"})
    def test_environment_override(self):
        """Settings should be overridable via environment variables."""
        settings = Settings()

        assert settings.fpl_api_base_url == "https://custom.api.com"

    @patch.dict(os.environ, {"LEAGUE_ID": "9999", "PORT": "8080"})
    def test_league_and_port_override(self):
        settings = Settings()

        assert settings.league_id == 9999
        assert settings.port == 8080

    @patch.dict(os.environ, {"CACHE_TTL_BOOTSTRAP": "600"})
    def test_cache_ttl_override(self):
        """Cache TTL should be configurable via environment."""
        settings = Settings()

        assert settings.cache_ttl_bootstrap == 600


class TestGetSettings:
    """Tests for get_settings function."""

    def test_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        get_settings.cache_clear()
        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_caching(self):
        """get_settings should return the same cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2
