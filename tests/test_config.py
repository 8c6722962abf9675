"""Tests for Configuration Manager."""

import pytest

from src.core.config import (
    DEFAULT_BLUESKY_API_BASE_URL,
    DEFAULT_LINKEDIN_API_URL,
    Config,
    ConfigurationError,
    get_config,
    load_config,
    reset_config,
)


class TestConfigDefaults:
    def test_config_has_correct_defaults(self):
        config = Config()

        assert config.hoarder_api_base_url == ""
        assert config.bluesky_api_base_url == DEFAULT_BLUESKY_API_BASE_URL
        assert config.linkedin_api_url == DEFAULT_LINKEDIN_API_URL
        assert config.port == 3000
        assert config.log_level == "INFO"

    def test_base_urls_lose_trailing_slash(self):
        config = Config(
            hoarder_api_base_url="https://hoarder.local/api/v1/",
            bluesky_api_base_url="https://pds.local/xrpc/",
        )
        assert config.hoarder_api_base_url == "https://hoarder.local/api/v1"
        assert config.bluesky_api_base_url == "https://pds.local/xrpc"


class TestConfigValidation:
    def test_config_validates_log_level(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config(log_level="LOUD")
        assert "Invalid LOG_LEVEL" in str(exc_info.value)

    def test_config_normalizes_log_level_case(self):
        assert Config(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("port", [0, -1, 70000])
    def test_config_rejects_out_of_range_port(self, port):
        with pytest.raises(ConfigurationError, match="PORT"):
            Config(port=port)


class TestPlatformsEnabled:
    def test_nothing_enabled_without_credentials(self):
        config = Config()
        assert config.bluesky_enabled is False
        assert config.linkedin_enabled is False
        assert config.enabled_platforms() == []

    def test_bluesky_needs_both_username_and_password(self):
        assert Config(bluesky_username="me.bsky.social").bluesky_enabled is False
        assert Config(bluesky_password="pw").bluesky_enabled is False
        config = Config(bluesky_username="me.bsky.social", bluesky_password="pw")
        assert config.bluesky_enabled is True

    def test_linkedin_needs_token_and_urn(self):
        assert Config(linkedin_access_token="tok").linkedin_enabled is False
        config = Config(linkedin_access_token="tok", linkedin_user_urn="abc")
        assert config.linkedin_enabled is True
        assert config.enabled_platforms() == ["linkedin"]


class TestLoadConfig:
    def test_loads_from_environment(self, monkeypatch):
        monkeypatch.setenv("HOARDER_API_BASE_URL", "https://hoarder.local/api/v1")
        monkeypatch.setenv("HOARDER_API_TOKEN", "secret")
        monkeypatch.setenv("BLUESKY_USERNAME", "me.bsky.social")
        monkeypatch.setenv("BLUESKY_PASSWORD", "app-pw")
        monkeypatch.setenv("LINKEDIN_ACCESS_TOKEN", "li-token")
        monkeypatch.setenv("LINKEDIN_USER_URN", "abc123")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("LOG_LEVEL", "warning")

        config = load_config()

        assert config.hoarder_api_base_url == "https://hoarder.local/api/v1"
        assert config.hoarder_api_token == "secret"
        assert config.bluesky_enabled
        assert config.linkedin_enabled
        assert config.port == 8080
        assert config.log_level == "WARNING"

    def test_invalid_port_raises(self, monkeypatch):
        monkeypatch.setenv("PORT", "eighty")
        with pytest.raises(ConfigurationError, match="PORT must be a valid integer"):
            load_config()

    def test_empty_port_uses_default(self, monkeypatch):
        monkeypatch.setenv("PORT", "")
        assert load_config().port == 3000


class TestConfigSingleton:
    def test_get_config_caches(self):
        assert get_config() is get_config()

    def test_reset_config_reloads(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("PORT", "4000")
        reset_config()
        second = get_config()
        assert second is not first
        assert second.port == 4000
