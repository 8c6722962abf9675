"""Configuration Manager for Hoarder Social Relay.

Centralized configuration loading from environment variables with sensible defaults.
All configuration is validated at load time to fail fast on invalid values.
A platform whose credentials are missing is silently disabled.
"""

import os
from dataclasses import dataclass

from src.core.exceptions import ConfigurationError

DEFAULT_BLUESKY_API_BASE_URL = "https://bsky.social/xrpc"
DEFAULT_LINKEDIN_API_URL = "https://api.linkedin.com/v2/ugcPosts"
DEFAULT_PORT = 3000


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Bookmark store:
        hoarder_api_base_url: Base URL of the Hoarder REST API.
        hoarder_api_token: Bearer token for the Hoarder API.

    Platforms (each disabled when its credentials are empty):
        bluesky_username / bluesky_password: Bluesky login (app password).
        linkedin_access_token / linkedin_user_urn: LinkedIn member credentials.

    Optional (with defaults):
        bluesky_api_base_url: XRPC endpoint of the Bluesky PDS.
        linkedin_api_url: LinkedIn UGC posts endpoint.
        port: Port the webhook server listens on.
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR).
    """

    hoarder_api_base_url: str = ""
    hoarder_api_token: str = ""
    bluesky_username: str = ""
    bluesky_password: str = ""
    bluesky_api_base_url: str = DEFAULT_BLUESKY_API_BASE_URL
    linkedin_access_token: str = ""
    linkedin_user_urn: str = ""
    linkedin_api_url: str = DEFAULT_LINKEDIN_API_URL
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.hoarder_api_base_url = self.hoarder_api_base_url.rstrip("/")
        self.bluesky_api_base_url = self.bluesky_api_base_url.rstrip("/")

        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level.upper() not in valid_log_levels:
            raise ConfigurationError(
                f"Invalid LOG_LEVEL '{self.log_level}'. "
                f"Must be one of: {', '.join(sorted(valid_log_levels))}"
            )
        self.log_level = self.log_level.upper()

        if not 1 <= self.port <= 65535:
            raise ConfigurationError(f"PORT must be between 1 and 65535, got {self.port}")

    @property
    def bluesky_enabled(self) -> bool:
        """True when both Bluesky credentials are set."""
        return bool(self.bluesky_username and self.bluesky_password)

    @property
    def linkedin_enabled(self) -> bool:
        """True when both LinkedIn credentials are set."""
        return bool(self.linkedin_access_token and self.linkedin_user_urn)

    def enabled_platforms(self) -> list[str]:
        """Names of the platforms that will receive posts."""
        platforms = []
        if self.bluesky_enabled:
            platforms.append("bluesky")
        if self.linkedin_enabled:
            platforms.append("linkedin")
        return platforms


def load_config() -> Config:
    """Load configuration from environment variables.

    Returns:
        Config object with all settings loaded.

    Raises:
        ConfigurationError: If values are invalid.
    """

    def get_int(key: str, default: int) -> int:
        """Parse int from env var with default."""
        value = os.environ.get(key)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be a valid integer, got '{value}'")

    return Config(
        hoarder_api_base_url=os.environ.get("HOARDER_API_BASE_URL", ""),
        hoarder_api_token=os.environ.get("HOARDER_API_TOKEN", ""),
        bluesky_username=os.environ.get("BLUESKY_USERNAME", ""),
        bluesky_password=os.environ.get("BLUESKY_PASSWORD", ""),
        bluesky_api_base_url=os.environ.get(
            "BLUESKY_API_BASE_URL", DEFAULT_BLUESKY_API_BASE_URL
        ),
        linkedin_access_token=os.environ.get("LINKEDIN_ACCESS_TOKEN", ""),
        linkedin_user_urn=os.environ.get("LINKEDIN_USER_URN", ""),
        linkedin_api_url=os.environ.get("LINKEDIN_API_URL", DEFAULT_LINKEDIN_API_URL),
        port=get_int("PORT", DEFAULT_PORT),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )


# Singleton instance for convenience
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Loads configuration on first call and caches it for subsequent calls.
    Use reset_config() to force a reload.

    Returns:
        The global Config instance.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration instance.

    Forces the next get_config() call to reload from environment variables.
    Useful for testing.
    """
    global _config
    _config = None
