"""Application configuration settings.

This module provides centralized configuration management using environment
variables with sensible defaults.
"""

import os
from dataclasses import dataclass

from buckaroo_push.webhooks.provider_settings import (
    HASH_METHOD_PROPERTY,
    PUSH_CONTENT_TYPE_PROPERTY,
    SECRET_KEY_LIVE_PROPERTY,
    SECRET_KEY_TEST_PROPERTY,
    WEBSITE_KEY_LIVE_PROPERTY,
    WEBSITE_KEY_TEST_PROPERTY,
)


def _get_bool_env(name: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable.

    Args:
        name: Environment variable name.
        default: Default value if not set.

    Returns:
        Boolean value from environment.
    """
    value = os.getenv(name, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    return default


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        ENVIRONMENT: Deployment environment; development and test use test keys.
        LOG_LEVEL: Logging level.
        LOG_JSON: Render logs as JSON instead of console output.
        BUCKAROO_WEBSITE_KEY_LIVE: Live website key.
        BUCKAROO_WEBSITE_KEY_TEST: Test website key.
        BUCKAROO_SECRET_KEY_LIVE: Live secret key.
        BUCKAROO_SECRET_KEY_TEST: Test secret key.
        BUCKAROO_PUSH_CONTENT_TYPE: Push content type (1=Json, 2=HttpPost, 3=HttpGet).
        BUCKAROO_HASH_METHOD: Form signature digest (1=Sha1, 2=Sha256, 3=Sha512).
        BUCKAROO_WEBHOOK_URL: Push URL registered at Buckaroo.
    """

    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Buckaroo
    BUCKAROO_WEBSITE_KEY_LIVE: str = ""
    BUCKAROO_WEBSITE_KEY_TEST: str = ""
    BUCKAROO_SECRET_KEY_LIVE: str = ""
    BUCKAROO_SECRET_KEY_TEST: str = ""
    BUCKAROO_PUSH_CONTENT_TYPE: str = "2"
    BUCKAROO_HASH_METHOD: str = ""
    BUCKAROO_WEBHOOK_URL: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables.

        Returns:
            Settings instance populated from environment.
        """
        return cls(
            ENVIRONMENT=os.getenv("ENVIRONMENT", "development"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
            LOG_JSON=_get_bool_env("LOG_JSON", default=False),
            BUCKAROO_WEBSITE_KEY_LIVE=os.getenv("BUCKAROO_WEBSITE_KEY_LIVE", ""),
            BUCKAROO_WEBSITE_KEY_TEST=os.getenv("BUCKAROO_WEBSITE_KEY_TEST", ""),
            BUCKAROO_SECRET_KEY_LIVE=os.getenv("BUCKAROO_SECRET_KEY_LIVE", ""),
            BUCKAROO_SECRET_KEY_TEST=os.getenv("BUCKAROO_SECRET_KEY_TEST", ""),
            BUCKAROO_PUSH_CONTENT_TYPE=os.getenv("BUCKAROO_PUSH_CONTENT_TYPE", "2"),
            BUCKAROO_HASH_METHOD=os.getenv("BUCKAROO_HASH_METHOD", ""),
            BUCKAROO_WEBHOOK_URL=os.getenv("BUCKAROO_WEBHOOK_URL", ""),
        )

    def provider_properties(self) -> dict[str, str]:
        """Render the Buckaroo settings as stored provider properties."""
        return {
            WEBSITE_KEY_LIVE_PROPERTY: self.BUCKAROO_WEBSITE_KEY_LIVE,
            WEBSITE_KEY_TEST_PROPERTY: self.BUCKAROO_WEBSITE_KEY_TEST,
            SECRET_KEY_LIVE_PROPERTY: self.BUCKAROO_SECRET_KEY_LIVE,
            SECRET_KEY_TEST_PROPERTY: self.BUCKAROO_SECRET_KEY_TEST,
            PUSH_CONTENT_TYPE_PROPERTY: self.BUCKAROO_PUSH_CONTENT_TYPE,
            HASH_METHOD_PROPERTY: self.BUCKAROO_HASH_METHOD,
        }


# Global settings instance
settings = Settings.from_env()
