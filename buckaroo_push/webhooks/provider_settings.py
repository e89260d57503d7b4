"""Provider settings loading.

Settings arrive as opaque key/value properties from the settings store.
Live or test keys are picked from the deployment environment.
"""

from collections.abc import Mapping
from enum import IntEnum
from typing import TypeVar

import structlog

from buckaroo_push.webhooks.models import HashMethod, ProviderCredentials, PushContentType

logger = structlog.get_logger(__name__)

E = TypeVar("E", bound=IntEnum)

WEBSITE_KEY_LIVE_PROPERTY = "buckaroowebsitekeylive"
WEBSITE_KEY_TEST_PROPERTY = "buckaroowebsitekeytest"
SECRET_KEY_LIVE_PROPERTY = "buckaroosecretkeylive"
SECRET_KEY_TEST_PROPERTY = "buckaroosecretkeytest"
PUSH_CONTENT_TYPE_PROPERTY = "buckaroopushcontenttype"
HASH_METHOD_PROPERTY = "buckaroohashmethod"

TEST_ENVIRONMENTS = frozenset({"development", "test"})


def uses_test_keys(environment: str) -> bool:
    """Development and test deployments use the test keys."""
    return environment.strip().lower() in TEST_ENVIRONMENTS


def _enum_value(enum_type: type[E], raw: str | None, property_name: str) -> E | None:
    if raw is None or not str(raw).strip():
        return None
    try:
        return enum_type(int(str(raw).strip()))
    except ValueError:
        logger.warning(
            "provider_setting_invalid",
            property=property_name,
            value=raw,
        )
        return None


def load_credentials(
    properties: Mapping[str, str],
    *,
    environment: str,
    webhook_url: str = "",
) -> ProviderCredentials:
    """Build ProviderCredentials from stored properties.

    Args:
        properties: Property name to value, as stored for the provider.
        environment: Deployment environment name.
        webhook_url: Push URL registered at Buckaroo.

    Returns:
        Credentials with keys for the current environment.
    """
    if uses_test_keys(environment):
        website_key = properties.get(WEBSITE_KEY_TEST_PROPERTY, "")
        secret_key = properties.get(SECRET_KEY_TEST_PROPERTY, "")
    else:
        website_key = properties.get(WEBSITE_KEY_LIVE_PROPERTY, "")
        secret_key = properties.get(SECRET_KEY_LIVE_PROPERTY, "")

    credentials = ProviderCredentials(
        website_key=website_key or "",
        secret_key=secret_key or "",
        hash_method=_enum_value(
            HashMethod, properties.get(HASH_METHOD_PROPERTY), HASH_METHOD_PROPERTY
        ),
        push_content_type=_enum_value(
            PushContentType,
            properties.get(PUSH_CONTENT_TYPE_PROPERTY),
            PUSH_CONTENT_TYPE_PROPERTY,
        ),
        webhook_url=webhook_url,
    )

    logger.debug(
        "provider_credentials_loaded",
        test_keys=uses_test_keys(environment),
        hash_method=credentials.hash_method.name if credentials.hash_method else None,
        push_content_type=(
            credentials.push_content_type.name if credentials.push_content_type else None
        ),
    )
    return credentials
