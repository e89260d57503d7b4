"""HTTP surface for the Buckaroo push service.

This module contains:
- Push endpoint receiving Buckaroo notifications
- Health check endpoint
- Application factory
"""

from buckaroo_push.api.push import (
    PushAcknowledgement,
    add_result_listener,
    clear_result_listeners,
    get_provider_credentials,
    get_status_update_processor,
    set_provider_credentials,
    set_status_update_processor,
)
from buckaroo_push.api.routes import ErrorResponse, app, create_app

__all__ = [
    # Push endpoint
    "PushAcknowledgement",
    "add_result_listener",
    "clear_result_listeners",
    "get_provider_credentials",
    "get_status_update_processor",
    "set_provider_credentials",
    "set_status_update_processor",
    # Application
    "ErrorResponse",
    "app",
    "create_app",
]
