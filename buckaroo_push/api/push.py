"""Buckaroo push endpoint.

Receives push notifications and hands them to the StatusUpdateProcessor.
Buckaroo only needs a receipt, so the endpoint acknowledges every push
that was processed; the result drives order state elsewhere.
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog
from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from buckaroo_push.config import settings
from buckaroo_push.webhooks.models import ProviderCredentials, StatusUpdateResult
from buckaroo_push.webhooks.parser import PushRequest
from buckaroo_push.webhooks.processor import StatusUpdateProcessor
from buckaroo_push.webhooks.provider_settings import load_credentials

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/buckaroo", tags=["Buckaroo"])

# Called with every processed push, e.g. to update order state
ResultListener = Callable[[str, StatusUpdateResult], Awaitable[None] | None]

_processor: StatusUpdateProcessor | None = None
_credentials: ProviderCredentials | None = None
_listeners: list[ResultListener] = []


class PushAcknowledgement(BaseModel):
    """Response returned to Buckaroo."""

    status: str = Field(default="received", description="Receipt status")


# ============================================================================
# Global Instances
# ============================================================================


def get_status_update_processor() -> StatusUpdateProcessor:
    """Get the global processor instance.

    Returns:
        Singleton StatusUpdateProcessor.
    """
    global _processor
    if _processor is None:
        _processor = StatusUpdateProcessor()
    return _processor


def set_status_update_processor(processor: StatusUpdateProcessor | None) -> None:
    """Set the global processor instance.

    Useful for testing and for installing a JSON push authenticator.

    Args:
        processor: StatusUpdateProcessor instance, or None to reset.
    """
    global _processor
    _processor = processor


def get_provider_credentials() -> ProviderCredentials:
    """Get the Buckaroo credentials, loading them from settings once."""
    global _credentials
    if _credentials is None:
        _credentials = load_credentials(
            settings.provider_properties(),
            environment=settings.ENVIRONMENT,
            webhook_url=settings.BUCKAROO_WEBHOOK_URL,
        )
    return _credentials


def set_provider_credentials(credentials: ProviderCredentials | None) -> None:
    """Set the Buckaroo credentials, or None to reload from settings."""
    global _credentials
    _credentials = credentials


def add_result_listener(listener: ResultListener) -> None:
    """Add a listener called with (invoice_number, result) for every push."""
    _listeners.append(listener)


def clear_result_listeners() -> None:
    _listeners.clear()


async def _notify_listeners(invoice_number: str, result: StatusUpdateResult) -> None:
    for listener in list(_listeners):
        try:
            outcome = listener(invoice_number, result)
            if asyncio.iscoroutine(outcome):
                await outcome
        except Exception as e:
            logger.error(
                "push_result_listener_failed",
                invoice_number=invoice_number,
                error=str(e),
                exc_info=True,
            )


# ============================================================================
# Endpoints
# ============================================================================


@router.api_route(
    "/push",
    methods=["GET", "POST"],
    response_model=PushAcknowledgement,
    summary="Receive a Buckaroo push notification",
)
async def receive_push(request: Request) -> PushAcknowledgement:
    """Process a push notification from Buckaroo.

    The response does not reveal whether the push verified.
    """
    push_request = await PushRequest.from_starlette(request)
    processor = get_status_update_processor()

    result = await processor.process_status_update(push_request, get_provider_credentials())
    await _notify_listeners(processor.get_invoice_number_from_request(push_request), result)

    return PushAcknowledgement()
