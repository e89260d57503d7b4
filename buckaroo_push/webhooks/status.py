"""Buckaroo status code mapping.

Translates provider status codes into StatusUpdateResult. The success
allow-lists differ per transport and are kept separate:

- JSON pushes and payment request responses: 190, 790, 791
- Form pushes: 190, 790
"""

from enum import IntEnum

import structlog

from buckaroo_push.webhooks.models import (
    PaymentRequestResult,
    StatusOutcome,
    StatusUpdateResult,
)

logger = structlog.get_logger(__name__)


class BuckarooStatusCode(IntEnum):
    """Documented Buckaroo transaction status codes."""

    SUCCESS = 190
    FAILED = 490
    VALIDATION_FAILURE = 491
    TECHNICAL_FAILURE = 492
    REJECTED = 690
    PENDING_INPUT = 790
    PENDING_PROCESSING = 791
    AWAITING_CONSUMER = 792
    ON_HOLD = 793
    CANCELLED_BY_USER = 890
    CANCELLED_BY_MERCHANT = 891


STATUS_DESCRIPTIONS: dict[int, str] = {
    BuckarooStatusCode.SUCCESS: "Success",
    BuckarooStatusCode.FAILED: "Failed",
    BuckarooStatusCode.VALIDATION_FAILURE: "Validation failure",
    BuckarooStatusCode.TECHNICAL_FAILURE: "Technical failure",
    BuckarooStatusCode.REJECTED: "Rejected",
    BuckarooStatusCode.PENDING_INPUT: "Pending input",
    BuckarooStatusCode.PENDING_PROCESSING: "Pending processing",
    BuckarooStatusCode.AWAITING_CONSUMER: "Awaiting consumer",
    BuckarooStatusCode.ON_HOLD: "On hold",
    BuckarooStatusCode.CANCELLED_BY_USER: "Cancelled by user",
    BuckarooStatusCode.CANCELLED_BY_MERCHANT: "Cancelled by merchant",
}

JSON_SUCCESS_CODES = frozenset({190, 790, 791})
FORM_SUCCESS_CODES = frozenset({190, 790})

_PENDING_CODES = frozenset({790, 791, 792, 793})


def classify_status(status_code: int | None) -> StatusOutcome:
    """Classify a status code as success, pending or failure.

    Unknown codes are failures.
    """
    if status_code == BuckarooStatusCode.SUCCESS:
        return StatusOutcome.SUCCESS
    if status_code in _PENDING_CODES:
        return StatusOutcome.PENDING
    return StatusOutcome.FAILURE


def describe_status(status_code: int) -> str:
    """Default description for a status code."""
    return STATUS_DESCRIPTIONS.get(status_code, f"Unknown status code {status_code}")


def parse_status_code(value: str | int | None) -> int | None:
    """Parse a status code, returning None when it is not an integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def map_status(
    status_code: int | None,
    description: str | None,
    *,
    success_codes: frozenset[int] = JSON_SUCCESS_CODES,
) -> StatusUpdateResult:
    """Map a provider status to a StatusUpdateResult.

    The provider's description is preserved verbatim as the status message.

    Args:
        status_code: Provider status code, None if malformed.
        description: Provider status description.
        success_codes: Allow-list of codes that count as successful.

    Returns:
        StatusUpdateResult; never raises for unknown codes.
    """
    if status_code is None:
        return StatusUpdateResult.failure(description or "", 0)

    successful = status_code in success_codes
    if not successful:
        logger.info(
            "push_status_not_successful",
            status_code=status_code,
            outcome=classify_status(status_code).value,
        )

    return StatusUpdateResult(
        status=description if description is not None else describe_status(status_code),
        status_code=status_code,
        successful=successful,
        outcome=classify_status(status_code),
    )


def map_json_status(status_code: int | None, description: str | None) -> StatusUpdateResult:
    """Map the status of a JSON push."""
    return map_status(status_code, description, success_codes=JSON_SUCCESS_CODES)


def map_form_status(status_code: int | None, description: str | None) -> StatusUpdateResult:
    """Map the status of a form push."""
    return map_status(status_code, description, success_codes=FORM_SUCCESS_CODES)


def map_transaction_response(
    status_code: int | None,
    description: str | None,
    redirect_url: str | None,
    fail_url: str,
) -> PaymentRequestResult:
    """Map the response to a payment request.

    A response is successful only with an allowed status code and a
    redirect URL to send the customer to.

    Args:
        status_code: Status code of the transaction response.
        description: Status description of the transaction response.
        redirect_url: Redirect URL from the required action, if any.
        fail_url: Where to send the customer on failure.

    Returns:
        PaymentRequestResult pointing at the redirect or fail URL.
    """
    if (
        status_code is None
        or status_code not in JSON_SUCCESS_CODES
        or not redirect_url
        or not redirect_url.strip()
    ):
        return PaymentRequestResult(
            successful=False,
            redirect_url=fail_url,
            error_message=description,
        )

    return PaymentRequestResult(successful=True, redirect_url=redirect_url)
