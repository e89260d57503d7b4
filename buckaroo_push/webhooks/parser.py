"""Push notification parsing.

Reads a push from one of the three transports Buckaroo can be configured
to use and produces a transport-agnostic RawNotification. The JSON body is
never parsed here; the raw bytes are the signing input.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import ValidationError
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from buckaroo_push.errors import NoInvoiceNumberError, NotificationParseError
from buckaroo_push.webhooks.models import JsonPush, RawNotification, Transport
from buckaroo_push.webhooks.security import SIGNATURE_FIELD, canonicalize_fields

logger = structlog.get_logger(__name__)

INVOICE_NUMBER_FIELD = "brq_invoicenumber"
STATUS_CODE_FIELD = "brq_statuscode"
STATUS_MESSAGE_FIELD = "brq_statusmessage"

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@dataclass
class PushRequest:
    """Transport-agnostic view of an incoming push request.

    Attributes:
        method: HTTP method.
        url: Full request URL.
        headers: Request headers (lowercase keys).
        query_params: Query string parameters.
        form: Form fields, or None when the request has no form content.
        body: Raw request body.
    """

    method: str = "POST"
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    query_params: dict[str, str] = field(default_factory=dict)
    form: dict[str, str] | None = None
    body: bytes = b""

    @property
    def has_form_content(self) -> bool:
        return self.form is not None

    @staticmethod
    def is_form_content_type(content_type: str | None) -> bool:
        """Check whether a Content-Type header denotes form content."""
        if not content_type:
            return False
        media_type = content_type.split(";", 1)[0].strip().lower()
        return media_type in FORM_CONTENT_TYPES

    @classmethod
    async def from_starlette(cls, request: Any) -> "PushRequest":
        """Build a PushRequest from a Starlette/FastAPI request.

        The body is read before the form; Starlette caches it, so both
        remain available. A form body that cannot be parsed leaves
        ``form`` as None so the push is still processed and audited.

        Args:
            request: starlette.requests.Request instance.

        Returns:
            PushRequest with body, query and (if present) form fields.
        """
        headers = {k.lower(): v for k, v in request.headers.items()}
        body = await request.body()

        form: dict[str, str] | None = None
        if cls.is_form_content_type(headers.get("content-type")):
            try:
                form_data = await request.form()
            except (HTTPException, MultiPartException) as e:
                logger.warning(
                    "push_form_unreadable",
                    content_type=headers.get("content-type"),
                    error=str(e),
                )
            else:
                form = {k: str(v) for k, v in form_data.items()}

        return cls(
            method=request.method,
            url=str(request.url),
            headers=headers,
            query_params=dict(request.query_params),
            form=form,
            body=body,
        )


# ============================================================================
# Invoice number
# ============================================================================


def find_invoice_number(request: PushRequest) -> str:
    """Look up the invoice number, form first, then query string.

    Returns:
        The invoice number, or an empty string if neither has one.
    """
    invoice_number = ""
    if request.has_form_content:
        invoice_number = request.form.get(INVOICE_NUMBER_FIELD, "")

    if not invoice_number:
        invoice_number = request.query_params.get(INVOICE_NUMBER_FIELD, "")

    return invoice_number.strip()


def get_invoice_number(request: PushRequest) -> str:
    """Get the invoice number of a push.

    Raises:
        NoInvoiceNumberError: If neither form nor query has a value.
    """
    invoice_number = find_invoice_number(request)
    if not invoice_number:
        raise NoInvoiceNumberError(
            "No invoice number in request found; unable to process status update.",
            details={"field": INVOICE_NUMBER_FIELD},
        )
    return invoice_number


# ============================================================================
# Transports
# ============================================================================


def _parse_json(request: PushRequest) -> RawNotification:
    if not request.body:
        raise NotificationParseError("Push body is empty", transport=Transport.JSON.value)

    return RawNotification(
        transport=Transport.JSON,
        body_bytes=request.body,
        supplied_signature=request.headers.get("authorization", ""),
    )


def _parse_fields(transport: Transport, values: Mapping[str, str]) -> RawNotification:
    return RawNotification(
        transport=transport,
        fields=canonicalize_fields(values),
        supplied_signature=values.get(SIGNATURE_FIELD, ""),
    )


def _parse_form(request: PushRequest) -> RawNotification:
    if not request.has_form_content:
        raise NotificationParseError(
            "Push has no form content", transport=Transport.FORM_POST.value
        )
    return _parse_fields(Transport.FORM_POST, request.form)


def _parse_query(request: PushRequest) -> RawNotification:
    return _parse_fields(Transport.QUERY_GET, request.query_params)


_PARSERS = {
    Transport.JSON: _parse_json,
    Transport.FORM_POST: _parse_form,
    Transport.QUERY_GET: _parse_query,
}


def parse_notification(transport: Transport, request: PushRequest) -> RawNotification:
    """Read a push from the request in the given transport.

    Args:
        transport: Transport selected by configuration.
        request: Incoming request.

    Returns:
        RawNotification with raw body (JSON) or signed fields (form/query).

    Raises:
        NotificationParseError: If the request does not carry the transport.
    """
    notification = _PARSERS[transport](request)
    logger.debug(
        "push_parsed",
        transport=transport.value,
        field_count=len(notification.fields),
        body_length=len(notification.body_bytes),
    )
    return notification


# ============================================================================
# JSON push document
# ============================================================================


def parse_json_push(body: bytes) -> JsonPush:
    """Parse a Buckaroo JSON push document.

    The document has the shape::

        {"Transaction": {"Key": "...", "Invoice": "...", "IsTest": false,
                         "Status": {"Code": {"Code": 190,
                                             "Description": "Success"}}}}

    Intended for PushAuthenticator implementations, after authentication.

    Raises:
        NotificationParseError: If the body is not a valid push document.
    """
    try:
        document = json.loads(body)
        transaction = document["Transaction"]
        code = transaction["Status"]["Code"]
        return JsonPush(
            status_code=code["Code"],
            status_description=code.get("Description") or "",
            invoice=transaction.get("Invoice"),
            transaction_key=transaction.get("Key"),
            is_test=bool(transaction.get("IsTest", False)),
        )
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise NotificationParseError(
            f"Push body is not valid JSON: {e}", transport=Transport.JSON.value
        ) from e
    except (KeyError, TypeError, AttributeError) as e:
        raise NotificationParseError(
            f"Push body is missing transaction status: {e}",
            transport=Transport.JSON.value,
        ) from e
    except ValidationError as e:
        raise NotificationParseError(
            "Push transaction status is invalid",
            transport=Transport.JSON.value,
            details={"errors": e.errors(include_url=False)},
        ) from e
