"""Status update processing for Buckaroo pushes.

Sequences invoice lookup, transport selection, parsing, signature
verification and status mapping for one push request:

    Start -> InvoiceLookup -> TransportSelected -> Parsed -> Verified
          -> Mapped -> Logged -> Done

Any failing step short-circuits to Logged with an unsuccessful result.
The audit record is written on every path. Configuration errors are
re-raised after it has been written; everything else becomes a result.
"""

from collections.abc import Callable

import structlog

from buckaroo_push.errors import (
    BuckarooPushError,
    ConfigurationError,
    NoHttpContextError,
    NoInvoiceNumberError,
    SignatureAuthenticationError,
    UnexpectedInternalFault,
    UnsupportedPushContentTypeError,
    is_configuration_error,
)
from buckaroo_push.webhooks.audit import (
    AuditEntry,
    AuditSink,
    StructlogAuditSink,
    audit_scope,
)
from buckaroo_push.webhooks.models import (
    ProviderCredentials,
    PushContentType,
    StatusUpdateResult,
    Transport,
)
from buckaroo_push.webhooks.parser import (
    STATUS_CODE_FIELD,
    STATUS_MESSAGE_FIELD,
    PushRequest,
    find_invoice_number,
    get_invoice_number,
    parse_notification,
)
from buckaroo_push.webhooks.security import (
    PushAuthenticator,
    verify_form_signature,
    verify_json_signature,
)
from buckaroo_push.webhooks.status import map_form_status, map_json_status, parse_status_code

logger = structlog.get_logger(__name__)

NO_HTTP_CONTEXT_STATUS = "Request not available; unable to process status update."
SIGNATURE_INCORRECT_STATUS = "Signature was incorrect."
UNEXPECTED_FAULT_STATUS = "Unexpected error while processing status update."

PushHandler = Callable[[PushRequest, ProviderCredentials, AuditEntry], StatusUpdateResult]


class StatusUpdateProcessor:
    """Processes Buckaroo push notifications into status update results.

    Holds no per-request state; one instance can serve concurrent pushes
    as long as the audit sink can.
    """

    def __init__(
        self,
        authenticator: PushAuthenticator | None = None,
        audit_sink: AuditSink | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            authenticator: Provider capability for JSON pushes. Required
                only when a payment method uses the JSON push content type.
            audit_sink: Destination for incoming payment logs.
        """
        self._authenticator = authenticator
        self._audit_sink = audit_sink or StructlogAuditSink()
        self._handlers: dict[PushContentType, PushHandler] = {
            PushContentType.JSON: self._handle_json,
            PushContentType.HTTP_POST: self._handle_form,
        }
        self._logger = logger.bind(component="status_update_processor")

    def get_invoice_number_from_request(self, request: PushRequest | None) -> str:
        """Get the invoice number of a push without processing it.

        Returns:
            The invoice number, or an empty string if there is none.
        """
        if request is None:
            return ""
        return find_invoice_number(request)

    async def process_status_update(
        self,
        request: PushRequest | None,
        credentials: ProviderCredentials,
    ) -> StatusUpdateResult:
        """Verify a push and map it to a status update result.

        Args:
            request: The incoming push, None if no request is available.
            credentials: Buckaroo settings of the payment method.

        Returns:
            StatusUpdateResult for the push.

        Raises:
            ConfigurationError: If the push content type or hash method
                is not supported. The audit record is written first.
        """
        async with audit_scope(self._audit_sink) as entry:
            if request is None:
                error = NoHttpContextError(NO_HTTP_CONTEXT_STATUS)
                self._logger.warning("push_without_request", **error.to_dict())
                return StatusUpdateResult.failure(error.message)

            try:
                entry.invoice_number = get_invoice_number(request)
            except NoInvoiceNumberError as e:
                self._logger.warning("push_without_invoice_number", query=request.query_params)
                return StatusUpdateResult.failure(e.message)

            log = self._logger.bind(invoice_number=entry.invoice_number)
            result: StatusUpdateResult | None = None

            try:
                handler = self._select_handler(credentials.push_content_type)
                result = handler(request, credentials, entry)
            except BuckarooPushError as e:
                if is_configuration_error(e):
                    log.error("push_configuration_invalid", **e.to_dict())
                    raise
                log.warning("push_rejected", **e.to_dict())
                result = StatusUpdateResult.failure(e.message)
            except Exception as e:
                fault = UnexpectedInternalFault(UNEXPECTED_FAULT_STATUS, original_error=e)
                log.error("push_processing_failed", **fault.to_dict(), exc_info=True)

            if result is None:
                result = StatusUpdateResult.failure(UNEXPECTED_FAULT_STATUS)

            entry.status_code = result.status_code
            log.info(
                "push_processed",
                status_code=result.status_code,
                successful=result.successful,
                outcome=result.outcome.value,
            )
            return result

    def _select_handler(self, push_content_type: PushContentType | None) -> PushHandler:
        handler = self._handlers.get(push_content_type) if push_content_type else None
        if handler is None:
            raise UnsupportedPushContentTypeError(
                push_content_type.name if push_content_type else push_content_type
            )
        return handler

    def _require_authenticator(self) -> PushAuthenticator:
        if self._authenticator is None:
            raise ConfigurationError(
                "No push authenticator configured for JSON pushes",
                setting="authenticator",
            )
        return self._authenticator

    def _handle_json(
        self,
        request: PushRequest,
        credentials: ProviderCredentials,
        entry: AuditEntry,
    ) -> StatusUpdateResult:
        """Handle a push that carries a JSON body."""
        entry.raw_body = request.body.decode("utf-8", errors="replace")
        notification = parse_notification(Transport.JSON, request)
        authenticator = self._require_authenticator()

        try:
            push = verify_json_signature(
                authenticator,
                notification.body_bytes,
                method=request.method,
                webhook_url=credentials.webhook_url,
                website_key=credentials.website_key,
                secret_key=credentials.secret_key,
            )
        except SignatureAuthenticationError as e:
            self._logger.error(
                "push_signature_authentication_failed",
                invoice_number=entry.invoice_number,
                transport=Transport.JSON.value,
                authorization_present=bool(notification.supplied_signature),
                error=e.message,
            )
            return StatusUpdateResult.failure(SIGNATURE_INCORRECT_STATUS, 0)

        return map_json_status(push.status_code, push.status_description)

    def _handle_form(
        self,
        request: PushRequest,
        credentials: ProviderCredentials,
        entry: AuditEntry,
    ) -> StatusUpdateResult:
        """Handle a push that carries form fields."""
        notification = parse_notification(Transport.FORM_POST, request)

        raw_status_code = request.form.get(STATUS_CODE_FIELD, "")
        status_code = parse_status_code(raw_status_code)
        if status_code is None:
            return StatusUpdateResult.failure(f"Invalid status code '{raw_status_code}'", 0)

        outcome = verify_form_signature(
            notification.fields,
            notification.supplied_signature,
            credentials.secret_key,
            credentials.hash_method,
        )
        if not outcome.valid:
            self._logger.error(
                "push_signature_authentication_failed",
                invoice_number=entry.invoice_number,
                transport=Transport.FORM_POST.value,
                reason=outcome.reason,
            )
            return StatusUpdateResult.failure(SIGNATURE_INCORRECT_STATUS, status_code)

        return map_form_status(status_code, request.form.get(STATUS_MESSAGE_FIELD, ""))
