"""Buckaroo push (webhook) verification.

This module provides:
- PushRequest: Transport-agnostic view of an incoming push
- Signature verification for form pushes and the JSON push capability
- Status code mapping to StatusUpdateResult
- StatusUpdateProcessor: End-to-end processing with guaranteed audit logging
"""

from buckaroo_push.webhooks.audit import (
    AuditSink,
    IncomingPaymentLog,
    InMemoryAuditSink,
    StructlogAuditSink,
    audit_scope,
)
from buckaroo_push.webhooks.models import (
    HashMethod,
    JsonPush,
    PaymentRequestResult,
    ProviderCredentials,
    PushContentType,
    RawNotification,
    StatusOutcome,
    StatusUpdateResult,
    Transport,
    VerificationOutcome,
)
from buckaroo_push.webhooks.parser import (
    PushRequest,
    get_invoice_number,
    parse_json_push,
    parse_notification,
)
from buckaroo_push.webhooks.processor import StatusUpdateProcessor
from buckaroo_push.webhooks.provider_settings import load_credentials
from buckaroo_push.webhooks.security import (
    PushAuthenticator,
    canonicalize_fields,
    compute_signature,
    verify_form_signature,
    verify_json_signature,
)
from buckaroo_push.webhooks.status import (
    FORM_SUCCESS_CODES,
    JSON_SUCCESS_CODES,
    BuckarooStatusCode,
    map_status,
    map_transaction_response,
)

__all__ = [
    # Models
    "HashMethod",
    "JsonPush",
    "PaymentRequestResult",
    "ProviderCredentials",
    "PushContentType",
    "RawNotification",
    "StatusOutcome",
    "StatusUpdateResult",
    "Transport",
    "VerificationOutcome",
    # Parsing
    "PushRequest",
    "get_invoice_number",
    "parse_json_push",
    "parse_notification",
    # Security
    "PushAuthenticator",
    "canonicalize_fields",
    "compute_signature",
    "verify_form_signature",
    "verify_json_signature",
    # Status
    "BuckarooStatusCode",
    "FORM_SUCCESS_CODES",
    "JSON_SUCCESS_CODES",
    "map_status",
    "map_transaction_response",
    # Audit
    "AuditSink",
    "IncomingPaymentLog",
    "InMemoryAuditSink",
    "StructlogAuditSink",
    "audit_scope",
    # Processing
    "StatusUpdateProcessor",
    "load_credentials",
]
