"""Push signature verification.

Buckaroo signs pushes in one of two ways, depending on the push content
type configured for the website:

- Form pushes carry ``brq_signature``: a hex digest over the sorted
  ``key=value`` pairs of every ``brq_``, ``add_`` and ``cust_`` field,
  followed by the secret key.
- JSON pushes are authenticated by the provider SDK's push handler. That
  routine is proprietary, so it is consumed through the PushAuthenticator
  protocol instead of being reimplemented here.
"""

import hashlib
import hmac
import time
import uuid
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import structlog

from buckaroo_push.errors import UnsupportedHashMethodError
from buckaroo_push.webhooks.models import HashMethod, JsonPush, VerificationOutcome

logger = structlog.get_logger(__name__)

SIGNATURE_FIELD = "brq_signature"
ALLOWED_FIELD_PREFIXES = ("brq_", "add_", "cust_")

_DIGESTS: dict[HashMethod, Callable[..., Any]] = {
    HashMethod.SHA1: hashlib.sha1,
    HashMethod.SHA256: hashlib.sha256,
    HashMethod.SHA512: hashlib.sha512,
}


class PushAuthenticator(Protocol):
    """Provider capability that authenticates and parses a JSON push.

    Implementations wrap the provider SDK. They must raise
    SignatureAuthenticationError when the push does not authenticate.
    """

    def authenticate_and_parse(
        self,
        body: bytes,
        method: str,
        timestamp: str,
        nonce: str,
        url: str,
        website_key: str,
        secret_key: str,
    ) -> JsonPush: ...


# ============================================================================
# Form signatures
# ============================================================================


def is_signed_field(name: str) -> bool:
    """Check whether a field takes part in the form signature."""
    return name != SIGNATURE_FIELD and name.startswith(ALLOWED_FIELD_PREFIXES)


def canonicalize_fields(fields: Mapping[str, str]) -> dict[str, str]:
    """Filter and sort fields into the canonical signing order.

    Keys are sorted by ordinal comparison, so the result does not depend
    on the order the fields arrived in.

    Args:
        fields: Raw form or query fields.

    Returns:
        Ordered dict of signed fields.
    """
    return {name: fields[name] for name in sorted(fields) if is_signed_field(name)}


def build_signing_string(fields: Mapping[str, str], secret_key: str) -> str:
    """Build the string that is hashed for a form signature.

    Args:
        fields: Raw or canonical fields.
        secret_key: Secret key, appended verbatim unless blank.

    Returns:
        Concatenated ``key=value`` pairs followed by the secret key.
    """
    canonical = canonicalize_fields(fields)
    signing_string = "".join(f"{name}={value}" for name, value in canonical.items())
    if secret_key and secret_key.strip():
        signing_string += secret_key
    return signing_string


def resolve_digest(hash_method: HashMethod | int | None) -> Callable[..., Any]:
    """Look up the hashlib constructor for a configured hash method.

    Raises:
        UnsupportedHashMethodError: If the method is missing or unknown.
    """
    try:
        return _DIGESTS[HashMethod(hash_method)]
    except (ValueError, TypeError, KeyError) as e:
        raise UnsupportedHashMethodError(hash_method) from e


def compute_signature(
    fields: Mapping[str, str],
    secret_key: str,
    hash_method: HashMethod | int | None,
) -> str:
    """Compute the lowercase hex signature for a set of form fields.

    Args:
        fields: Raw or canonical fields.
        secret_key: Secret key of the website.
        hash_method: Configured digest.

    Returns:
        Lowercase hexadecimal digest.
    """
    digest = resolve_digest(hash_method)
    signing_string = build_signing_string(fields, secret_key)
    return digest(signing_string.encode("utf-8")).hexdigest()


def verify_form_signature(
    fields: Mapping[str, str],
    supplied_signature: str,
    secret_key: str,
    hash_method: HashMethod | int | None,
) -> VerificationOutcome:
    """Verify the ``brq_signature`` of a form or query push.

    Args:
        fields: Push fields. The signature field and unsigned fields are
            ignored if present.
        supplied_signature: Value of ``brq_signature``.
        secret_key: Secret key of the website.
        hash_method: Configured digest.

    Returns:
        Valid outcome, or an invalid outcome with the reason.

    Raises:
        UnsupportedHashMethodError: If the hash method is not supported.
    """
    expected = compute_signature(fields, secret_key, hash_method)

    if not supplied_signature:
        logger.warning("push_signature_missing")
        return VerificationOutcome.invalid("Signature is missing.")

    # Constant-time comparison on bytes; hex digests compare case-insensitively
    supplied = supplied_signature.lower().encode("utf-8")
    if hmac.compare_digest(expected.encode("utf-8"), supplied):
        logger.debug("push_signature_verified", field_count=len(fields))
        return VerificationOutcome.ok()

    logger.warning("push_signature_invalid", hash_method=HashMethod(hash_method).name)
    return VerificationOutcome.invalid("Signature was incorrect.")


# ============================================================================
# JSON signatures
# ============================================================================


def generate_timestamp() -> str:
    """Current Unix time in whole seconds."""
    return str(int(time.time()))


def generate_nonce() -> str:
    """Random nonce, 32 lowercase hex characters."""
    return uuid.uuid4().hex


def verify_json_signature(
    authenticator: PushAuthenticator,
    body: bytes,
    *,
    method: str,
    webhook_url: str,
    website_key: str,
    secret_key: str,
) -> JsonPush:
    """Authenticate a JSON push through the provider capability.

    A fresh timestamp and nonce are generated for every call.

    Args:
        authenticator: Provider authentication capability.
        body: Raw request body, unparsed.
        method: HTTP method of the push.
        webhook_url: Push URL registered at the provider.
        website_key: Website key of the merchant.
        secret_key: Secret key of the merchant.

    Returns:
        The parsed, authenticated push.

    Raises:
        SignatureAuthenticationError: If the push does not authenticate.
    """
    timestamp = generate_timestamp()
    nonce = generate_nonce()

    logger.debug(
        "push_json_authenticating",
        body_length=len(body),
        method=method,
        timestamp=timestamp,
    )

    return authenticator.authenticate_and_parse(
        body,
        method,
        timestamp,
        nonce,
        webhook_url,
        website_key,
        secret_key,
    )
