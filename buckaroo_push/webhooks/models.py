"""Push notification models and enums.

Defines the configuration enums stored per payment service provider,
the request-scoped notification records and the result returned to
the order process.
"""

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field

from buckaroo_push.errors import ProviderStatusFailure


class HashMethod(IntEnum):
    """Digest used by Buckaroo to sign form pushes."""

    SHA1 = 1
    SHA256 = 2
    SHA512 = 3


class PushContentType(IntEnum):
    """Encoding of the push request configured in the Buckaroo plaza."""

    JSON = 1  # Raw JSON body
    HTTP_POST = 2  # Form fields
    HTTP_GET = 3  # Query string


class Transport(str, Enum):
    """Transport a notification was read from."""

    JSON = "json"
    FORM_POST = "form_post"
    QUERY_GET = "query_get"


class StatusOutcome(str, Enum):
    """Tri-state classification of a provider status code."""

    SUCCESS = "success"
    PENDING = "pending"
    FAILURE = "failure"


class ProviderCredentials(BaseModel):
    """Buckaroo settings for one payment method.

    Keys are already resolved for the current environment (live or test).
    Enum settings are None when absent or holding an unknown value.
    """

    model_config = ConfigDict(frozen=True)

    website_key: str = Field(default="", description="Website key")
    secret_key: str = Field(default="", description="Secret key")
    hash_method: HashMethod | None = Field(
        default=None,
        description="Digest for form push signatures",
    )
    push_content_type: PushContentType | None = Field(
        default=None,
        description="Encoding Buckaroo uses for push requests",
    )
    webhook_url: str = Field(default="", description="Push URL registered at Buckaroo")


class RawNotification(BaseModel):
    """A push as read from the request, before verification."""

    model_config = ConfigDict(frozen=True)

    transport: Transport
    body_bytes: bytes = b""
    fields: dict[str, str] = Field(default_factory=dict)
    supplied_signature: str = ""


class VerificationOutcome(BaseModel):
    """Result of a signature check."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> "VerificationOutcome":
        return cls(valid=True)

    @classmethod
    def invalid(cls, reason: str) -> "VerificationOutcome":
        return cls(valid=False, reason=reason)


class JsonPush(BaseModel):
    """An authenticated JSON push."""

    status_code: int = Field(..., description="Buckaroo status code")
    status_description: str = Field(default="", description="Status description")
    invoice: str | None = Field(default=None, description="Invoice number")
    transaction_key: str | None = Field(default=None, description="Transaction key")
    is_test: bool = Field(default=False, description="Push from the test environment")


class StatusUpdateResult(BaseModel):
    """Outcome of processing a push, returned to the order process."""

    status: str = Field(default="", description="Human-readable status message")
    status_code: int = Field(default=0, description="Provider status code, 0 if unknown")
    successful: bool = Field(default=False, description="Whether the payment succeeded")
    outcome: StatusOutcome = Field(
        default=StatusOutcome.FAILURE,
        description="Success, pending or failure",
    )

    @classmethod
    def failure(cls, status: str, status_code: int = 0) -> "StatusUpdateResult":
        """Create an unsuccessful result."""
        return cls(
            status=status,
            status_code=status_code,
            successful=False,
            outcome=StatusOutcome.FAILURE,
        )

    def raise_for_status(self) -> None:
        """Raise ProviderStatusFailure if the payment was not successful."""
        if not self.successful:
            raise ProviderStatusFailure(
                self.status or "Payment was not successful",
                status_code=self.status_code,
            )


class PaymentRequestResult(BaseModel):
    """Mapped response to an outbound payment request."""

    successful: bool
    redirect_url: str
    error_message: str | None = None
