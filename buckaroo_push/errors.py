"""Error taxonomy for Buckaroo push processing.

Exception Hierarchy:
    BuckarooPushError (base)
    ├── NoHttpContextError - No request available to read the push from
    ├── NoInvoiceNumberError - Push carries no invoice number
    ├── NotificationParseError - Push body or fields are malformed
    ├── SignatureAuthenticationError - Push signature did not match
    ├── ProviderStatusFailure - Provider reported a failed payment
    ├── UnexpectedInternalFault - Anything else raised while processing
    └── ConfigurationError - Deployment misconfiguration (not recoverable)
        ├── UnsupportedPushContentTypeError
        └── UnsupportedHashMethodError

Everything except ConfigurationError is resolved into an unsuccessful
StatusUpdateResult by the processor. Configuration errors propagate.
"""

from typing import Any


class BuckarooPushError(Exception):
    """Base exception for all push processing errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error details.
        recoverable: Whether the error is a per-request condition.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


class NoHttpContextError(BuckarooPushError):
    """No HTTP request is available to read the push from."""


class NoInvoiceNumberError(BuckarooPushError):
    """Neither the form nor the query string carries an invoice number."""


class NotificationParseError(BuckarooPushError):
    """The push could not be read in the configured transport.

    Attributes:
        transport: Transport that was being parsed.
    """

    def __init__(
        self,
        message: str,
        *,
        transport: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.transport = transport

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["transport"] = self.transport
        return base


class SignatureAuthenticationError(BuckarooPushError):
    """The push signature does not match the one computed locally."""


class ProviderStatusFailure(BuckarooPushError):
    """The provider reported a status outside the success allow-list.

    This is a business outcome. The processor reports it through
    StatusUpdateResult; StatusUpdateResult.raise_for_status converts an
    unsuccessful result for callers that prefer exceptions.

    Attributes:
        status_code: Provider status code.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["status_code"] = self.status_code
        return base


class UnexpectedInternalFault(BuckarooPushError):
    """Wraps an unexpected exception raised while processing a push.

    Attributes:
        original_error: The exception that was caught.
    """

    def __init__(
        self,
        message: str,
        *,
        original_error: Exception | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.original_error = original_error

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["original_error"] = (
            f"{type(self.original_error).__name__}: {self.original_error}"
            if self.original_error
            else None
        )
        return base


class ConfigurationError(BuckarooPushError):
    """Provider settings are invalid for this deployment."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=False)
        self.setting = setting
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base.update({"setting": self.setting, "value": repr(self.value)})
        return base


class UnsupportedPushContentTypeError(ConfigurationError):
    """Configured push content type has no handler."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Unknown push content type '{value}'",
            setting="push_content_type",
            value=value,
        )


class UnsupportedHashMethodError(ConfigurationError):
    """Configured hash method is not one of SHA-1, SHA-256 or SHA-512."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Hash method '{value}' is not supported.",
            setting="hash_method",
            value=value,
        )


def is_configuration_error(error: Exception) -> bool:
    """Check whether an error must propagate instead of becoming a result."""
    return isinstance(error, ConfigurationError)
