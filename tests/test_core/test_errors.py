"""Tests for the push error taxonomy."""

import pytest

from buckaroo_push.errors import (
    BuckarooPushError,
    ConfigurationError,
    NoHttpContextError,
    NoInvoiceNumberError,
    NotificationParseError,
    ProviderStatusFailure,
    SignatureAuthenticationError,
    UnexpectedInternalFault,
    UnsupportedHashMethodError,
    UnsupportedPushContentTypeError,
    is_configuration_error,
)


class TestBuckarooPushError:
    """Tests for the base error."""

    def test_basic_creation(self) -> None:
        """Test basic error creation."""
        error = BuckarooPushError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.recoverable is True
        assert error.details == {}

    def test_to_dict(self) -> None:
        """Test conversion to dictionary."""
        error = BuckarooPushError("Test error", details={"key": "value"})
        result = error.to_dict()
        assert result["error_type"] == "BuckarooPushError"
        assert result["message"] == "Test error"
        assert result["details"] == {"key": "value"}


class TestSubclasses:
    """Tests for specific error kinds."""

    @pytest.mark.parametrize(
        "error_type",
        [
            NoHttpContextError,
            NoInvoiceNumberError,
            SignatureAuthenticationError,
        ],
    )
    def test_request_errors_are_recoverable(self, error_type) -> None:
        error = error_type("x")
        assert isinstance(error, BuckarooPushError)
        assert error.recoverable is True
        assert is_configuration_error(error) is False

    def test_parse_error_transport(self) -> None:
        error = NotificationParseError("bad", transport="json")
        assert error.to_dict()["transport"] == "json"

    def test_provider_status_failure(self) -> None:
        error = ProviderStatusFailure("Failed", status_code=490)
        assert error.to_dict()["status_code"] == 490

    def test_unexpected_fault(self) -> None:
        error = UnexpectedInternalFault("oops", original_error=KeyError("k"))
        assert error.to_dict()["original_error"] == "KeyError: 'k'"
        assert UnexpectedInternalFault("oops").to_dict()["original_error"] is None


class TestConfigurationErrors:
    """Tests for configuration errors."""

    def test_push_content_type(self) -> None:
        error = UnsupportedPushContentTypeError("HTTP_GET")
        assert isinstance(error, ConfigurationError)
        assert error.recoverable is False
        assert error.message == "Unknown push content type 'HTTP_GET'"
        assert error.to_dict()["setting"] == "push_content_type"
        assert is_configuration_error(error) is True

    def test_hash_method(self) -> None:
        error = UnsupportedHashMethodError(9)
        assert error.message == "Hash method '9' is not supported."
        assert error.value == 9
        assert error.to_dict()["value"] == "9"
