"""Tests for Buckaroo status mapping."""

import pytest

from buckaroo_push.errors import ProviderStatusFailure
from buckaroo_push.webhooks.models import StatusOutcome
from buckaroo_push.webhooks.status import (
    FORM_SUCCESS_CODES,
    JSON_SUCCESS_CODES,
    BuckarooStatusCode,
    classify_status,
    describe_status,
    map_form_status,
    map_json_status,
    map_status,
    map_transaction_response,
    parse_status_code,
)


class TestAllowLists:
    """Tests for the per-transport success allow-lists."""

    def test_json_allow_list(self):
        """Test the JSON allow-list."""
        assert JSON_SUCCESS_CODES == {190, 790, 791}

    def test_form_allow_list(self):
        """Test the form allow-list is not unified with the JSON one."""
        assert FORM_SUCCESS_CODES == {190, 790}


class TestClassifyStatus:
    """Tests for tri-state classification."""

    def test_success(self):
        assert classify_status(190) == StatusOutcome.SUCCESS

    @pytest.mark.parametrize("code", [790, 791, 792, 793])
    def test_pending(self, code):
        assert classify_status(code) == StatusOutcome.PENDING

    @pytest.mark.parametrize("code", [490, 491, 492, 690, 890, 891, 0, 12345, None])
    def test_failure(self, code):
        assert classify_status(code) == StatusOutcome.FAILURE


class TestParseStatusCode:
    """Tests for parse_status_code."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("190", 190),
            (" 791 ", 791),
            (490, 490),
            ("", None),
            ("abc", None),
            ("19.0", None),
            (None, None),
            (True, None),
        ],
    )
    def test_values(self, value, expected):
        assert parse_status_code(value) == expected


class TestMapStatus:
    """Tests for map_status and its transport variants."""

    def test_json_success(self):
        """Test 190 on the JSON path."""
        result = map_json_status(190, "Success")

        assert result.successful is True
        assert result.status == "Success"
        assert result.status_code == 190
        assert result.outcome == StatusOutcome.SUCCESS

    def test_json_791_is_successful(self):
        """Test pending processing counts as success on the JSON path."""
        result = map_json_status(791, "Pending processing")

        assert result.successful is True
        assert result.status_code == 791
        assert result.outcome == StatusOutcome.PENDING

    def test_form_791_is_not_successful(self):
        """Test the form path uses its smaller allow-list."""
        result = map_form_status(791, "Pending processing")

        assert result.successful is False
        assert result.status_code == 791

    def test_form_790_is_successful(self):
        """Test 790 is successful on the form path."""
        assert map_form_status(790, "Pending input").successful is True

    def test_failure_preserves_description(self):
        """Test the provider description is kept verbatim."""
        result = map_json_status(490, "  Failed: card declined ")

        assert result.successful is False
        assert result.status == "  Failed: card declined "
        assert result.outcome == StatusOutcome.FAILURE

    def test_unknown_code_is_failure(self):
        """Test unknown codes never raise."""
        result = map_status(999, "Whatever")

        assert result.successful is False
        assert result.status_code == 999

    def test_missing_code(self):
        """Test a malformed code maps to a zero-code failure."""
        result = map_status(None, "Broken")

        assert result.successful is False
        assert result.status_code == 0
        assert result.status == "Broken"

    def test_default_description(self):
        """Test a missing description falls back to the code table."""
        assert map_status(890, None).status == "Cancelled by user"

    def test_describe_unknown(self):
        assert describe_status(1) == "Unknown status code 1"

    def test_status_code_enum(self):
        assert BuckarooStatusCode(190) is BuckarooStatusCode.SUCCESS


class TestRaiseForStatus:
    """Tests for StatusUpdateResult.raise_for_status."""

    def test_successful_result_does_not_raise(self):
        map_json_status(190, "Success").raise_for_status()

    def test_failed_result_raises(self):
        """Test the provider code and message travel with the error."""
        with pytest.raises(ProviderStatusFailure) as exc_info:
            map_form_status(490, "Failed").raise_for_status()

        assert exc_info.value.message == "Failed"
        assert exc_info.value.status_code == 490


class TestMapTransactionResponse:
    """Tests for payment request response mapping."""

    def test_success_with_redirect(self):
        """Test allowed code plus redirect URL."""
        result = map_transaction_response(
            791, "Pending", "https://checkout.buckaroo.nl/x", "https://shop/fail"
        )

        assert result.successful is True
        assert result.redirect_url == "https://checkout.buckaroo.nl/x"
        assert result.error_message is None

    @pytest.mark.parametrize("redirect_url", [None, "", "   "])
    def test_missing_redirect_is_failure(self, redirect_url):
        """Test a success code without redirect fails."""
        result = map_transaction_response(190, "Success", redirect_url, "https://shop/fail")

        assert result.successful is False
        assert result.redirect_url == "https://shop/fail"

    @pytest.mark.parametrize("code", [None, 490, 792])
    def test_disallowed_code(self, code):
        """Test disallowed codes redirect to the fail URL with the description."""
        result = map_transaction_response(code, "Rejected", "https://x", "https://shop/fail")

        assert result.successful is False
        assert result.redirect_url == "https://shop/fail"
        assert result.error_message == "Rejected"
