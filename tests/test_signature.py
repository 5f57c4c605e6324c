"""Unit tests for x402_facilitator.core.signature."""

import pytest

from x402_facilitator.core.errors import Err, Ok, SignatureError
from x402_facilitator.core.signature import extract_payment_value, validate_payment_signature


@pytest.fixture
def upto_payload(valid_payload):
    return dict(valid_payload, scheme="upto")


class TestRequiredFields:
    def test_valid_payload(self, valid_payload):
        assert validate_payment_signature(valid_payload) == Ok(valid_payload)

    def test_missing_fields_sorted(self):
        result = validate_payment_signature({"network": "eip155:8453"}, {})
        assert result == Err(
            SignatureError(
                SignatureError.MISSING_FIELDS,
                fields=("payerWallet", "scheme", "transactionHash"),
            )
        )

    def test_empty_string_counts_as_missing(self, valid_payload):
        valid_payload["transactionHash"] = ""
        result = validate_payment_signature(valid_payload)
        assert result.error.fields == ("transactionHash",)

    def test_non_string_counts_as_missing(self, valid_payload):
        valid_payload["network"] = 8453
        assert validate_payment_signature(valid_payload).error.fields == ("network",)

    def test_non_mapping_is_invalid_payload(self):
        result = validate_payment_signature(["not", "a", "map"])
        assert result == Err(SignatureError(SignatureError.INVALID_PAYLOAD))


class TestBidCeiling:
    def test_accepts_value_below_ceiling(self, upto_payload):
        upto_payload["value"] = "0.009"
        result = validate_payment_signature(upto_payload, {"scheme": "upto", "maxPrice": "0.01"})
        assert isinstance(result, Ok)

    def test_accepts_value_equal_to_ceiling(self, upto_payload):
        upto_payload["value"] = "0.010"
        assert validate_payment_signature(upto_payload, {"scheme": "upto", "maxPrice": "0.01"}).is_ok

    def test_rejects_value_above_ceiling(self, upto_payload):
        upto_payload["value"] = "0.02"
        result = validate_payment_signature(upto_payload, {"scheme": "upto", "maxPrice": "0.01"})
        assert result == Err(
            SignatureError(
                SignatureError.VALUE_EXCEEDS_MAX_PRICE,
                payment_value="0.02",
                max_price="0.01",
            )
        )

    def test_rejects_very_long_value_above_ceiling(self, upto_payload):
        upto_payload["value"] = "9" * 5000
        result = validate_payment_signature(upto_payload, {"scheme": "upto", "maxPrice": "0.01"})
        assert result.error.reason == SignatureError.VALUE_EXCEEDS_MAX_PRICE

    def test_value_with_trailing_newline_is_invalid_payload(self, upto_payload):
        upto_payload["value"] = "0.001\n"
        result = validate_payment_signature(upto_payload, {"scheme": "upto", "maxPrice": "0.01"})
        assert result.error.reason == SignatureError.INVALID_PAYLOAD

    def test_requirement_scheme_takes_precedence(self, valid_payload):
        valid_payload["value"] = "0.02"
        result = validate_payment_signature(valid_payload, {"scheme": "upto", "maxPrice": "0.01"})
        assert result.error.reason == SignatureError.VALUE_EXCEEDS_MAX_PRICE

    def test_exact_scheme_skips_ceiling(self, valid_payload):
        valid_payload["value"] = "1000"
        assert validate_payment_signature(valid_payload, {"scheme": "exact", "maxPrice": "0.01"}).is_ok

    def test_missing_value_is_invalid_payload(self, upto_payload):
        result = validate_payment_signature(upto_payload, {"scheme": "upto", "maxPrice": "0.01"})
        assert result == Err(SignatureError(SignatureError.INVALID_PAYLOAD))

    def test_missing_max_price_is_invalid_payload(self, upto_payload):
        upto_payload["value"] = "0.01"
        result = validate_payment_signature(upto_payload, {"scheme": "upto"})
        assert result.error.reason == SignatureError.INVALID_PAYLOAD

    def test_max_price_falls_back_to_payload(self, upto_payload):
        upto_payload.update(value="0.5", maxPrice="1")
        assert validate_payment_signature(upto_payload, {}).is_ok

    def test_unparseable_value_is_invalid_payload(self, upto_payload):
        upto_payload["value"] = "1e-2"
        result = validate_payment_signature(upto_payload, {"maxPrice": "0.01"})
        assert result.error.reason == SignatureError.INVALID_PAYLOAD

    def test_nested_authorization_value(self, upto_payload):
        upto_payload["payload"] = {"authorization": {"value": "0.5"}}
        result = validate_payment_signature(upto_payload, {"maxPrice": "0.4"})
        assert result.error.payment_value == "0.5"


def test_payment_value_search_order():
    assert extract_payment_value({"value": "1", "amount": "2"}) == "1"
    assert extract_payment_value({"amount": "2", "payload": {"value": "3"}}) == "2"
    assert extract_payment_value({"payload": {"value": "3", "authorization": {"value": "4"}}}) == "3"
    assert extract_payment_value({"payload": {"authorization": {"value": "4"}}}) == "4"
    assert extract_payment_value({"authorization": {"value": "5"}}) == "5"
    assert extract_payment_value({"payload": "opaque"}) is None
