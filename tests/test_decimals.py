"""Unit tests for x402_facilitator.core.decimals."""

from fractions import Fraction

import pytest

from x402_facilitator.core.decimals import Ordering, ParsedDecimal, compare_decimals, parse_decimal
from x402_facilitator.core.errors import Err, Ok


class TestParseDecimal:
    def test_integer(self):
        assert parse_decimal("42") == Ok(ParsedDecimal(integer="42", fraction=""))

    def test_fraction(self):
        assert parse_decimal("0.01") == Ok(ParsedDecimal(integer="0", fraction="01"))

    def test_trailing_zeros_are_insignificant(self):
        assert parse_decimal("0.010") == parse_decimal("0.01")
        assert parse_decimal("5.000") == Ok(ParsedDecimal(integer="5", fraction=""))

    def test_leading_zeros_are_insignificant(self):
        assert parse_decimal("007.50") == Ok(ParsedDecimal(integer="7", fraction="5"))
        assert parse_decimal("000") == Ok(ParsedDecimal(integer="0", fraction=""))

    @pytest.mark.parametrize(
        "value",
        ["", "abc", "-1", "+1", "1e5", "1.", ".5", "1.2.3", " 1", "1,5", "١٢", "1\n", "0.01\n", None, 1, 1.5],
    )
    def test_rejects_invalid_input(self, value):
        assert isinstance(parse_decimal(value), Err)


class TestCompareDecimals:
    def test_equal_after_scale_alignment(self):
        assert compare_decimals("0.010", "0.01") == Ok(Ordering.EQ)

    def test_less_and_greater(self):
        assert compare_decimals("0.009", "0.01") == Ok(Ordering.LT)
        assert compare_decimals("0.02", "0.01") == Ok(Ordering.GT)

    def test_precision_beyond_float(self):
        # 0.1 + 0.2 style rounding must not leak in
        assert compare_decimals("0.30000000000000000001", "0.3") == Ok(Ordering.GT)
        assert compare_decimals(
            "123456789012345678901234567890.000000000000000001",
            "123456789012345678901234567890",
        ) == Ok(Ordering.GT)

    @pytest.mark.parametrize(
        "left,right",
        [
            ("1", "1.0"),
            ("10", "9.99999"),
            ("0.5", "0.49"),
            ("1000000", "1000000.000001"),
            ("0", "0.0000"),
            ("7.25", "7.250001"),
        ],
    )
    def test_agrees_with_exact_rationals(self, left, right):
        expected = Fraction(left) - Fraction(right)
        ordering = compare_decimals(left, right).unwrap()
        if expected < 0:
            assert ordering is Ordering.LT
        elif expected > 0:
            assert ordering is Ordering.GT
        else:
            assert ordering is Ordering.EQ

    def test_parse_failure_is_reported(self):
        result = compare_decimals("0.01", "nope")
        assert isinstance(result, Err)
        assert "nope" in result.error

    def test_leading_zeros_do_not_affect_ordering(self):
        assert compare_decimals("0010", "9") == Ok(Ordering.GT)
        assert compare_decimals("00.5", "0.50") == Ok(Ordering.EQ)

    def test_amounts_longer_than_int_conversion_limit(self):
        huge = "9" * 5000
        assert compare_decimals(huge, "0.01") == Ok(Ordering.GT)
        assert compare_decimals("0.01", huge) == Ok(Ordering.LT)
        assert compare_decimals(huge, huge + ".000") == Ok(Ordering.EQ)
        assert compare_decimals(huge, "1" + "0" * 5000) == Ok(Ordering.LT)
        assert compare_decimals("0." + "0" * 5000 + "1", "0") == Ok(Ordering.GT)
