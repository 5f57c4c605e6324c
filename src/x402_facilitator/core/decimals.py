"""
Exact comparison of non-negative decimal amount strings.

Amounts are kept as digit strings and compared digit by digit, so a bid
ceiling is enforced down to the token's smallest unit whatever the length
of the amount.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import Err, Ok, Result

__all__ = [
    "Ordering",
    "ParsedDecimal",
    "compare_decimals",
    "parse_decimal",
]

_DECIMAL_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?")


class Ordering(str, Enum):
    LT = "lt"
    EQ = "eq"
    GT = "gt"


@dataclass(frozen=True)
class ParsedDecimal:
    """Canonical digits: no leading integer zeros, no trailing fractional zeros."""

    integer: str
    fraction: str

    def padded_fraction(self, width: int) -> str:
        return self.fraction.ljust(width, "0")


def parse_decimal(value: Any) -> Result[ParsedDecimal, str]:
    if not isinstance(value, str):
        return Err(f"not a decimal string: {value!r}")
    # re's \d also matches non-ASCII digits
    if not value.isascii():
        return Err(f"not a decimal string: {value!r}")
    match = _DECIMAL_PATTERN.fullmatch(value)
    if match is None:
        return Err(f"not a decimal string: {value!r}")

    integer = match.group(1).lstrip("0") or "0"
    fraction = (match.group(2) or "").rstrip("0")
    return Ok(ParsedDecimal(integer=integer, fraction=fraction))


def _order(a: str, b: str) -> Ordering:
    if a < b:
        return Ordering.LT
    if a > b:
        return Ordering.GT
    return Ordering.EQ


def compare_decimals(left: Any, right: Any) -> Result[Ordering, str]:
    """
    Compare two decimal strings exactly.

    >>> compare_decimals("0.010", "0.01")
    Ok(value=<Ordering.EQ: 'eq'>)
    """
    parsed_left = parse_decimal(left)
    if isinstance(parsed_left, Err):
        return parsed_left
    parsed_right = parse_decimal(right)
    if isinstance(parsed_right, Err):
        return parsed_right

    a, b = parsed_left.value, parsed_right.value
    if len(a.integer) != len(b.integer):
        return Ok(Ordering.LT if len(a.integer) < len(b.integer) else Ordering.GT)
    if a.integer != b.integer:
        return Ok(_order(a.integer, b.integer))
    width = max(len(a.fraction), len(b.fraction))
    return Ok(_order(a.padded_fraction(width), b.padded_fraction(width)))
