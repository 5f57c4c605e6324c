"""
Validation of decoded ``PAYMENT-SIGNATURE`` payloads.

The payload must carry the four required x402 fields. For the ``upto`` scheme
the payer's chosen value is additionally checked against the bid ceiling
(``maxPrice``).
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from .decimals import Ordering, compare_decimals
from .errors import Err, Ok, Result, SignatureError
from .requirements import UPTO, effective_scheme, first_present

__all__ = [
    "PAYMENT_VALUE_PATHS",
    "REQUIRED_FIELDS",
    "extract_max_price",
    "extract_payment_value",
    "missing_fields",
    "validate_payment_signature",
]

REQUIRED_FIELDS = ("transactionHash", "network", "scheme", "payerWallet")

# Older payload layouts nest the value differently; probed in this order.
PAYMENT_VALUE_PATHS: Sequence[Sequence[str]] = (
    ("value",),
    ("amount",),
    ("payload", "value"),
    ("payload", "authorization", "value"),
    ("authorization", "value"),
)

_MAX_PRICE_KEYS = ("maxPrice", "price")


def missing_fields(payload: Mapping[str, Any]) -> List[str]:
    """Required fields that are absent or not a non-empty string, sorted."""
    return sorted(
        name
        for name in REQUIRED_FIELDS
        if not (isinstance(payload.get(name), str) and payload.get(name) != "")
    )


def _dig(mapping: Mapping[str, Any], path: Sequence[str]) -> Any:
    current: Any = mapping
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def extract_payment_value(payload: Mapping[str, Any]) -> Any:
    for path in PAYMENT_VALUE_PATHS:
        value = _dig(payload, path)
        if value is not None:
            return value
    return None


def extract_max_price(
    requirements: Optional[Mapping[str, Any]],
    payload: Mapping[str, Any],
) -> Any:
    if isinstance(requirements, Mapping):
        value = first_present(requirements, _MAX_PRICE_KEYS)
        if value is not None:
            return value
    return first_present(payload, _MAX_PRICE_KEYS)


def _check_bid_ceiling(
    payload: Mapping[str, Any],
    requirements: Optional[Mapping[str, Any]],
) -> Optional[SignatureError]:
    payment_value = extract_payment_value(payload)
    max_price = extract_max_price(requirements, payload)
    if payment_value is None or max_price is None:
        return SignatureError(SignatureError.INVALID_PAYLOAD)

    ordering = compare_decimals(payment_value, max_price)
    if isinstance(ordering, Err):
        return SignatureError(SignatureError.INVALID_PAYLOAD)
    if ordering.value is Ordering.GT:
        return SignatureError(
            SignatureError.VALUE_EXCEEDS_MAX_PRICE,
            payment_value=payment_value,
            max_price=max_price,
        )
    return None


def validate_payment_signature(
    payload: Any,
    requirements: Optional[Mapping[str, Any]] = None,
) -> Result[Mapping[str, Any], SignatureError]:
    """
    Validate a decoded payment payload against its requirements.

    Returns ``Ok(payload)`` or ``Err(SignatureError)`` where the error reason
    is one of ``missing_fields``, ``invalid_payload`` or
    ``value_exceeds_max_price``. Schemes other than ``upto`` have no ceiling
    to enforce.
    """
    if not isinstance(payload, Mapping):
        logging.debug("Rejecting payment signature: payload is not a mapping")
        return Err(SignatureError(SignatureError.INVALID_PAYLOAD))

    missing = missing_fields(payload)
    if missing:
        logging.debug("Rejecting payment signature: missing fields %s", missing)
        return Err(SignatureError(SignatureError.MISSING_FIELDS, fields=tuple(missing)))

    if effective_scheme(requirements, payload) == UPTO:
        error = _check_bid_ceiling(payload, requirements)
        if error is not None:
            logging.debug("Rejecting payment signature: %s", error)
            return Err(error)

    logging.debug("Payment signature for payer %s is valid", payload.get("payerWallet"))
    return Ok(payload)
