"""
Scheme-aware canonicalisation of payment requirement records.

Callers may spell the price as ``price``, ``maxPrice`` or
``maxAmountRequired``. After normalisation an ``exact`` requirement carries
only ``maxAmountRequired`` and an ``upto`` requirement carries only
``maxPrice``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

__all__ = [
    "EXACT",
    "PRICE_KEYS",
    "UPTO",
    "effective_scheme",
    "first_present",
    "normalize_requirements",
]

EXACT = "exact"
UPTO = "upto"

PRICE_KEYS = ("maxAmountRequired", "price", "maxPrice")

_CANONICAL_PRICE_KEY = {
    EXACT: "maxAmountRequired",
    UPTO: "maxPrice",
}

_PRICE_PRECEDENCE = {
    EXACT: ("maxAmountRequired", "price", "maxPrice"),
    UPTO: ("maxPrice", "price", "maxAmountRequired"),
}


def first_present(mapping: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Return the first non-``None`` value among ``keys``, or ``None``."""
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _scheme_name(value: Any) -> Optional[str]:
    if value in (EXACT, UPTO):
        return value
    return None


def effective_scheme(
    requirements: Optional[Mapping[str, Any]],
    payload: Optional[Mapping[str, Any]] = None,
) -> Optional[str]:
    """
    Scheme of the requirement, falling back to the payload's scheme.

    Only ``"exact"`` and ``"upto"`` are recognised; anything else is ``None``.
    """
    for source in (requirements, payload):
        if isinstance(source, Mapping):
            value = source.get("scheme")
            if value is not None:
                return _scheme_name(value)
    return None


def normalize_requirements(
    requirements: Mapping[str, Any],
    payload: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Return a new requirement dict with a single canonical price key.

    The input mapping is never modified. Unrecognised schemes are passed
    through unchanged (as a copy).
    """
    normalized = dict(requirements)
    scheme = effective_scheme(requirements, payload)
    if scheme is None:
        return normalized

    amount = first_present(requirements, _PRICE_PRECEDENCE[scheme])
    for key in PRICE_KEYS:
        normalized.pop(key, None)

    normalized["scheme"] = scheme
    if amount is not None:
        normalized[_CANONICAL_PRICE_KEY[scheme]] = amount
    return normalized
