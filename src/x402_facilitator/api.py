"""
Public, high-level helpers for talking to an x402 facilitator.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import requests
from opentelemetry import trace

from .core.client import (
    FacilitatorClient,
    SettlementResult,
    pay as _pay,
    settle_payment,
    verify_payment,
)
from .core.config import FacilitatorConfig, load_facilitator_config
from .core.errors import ConfigError, Result

__all__ = [
    "ConfigError",
    "FacilitatorClient",
    "FacilitatorConfig",
    "SettlementResult",
    "create_facilitator_client",
    "load_facilitator_config",
    "pay",
    "settle_payment",
    "verify_payment",
]


def create_facilitator_client(
    *,
    config: Optional[FacilitatorConfig] = None,
    session: Optional[requests.Session] = None,
    hooks: Any = None,
    tracer: Optional[trace.Tracer] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    url: Optional[str] = None,
    name: Optional[str] = None,
    max_retries: Optional[int | str] = None,
    retry_backoff_ms: Optional[int | str] = None,
    receive_timeout_ms: Optional[int | str] = None,
) -> FacilitatorClient:
    """
    Construct a :class:`FacilitatorClient`.

    Callers can either supply a ready-made :class:`FacilitatorConfig` or let
    the helper assemble one from environment data and keyword arguments.
    """
    if config is not None:
        extras = (
            overrides,
            base,
            url,
            name,
            max_retries,
            retry_backoff_ms,
            receive_timeout_ms,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built FacilitatorConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_facilitator_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            url=url,
            name=name,
            max_retries=max_retries,
            retry_backoff_ms=retry_backoff_ms,
            receive_timeout_ms=receive_timeout_ms,
        )
    return FacilitatorClient(cfg, session=session, hooks=hooks, tracer=tracer)


def pay(
    payload: Mapping[str, Any],
    requirements: Mapping[str, Any],
    *,
    client: Optional[FacilitatorClient] = None,
    verify_only: bool = False,
    **client_options: Any,
) -> Result[SettlementResult, Any]:
    """
    Verify then settle a payment.

    Without ``client`` a temporary one is built from ``client_options``
    (see :func:`create_facilitator_client`) and closed afterwards.
    """
    if client is not None:
        if client_options:
            raise ValueError("Provide either a client or client options, not both.")
        return _pay(client, payload, requirements, verify_only=verify_only)

    with create_facilitator_client(**client_options) as temporary:
        return _pay(temporary, payload, requirements, verify_only=verify_only)
