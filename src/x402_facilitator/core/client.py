"""
Facilitator client: the entry point for verify and settle operations.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from opentelemetry import trace

from .config import FacilitatorConfig
from .errors import Err, FacilitatorResponse, Ok, Result
from .hooks import DefaultHooks, run_with_hooks, validate_hooks
from .requirements import normalize_requirements
from .telemetry import get_tracer, operation_span
from .transport import request

__all__ = [
    "FacilitatorClient",
    "SettlementResult",
    "pay",
    "settle_payment",
    "verify_payment",
]

_ENDPOINTS = {
    "verify": "/verify",
    "settle": "/settle",
}

OperationResult = Result[FacilitatorResponse, Any]


@dataclass(frozen=True)
class SettlementResult:
    success: bool
    network: Optional[str]
    transaction: Optional[str]
    raw: Dict[str, Any]

    @classmethod
    def from_response(cls, response: FacilitatorResponse) -> "SettlementResult":
        body = response.body
        return cls(
            success=bool(body.get("success", 200 <= response.status <= 299)),
            network=body.get("network"),
            transaction=body.get("transaction"),
            raw=body,
        )


class FacilitatorClient:
    """
    Client for a facilitator's ``/verify`` and ``/settle`` endpoints.

    Calls on one client are serialised: a second call waits until the one in
    flight has finished, including its retries and hooks. Use separate
    clients for independent, concurrent traffic.
    """

    def __init__(
        self,
        config: Optional[FacilitatorConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        hooks: Any = None,
        tracer: Optional[trace.Tracer] = None,
    ) -> None:
        self.config = config or FacilitatorConfig()
        self.hooks = validate_hooks(hooks) if hooks is not None else DefaultHooks()
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.tracer = tracer or get_tracer()
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.config.name

    def __enter__(self) -> "FacilitatorClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def verify(
        self,
        payload: Mapping[str, Any],
        requirements: Mapping[str, Any],
        hooks: Any = None,
    ) -> OperationResult:
        """
        Verify a payment with the facilitator.

        ``hooks`` overrides the configured hooks for this call only.
        """
        return self._call("verify", payload, requirements, hooks)

    def settle(
        self,
        payload: Mapping[str, Any],
        requirements: Mapping[str, Any],
        hooks: Any = None,
    ) -> OperationResult:
        """
        Settle a payment with the facilitator.

        ``hooks`` overrides the configured hooks for this call only.
        """
        return self._call("settle", payload, requirements, hooks)

    def _call(
        self,
        operation: str,
        payload: Mapping[str, Any],
        requirements: Mapping[str, Any],
        hooks: Any,
    ) -> OperationResult:
        if not isinstance(payload, Mapping) or not isinstance(requirements, Mapping):
            raise TypeError("payload and requirements must be mappings")
        active_hooks = validate_hooks(hooks) if hooks is not None else self.hooks
        normalized = normalize_requirements(requirements, payload)
        endpoint = _ENDPOINTS[operation]

        with self._lock:
            logging.info(
                "%s: submitting payment for %s to %s%s",
                self.name,
                operation,
                self.config.url,
                endpoint,
            )
            with operation_span(self.tracer, operation, endpoint, name=self.name) as span:
                result = run_with_hooks(
                    operation,
                    endpoint,
                    active_hooks,
                    dict(payload),
                    normalized,
                    self._sender(endpoint),
                )
                span.finish(result)
        return result

    def _sender(self, endpoint: str):
        def send(payload: Dict[str, Any], requirements: Dict[str, Any]) -> OperationResult:
            return request(
                self.session,
                self.config.url,
                endpoint,
                {"payload": payload, "requirements": requirements},
                **self.config.transport_options(),
            )

        return send

    def pay(
        self,
        payload: Mapping[str, Any],
        requirements: Mapping[str, Any],
        *,
        verify_only: bool = False,
    ) -> Result[SettlementResult, Any]:
        """
        Verify then settle, stopping at the first failure.

        A verify response whose body carries ``isValid: false`` is returned
        as ``Err`` holding that response.
        """
        verified = self.verify(payload, requirements)
        if isinstance(verified, Err):
            return verified
        if verified.value.body.get("isValid") is False:
            logging.warning("%s: facilitator rejected payment: %s", self.name, verified.value.body)
            return Err(verified.value)

        if verify_only:
            return Ok(
                SettlementResult(
                    success=True,
                    network=payload.get("network"),
                    transaction=None,
                    raw={"verifyOnly": True, "response": verified.value.body},
                )
            )

        settled = self.settle(payload, requirements)
        if isinstance(settled, Err):
            return settled
        return Ok(SettlementResult.from_response(settled.value))


def verify_payment(
    client: FacilitatorClient,
    payload: Mapping[str, Any],
    requirements: Mapping[str, Any],
    hooks: Any = None,
) -> OperationResult:
    return client.verify(payload, requirements, hooks)


def settle_payment(
    client: FacilitatorClient,
    payload: Mapping[str, Any],
    requirements: Mapping[str, Any],
    hooks: Any = None,
) -> OperationResult:
    return client.settle(payload, requirements, hooks)


def pay(
    client: FacilitatorClient,
    payload: Mapping[str, Any],
    requirements: Mapping[str, Any],
    *,
    verify_only: bool = False,
) -> Result[SettlementResult, Any]:
    """High-level helper that performs verify then settle with ``client``."""
    return client.pay(payload, requirements, verify_only=verify_only)
