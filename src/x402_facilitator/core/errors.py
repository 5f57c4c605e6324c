"""
Result and error values shared by the transport, the hook orchestrator and
the signature validator.

Expected failures never raise: they come back as :class:`Err` wrapping one of
the error records below, so callers can branch on ``error.type`` (or
``error.kind``/``error.reason``) instead of matching strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, TypeVar, Union

__all__ = [
    "ConfigError",
    "Err",
    "ErrorType",
    "FacilitatorError",
    "FacilitatorResponse",
    "HookError",
    "HookErrorKind",
    "Ok",
    "Result",
    "SignatureError",
    "UnwrapError",
]

T = TypeVar("T")
E = TypeVar("E")


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


class UnwrapError(Exception):
    """Raised by :meth:`Err.unwrap`; the wrapped error is kept on ``error``."""

    def __init__(self, error: Any) -> None:
        super().__init__(str(error))
        self.error = error


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        raise UnwrapError(self.error)


Result = Union[Ok[T], Err[E]]


class ErrorType(str, Enum):
    INVALID_OPTION = "invalid_option"
    REQUEST_SETUP_FAILED = "request_setup_failed"
    TRANSPORT_UNAVAILABLE = "transport_unavailable"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    HTTP_ERROR = "http_error"
    INVALID_JSON = "invalid_json"
    UNEXPECTED_RESPONSE = "unexpected_response"


@dataclass(frozen=True)
class FacilitatorError:
    """
    Structured failure of a facilitator request.

    ``attempt`` is the 1-based number of the attempt that produced the error;
    it stays ``None`` only when no attempt was ever made.
    """

    type: ErrorType
    status: Optional[int] = None
    body: Optional[Dict[str, Any]] = None
    reason: Any = None
    retryable: bool = False
    attempt: Optional[int] = None

    @property
    def message(self) -> str:
        parts = [f"type={self.type.value}"]
        if self.status is not None:
            parts.append(f"status={self.status}")
        if self.attempt is not None:
            parts.append(f"attempt={self.attempt}")
        parts.append(f"retryable={str(self.retryable).lower()}")
        if self.reason is not None:
            parts.append(f"reason={self.reason!r}")
        return f"facilitator request failed ({', '.join(parts)})"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class FacilitatorResponse:
    status: int
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Any) -> Optional["FacilitatorResponse"]:
        """
        Accept either a response instance or a ``{"status", "body"}`` mapping.

        Returns ``None`` when ``value`` has neither shape.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            status = value.get("status")
            body = value.get("body", {})
            if isinstance(status, int) and not isinstance(status, bool) and isinstance(
                body, Mapping
            ):
                return cls(status=status, body=dict(body))
        return None


class HookErrorKind(str, Enum):
    HALTED = "hook_halted"
    INVALID_RETURN = "hook_invalid_return"
    CALLBACK_FAILED = "hook_callback_failed"


@dataclass(frozen=True)
class HookError:
    kind: HookErrorKind
    callback: str
    detail: Any = None

    def __str__(self) -> str:
        return f"{self.kind.value} in {self.callback}: {self.detail!r}"


@dataclass(frozen=True)
class SignatureError:
    reason: str
    fields: Tuple[str, ...] = ()
    payment_value: Optional[str] = None
    max_price: Optional[str] = None

    MISSING_FIELDS = "missing_fields"
    INVALID_PAYLOAD = "invalid_payload"
    VALUE_EXCEEDS_MAX_PRICE = "value_exceeds_max_price"

    def __str__(self) -> str:
        if self.reason == self.MISSING_FIELDS:
            return f"missing_fields: {', '.join(self.fields)}"
        if self.reason == self.VALUE_EXCEEDS_MAX_PRICE:
            return (
                f"value_exceeds_max_price: {self.payment_value} > {self.max_price}"
            )
        return self.reason
