"""
Lifecycle hooks around facilitator verify and settle operations.

Hooks run around each operation in this order:

1. ``before_verify`` / ``before_settle``
2. ``after_verify`` / ``after_settle`` when the request succeeded
3. ``on_verify_failure`` / ``on_settle_failure`` when it failed

``before_*`` callbacks return :class:`Continue` or :class:`Halt`.
``after_*`` callbacks return :class:`Continue`; they may replace
``context.result``. ``on_*_failure`` callbacks return :class:`Continue` (the
failure stands, possibly with a replaced ``context.error``) or
:class:`Recover`, which turns the failure into a success.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from .errors import (
    ConfigError,
    Err,
    FacilitatorResponse,
    HookError,
    HookErrorKind,
    Ok,
    Result,
)

__all__ = [
    "CALLBACK_NAMES",
    "Continue",
    "DefaultHooks",
    "Halt",
    "HookContext",
    "HookMetadata",
    "Hooks",
    "Recover",
    "run_with_hooks",
    "validate_hooks",
]

CALLBACK_NAMES = (
    "before_verify",
    "after_verify",
    "on_verify_failure",
    "before_settle",
    "after_settle",
    "on_settle_failure",
)

OPERATIONS = ("verify", "settle")


@dataclass
class HookContext:
    """Mutable state threaded through a single verify or settle call."""

    payload: Dict[str, Any]
    requirements: Dict[str, Any]
    result: Optional[FacilitatorResponse] = None
    error: Any = None


@dataclass(frozen=True)
class HookMetadata:
    operation: str
    endpoint: str
    hooks: Any


@dataclass(frozen=True)
class Continue:
    context: HookContext


@dataclass(frozen=True)
class Halt:
    reason: Any


@dataclass(frozen=True)
class Recover:
    result: Any


BeforeResult = Union[Continue, Halt]
AfterResult = Continue
FailureResult = Union[Continue, Recover]


class Hooks(ABC):
    """Interface for lifecycle hooks. Subclass :class:`DefaultHooks` to override a few."""

    @abstractmethod
    def before_verify(self, context: HookContext, metadata: HookMetadata) -> BeforeResult:
        ...

    @abstractmethod
    def after_verify(self, context: HookContext, metadata: HookMetadata) -> AfterResult:
        ...

    @abstractmethod
    def on_verify_failure(self, context: HookContext, metadata: HookMetadata) -> FailureResult:
        ...

    @abstractmethod
    def before_settle(self, context: HookContext, metadata: HookMetadata) -> BeforeResult:
        ...

    @abstractmethod
    def after_settle(self, context: HookContext, metadata: HookMetadata) -> AfterResult:
        ...

    @abstractmethod
    def on_settle_failure(self, context: HookContext, metadata: HookMetadata) -> FailureResult:
        ...


class DefaultHooks(Hooks):
    """No-op hooks: every callback continues with the context unchanged."""

    def before_verify(self, context: HookContext, metadata: HookMetadata) -> BeforeResult:
        return Continue(context)

    def after_verify(self, context: HookContext, metadata: HookMetadata) -> AfterResult:
        return Continue(context)

    def on_verify_failure(self, context: HookContext, metadata: HookMetadata) -> FailureResult:
        return Continue(context)

    def before_settle(self, context: HookContext, metadata: HookMetadata) -> BeforeResult:
        return Continue(context)

    def after_settle(self, context: HookContext, metadata: HookMetadata) -> AfterResult:
        return Continue(context)

    def on_settle_failure(self, context: HookContext, metadata: HookMetadata) -> FailureResult:
        return Continue(context)


def validate_hooks(hooks: Any) -> Any:
    """Return ``hooks`` unchanged if it exposes every callback, else raise :class:`ConfigError`."""
    if isinstance(hooks, type):
        raise ConfigError(
            f"hooks must be an instance, got the class {hooks.__name__}"
        )
    missing = [name for name in CALLBACK_NAMES if not callable(getattr(hooks, name, None))]
    if missing:
        raise ConfigError(
            f"hooks object {hooks!r} does not implement: {', '.join(missing)}"
        )
    return hooks


class _HookFailure(Exception):
    def __init__(self, error: HookError) -> None:
        super().__init__(str(error))
        self.error = error


def _invoke(hooks: Any, name: str, context: HookContext, metadata: HookMetadata) -> Any:
    try:
        return getattr(hooks, name)(context, metadata)
    except Exception as exc:  # noqa: BLE001
        logging.exception("Hook callback %s raised", name)
        raise _HookFailure(HookError(HookErrorKind.CALLBACK_FAILED, name, exc)) from exc


def _invalid_return(name: str, value: Any) -> _HookFailure:
    logging.warning("Hook callback %s returned an invalid value: %r", name, value)
    return _HookFailure(HookError(HookErrorKind.INVALID_RETURN, name, value))


def _continued_context(name: str, value: Any) -> HookContext:
    if isinstance(value, Continue) and isinstance(value.context, HookContext):
        return value.context
    raise _invalid_return(name, value)


def _coerce_result(name: str, value: Any) -> FacilitatorResponse:
    response = FacilitatorResponse.coerce(value)
    if response is None:
        raise _invalid_return(name, value)
    return response


SendFn = Callable[[Dict[str, Any], Dict[str, Any]], Result[FacilitatorResponse, Any]]


def run_with_hooks(
    operation: str,
    endpoint: str,
    hooks: Any,
    payload: Dict[str, Any],
    requirements: Dict[str, Any],
    send: SendFn,
) -> Result[FacilitatorResponse, Any]:
    """
    Run ``send`` for one operation, wrapped by the hook callbacks.

    ``send`` receives the (possibly hook-modified) payload and requirements.
    Hook contract violations are returned as ``Err(HookError)``; transport
    failures are returned as ``Err`` of whatever ``send`` produced, unless a
    failure hook replaces or recovers them.
    """
    if operation not in OPERATIONS:
        raise ValueError(f"unknown operation {operation!r}")

    metadata = HookMetadata(operation=operation, endpoint=endpoint, hooks=hooks)
    context = HookContext(
        payload=copy.deepcopy(payload),
        requirements=copy.deepcopy(requirements),
    )
    before_name = f"before_{operation}"
    after_name = f"after_{operation}"
    failure_name = f"on_{operation}_failure"

    try:
        decision = _invoke(hooks, before_name, context, metadata)
        if isinstance(decision, Halt):
            logging.warning("Hook %s halted %s: %r", before_name, operation, decision.reason)
            return Err(HookError(HookErrorKind.HALTED, before_name, decision.reason))
        context = _continued_context(before_name, decision)

        outcome = send(context.payload, context.requirements)

        if isinstance(outcome, Ok):
            context.result = outcome.value
            context = _continued_context(
                after_name, _invoke(hooks, after_name, context, metadata)
            )
            if context.result is None:
                return outcome
            return Ok(_coerce_result(after_name, context.result))

        context.error = outcome.error
        decision = _invoke(hooks, failure_name, context, metadata)
        if isinstance(decision, Recover):
            logging.info("Hook %s recovered a failed %s", failure_name, operation)
            return Ok(_coerce_result(failure_name, decision.result))
        context = _continued_context(failure_name, decision)
        return Err(context.error if context.error is not None else outcome.error)
    except _HookFailure as failure:
        return Err(failure.error)
