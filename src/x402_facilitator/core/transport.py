"""
HTTP transport for facilitator ``/verify`` and ``/settle`` requests.

:func:`request` never raises for an expected failure. Every outcome is
classified into a :class:`~x402_facilitator.core.errors.FacilitatorError`
and transient failures (timeouts, connection errors, 408/429/5xx) are
retried with exponential backoff.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Mapping, Optional

import requests
import urllib3.exceptions
from tenacity import Retrying, retry_if_result, stop_after_attempt, wait_exponential

from .errors import Err, ErrorType, FacilitatorError, FacilitatorResponse, Ok, Result

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RECEIVE_TIMEOUT_MS",
    "DEFAULT_RETRY_BACKOFF_MS",
    "JSON_HEADERS",
    "TRANSIENT_STATUSES",
    "TransportResult",
    "join_url",
    "request",
]

DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_BACKOFF_MS = 100
DEFAULT_RECEIVE_TIMEOUT_MS = 5_000

TRANSIENT_STATUSES = frozenset({408, 429, 500, 502, 503, 504})
JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}

_TIMEOUT_EXCEPTIONS = (
    requests.exceptions.Timeout,
    urllib3.exceptions.TimeoutError,
    TimeoutError,
)

TransportResult = Result[FacilitatorResponse, FacilitatorError]


def _sleep(seconds: float) -> None:
    time.sleep(seconds)


def join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _is_non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _invalid_option(name: str, value: Any) -> FacilitatorError:
    return FacilitatorError(
        type=ErrorType.INVALID_OPTION,
        reason=(name, value),
        retryable=False,
        attempt=1,
    )


def _is_timeout(reason: Any, _seen: Optional[set] = None) -> bool:
    """True if ``reason`` is, or wraps, a timeout."""
    seen = _seen if _seen is not None else set()
    if reason is None or id(reason) in seen:
        return False
    seen.add(id(reason))

    if isinstance(reason, _TIMEOUT_EXCEPTIONS) or reason == "timeout":
        return True
    if isinstance(reason, BaseException):
        nested = [reason.__cause__, reason.__context__, getattr(reason, "reason", None)]
        nested.extend(reason.args)
        return any(_is_timeout(item, seen) for item in nested)
    if isinstance(reason, Mapping):
        return _is_timeout(reason.get("reason"), seen)
    if isinstance(reason, tuple) and reason:
        return reason[0] == "timeout"
    return False


def _decode_json_object(body: Any) -> Dict[str, Any]:
    """Decode a response body into a JSON object; raise ``ValueError`` otherwise."""
    if body is None:
        return {}
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    if not isinstance(body, str):
        raise ValueError(f"invalid body type: {type(body).__name__}")
    if body == "":
        return {}
    decoded = json.loads(body)
    if not isinstance(decoded, dict):
        raise ValueError(f"invalid JSON object: {decoded!r}")
    return decoded


def _raw_body(body: Any) -> Dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        return {"raw_body": body}
    return {"raw_body": repr(body)}


def _decode_error_body(body: Any) -> Dict[str, Any]:
    try:
        return _decode_json_object(body)
    except ValueError:
        return _raw_body(body)


def _response_text(response: Any) -> Any:
    content = getattr(response, "content", None)
    if content is not None:
        return content
    return getattr(response, "text", None)


def _classify_response(response: Any, attempt: int) -> TransportResult:
    status = getattr(response, "status_code", None)
    if not isinstance(status, int) or isinstance(status, bool):
        return Err(
            FacilitatorError(
                type=ErrorType.UNEXPECTED_RESPONSE,
                reason=response,
                retryable=False,
                attempt=attempt,
            )
        )

    body = _response_text(response)
    if 200 <= status <= 299:
        try:
            return Ok(FacilitatorResponse(status=status, body=_decode_json_object(body)))
        except ValueError as exc:
            return Err(
                FacilitatorError(
                    type=ErrorType.INVALID_JSON,
                    status=status,
                    body=_raw_body(body),
                    reason=str(exc),
                    retryable=False,
                    attempt=attempt,
                )
            )

    return Err(
        FacilitatorError(
            type=ErrorType.HTTP_ERROR,
            status=status,
            body=_decode_error_body(body),
            retryable=status in TRANSIENT_STATUSES,
            attempt=attempt,
        )
    )


def _transport_failure(exc: BaseException, attempt: int) -> FacilitatorError:
    error_type = ErrorType.TIMEOUT if _is_timeout(exc) else ErrorType.TRANSPORT_ERROR
    return FacilitatorError(
        type=error_type,
        reason=exc,
        retryable=True,
        attempt=attempt,
    )


def _perform(
    session: Any,
    url: str,
    encoded_payload: str,
    timeout: Optional[float],
    attempt: int,
) -> TransportResult:
    logging.debug("POST %s (attempt %d)", url, attempt)
    try:
        response = session.post(
            url,
            data=encoded_payload,
            headers=JSON_HEADERS,
            timeout=timeout,
        )
    except Exception as exc:  # noqa: BLE001
        return Err(_transport_failure(exc, attempt))
    return _classify_response(response, attempt)


def _is_retryable(result: TransportResult) -> bool:
    return isinstance(result, Err) and result.error.retryable


def _log_outcome(url: str, result: TransportResult, attempt: int, started: float) -> None:
    elapsed_ms = (time.monotonic() - started) * 1000
    if isinstance(result, Ok):
        logging.info(
            "Facilitator %s responded %d after %d attempt(s) in %.1f ms",
            url,
            result.value.status,
            attempt,
            elapsed_ms,
        )
    else:
        logging.warning(
            "Facilitator request to %s failed after %d attempt(s) in %.1f ms: %s",
            url,
            attempt,
            elapsed_ms,
            result.error,
        )


def request(
    session: Any,
    base_url: str,
    path: str,
    payload: Mapping[str, Any],
    *,
    max_retries: Any = DEFAULT_MAX_RETRIES,
    retry_backoff_ms: Any = DEFAULT_RETRY_BACKOFF_MS,
    receive_timeout_ms: Any = DEFAULT_RECEIVE_TIMEOUT_MS,
) -> TransportResult:
    """
    POST ``payload`` as JSON to ``base_url/path``.

    ``session`` is a :class:`requests.Session` (or anything exposing a
    compatible ``post``). Retryable failures are attempted up to
    ``max_retries + 1`` times in total, sleeping
    ``retry_backoff_ms * 2 ** (attempt - 1)`` milliseconds between attempts.
    A ``receive_timeout_ms`` of ``0`` disables the per-attempt deadline.
    """
    for name, value in (
        ("max_retries", max_retries),
        ("retry_backoff_ms", retry_backoff_ms),
        ("receive_timeout_ms", receive_timeout_ms),
    ):
        if not _is_non_negative_int(value):
            return Err(_invalid_option(name, value))

    if not callable(getattr(session, "post", None)):
        return Err(
            FacilitatorError(
                type=ErrorType.TRANSPORT_UNAVAILABLE,
                reason="session does not provide a callable post()",
                retryable=False,
            )
        )

    try:
        encoded_payload = json.dumps(payload)
    except (TypeError, ValueError) as exc:
        return Err(
            FacilitatorError(
                type=ErrorType.REQUEST_SETUP_FAILED,
                reason=str(exc),
                retryable=False,
                attempt=1,
            )
        )

    url = join_url(base_url, path)
    timeout = receive_timeout_ms / 1000 if receive_timeout_ms else None
    started = time.monotonic()

    retrying = Retrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=retry_backoff_ms / 1000, exp_base=2, min=0),
        retry=retry_if_result(_is_retryable),
        retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        sleep=_sleep,
        reraise=True,
    )

    result: TransportResult = Err(
        FacilitatorError(type=ErrorType.UNEXPECTED_RESPONSE, retryable=False)
    )
    attempt = 0
    for attempt_manager in retrying:
        attempt = attempt_manager.retry_state.attempt_number
        with attempt_manager:
            result = _perform(session, url, encoded_payload, timeout, attempt)
        if not attempt_manager.retry_state.outcome.failed:
            attempt_manager.retry_state.set_result(result)

    _log_outcome(url, result, attempt, started)
    return result
