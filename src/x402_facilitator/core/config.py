"""
Configuration for :class:`x402_facilitator.core.client.FacilitatorClient`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .environment import build_environment
from .errors import ConfigError
from .transport import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RECEIVE_TIMEOUT_MS,
    DEFAULT_RETRY_BACKOFF_MS,
)

__all__ = [
    "DEFAULT_FACILITATOR_URL",
    "FacilitatorConfig",
    "load_facilitator_config",
]

DEFAULT_FACILITATOR_URL = "https://x402.org/facilitator"
DEFAULT_CLIENT_NAME = "facilitator"

_PARAMETER_TO_ENV_KEY = {
    "url": "X402_FACILITATOR_URL",
    "name": "X402_FACILITATOR_NAME",
    "max_retries": "X402_MAX_RETRIES",
    "retry_backoff_ms": "X402_RETRY_BACKOFF_MS",
    "receive_timeout_ms": "X402_RECEIVE_TIMEOUT_MS",
}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _collect_parameter_overrides(explicit: Mapping[str, Any]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown facilitator parameter '{key}'") from exc
        overrides[env_key] = _stringify(value)
    return overrides


def _parse_non_negative(values: Mapping[str, str], env_key: str, default: int) -> int:
    raw = values.get(env_key)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{env_key} must be a non-negative integer, got '{raw}'") from exc


@dataclass(frozen=True)
class FacilitatorConfig:
    url: str = DEFAULT_FACILITATOR_URL
    name: str = DEFAULT_CLIENT_NAME
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_backoff_ms: int = DEFAULT_RETRY_BACKOFF_MS
    receive_timeout_ms: int = DEFAULT_RECEIVE_TIMEOUT_MS

    def __post_init__(self) -> None:
        if not isinstance(self.url, str) or not self.url.strip():
            raise ConfigError("Facilitator URL must be a non-empty string")
        url = self.url.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ConfigError(f"Facilitator URL must be http(s), got '{self.url}'")
        object.__setattr__(self, "url", url)

        if not isinstance(self.name, str) or not self.name:
            raise ConfigError("Facilitator client name must be a non-empty string")

        for field_name in ("max_retries", "retry_backoff_ms", "receive_timeout_ms"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(
                    f"{field_name} must be a non-negative integer, got {value!r}"
                )

    def transport_options(self) -> Dict[str, int]:
        return {
            "max_retries": self.max_retries,
            "retry_backoff_ms": self.retry_backoff_ms,
            "receive_timeout_ms": self.receive_timeout_ms,
        }

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "FacilitatorConfig":
        return cls(
            url=values.get("X402_FACILITATOR_URL", DEFAULT_FACILITATOR_URL),
            name=values.get("X402_FACILITATOR_NAME", DEFAULT_CLIENT_NAME),
            max_retries=_parse_non_negative(
                values, "X402_MAX_RETRIES", DEFAULT_MAX_RETRIES
            ),
            retry_backoff_ms=_parse_non_negative(
                values, "X402_RETRY_BACKOFF_MS", DEFAULT_RETRY_BACKOFF_MS
            ),
            receive_timeout_ms=_parse_non_negative(
                values, "X402_RECEIVE_TIMEOUT_MS", DEFAULT_RECEIVE_TIMEOUT_MS
            ),
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        url: Optional[str] = None,
        name: Optional[str] = None,
        max_retries: Optional[int | str] = None,
        retry_backoff_ms: Optional[int | str] = None,
        receive_timeout_ms: Optional[int | str] = None,
    ) -> "FacilitatorConfig":
        parameter_overrides = _collect_parameter_overrides(
            {
                "url": url,
                "name": name,
                "max_retries": max_retries,
                "retry_backoff_ms": retry_backoff_ms,
                "receive_timeout_ms": receive_timeout_ms,
            }
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_facilitator_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    url: Optional[str] = None,
    name: Optional[str] = None,
    max_retries: Optional[int | str] = None,
    retry_backoff_ms: Optional[int | str] = None,
    receive_timeout_ms: Optional[int | str] = None,
) -> FacilitatorConfig:
    """
    Convenience wrapper that mirrors :meth:`FacilitatorConfig.from_env`.

    Settings can come from environment variables, a ``.env`` file, direct
    keyword arguments, or any combination of the three.
    """
    return FacilitatorConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        url=url,
        name=name,
        max_retries=max_retries,
        retry_backoff_ms=retry_backoff_ms,
        receive_timeout_ms=receive_timeout_ms,
    )
