"""
Public facade for the x402 facilitator client package.

The most useful pieces are re-exported here so integrators can
``from x402_facilitator import ...`` without navigating the package.
"""

from .api import create_facilitator_client, pay
from .core import (
    DEFAULT_FACILITATOR_URL,
    ConfigError,
    Continue,
    DefaultHooks,
    Err,
    ErrorType,
    FacilitatorClient,
    FacilitatorConfig,
    FacilitatorError,
    FacilitatorResponse,
    Halt,
    HookContext,
    HookError,
    HookErrorKind,
    HookMetadata,
    Hooks,
    Ok,
    Ordering,
    Recover,
    Result,
    SettlementResult,
    SignatureError,
    compare_decimals,
    load_facilitator_config,
    normalize_requirements,
    parse_decimal,
    settle_payment,
    validate_payment_signature,
    verify_payment,
)

__all__ = (
    "ConfigError",
    "Continue",
    "DEFAULT_FACILITATOR_URL",
    "DefaultHooks",
    "Err",
    "ErrorType",
    "FacilitatorClient",
    "FacilitatorConfig",
    "FacilitatorError",
    "FacilitatorResponse",
    "Halt",
    "HookContext",
    "HookError",
    "HookErrorKind",
    "HookMetadata",
    "Hooks",
    "Ok",
    "Ordering",
    "Recover",
    "Result",
    "SettlementResult",
    "SignatureError",
    "compare_decimals",
    "create_facilitator_client",
    "load_facilitator_config",
    "normalize_requirements",
    "parse_decimal",
    "pay",
    "settle_payment",
    "validate_payment_signature",
    "verify_payment",
)
