"""
Core primitives that implement the facilitator verify/settle pipeline.
"""

from .client import (
    FacilitatorClient,
    SettlementResult,
    pay,
    settle_payment,
    verify_payment,
)
from .config import DEFAULT_FACILITATOR_URL, FacilitatorConfig, load_facilitator_config
from .decimals import Ordering, ParsedDecimal, compare_decimals, parse_decimal
from .environment import FacilitatorEnvironment, build_environment, read_env_file
from .errors import (
    ConfigError,
    Err,
    ErrorType,
    FacilitatorError,
    FacilitatorResponse,
    HookError,
    HookErrorKind,
    Ok,
    Result,
    SignatureError,
    UnwrapError,
)
from .hooks import (
    Continue,
    DefaultHooks,
    Halt,
    HookContext,
    HookMetadata,
    Hooks,
    Recover,
    run_with_hooks,
    validate_hooks,
)
from .requirements import normalize_requirements
from .signature import REQUIRED_FIELDS, validate_payment_signature
from .transport import request

__all__ = [
    "ConfigError",
    "Continue",
    "DEFAULT_FACILITATOR_URL",
    "DefaultHooks",
    "Err",
    "ErrorType",
    "FacilitatorClient",
    "FacilitatorConfig",
    "FacilitatorEnvironment",
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
    "ParsedDecimal",
    "REQUIRED_FIELDS",
    "Recover",
    "Result",
    "SettlementResult",
    "SignatureError",
    "UnwrapError",
    "build_environment",
    "compare_decimals",
    "load_facilitator_config",
    "normalize_requirements",
    "parse_decimal",
    "pay",
    "read_env_file",
    "request",
    "run_with_hooks",
    "settle_payment",
    "validate_hooks",
    "validate_payment_signature",
    "verify_payment",
]
