"""
Command-line interface for exercising the facilitator client.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Sequence, TextIO, Tuple

from .api import create_facilitator_client
from .core.client import FacilitatorClient
from .core.errors import ConfigError, Err
from .core.signature import validate_payment_signature


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def _load_json_object(path: str) -> Dict[str, Any]:
    if path == "-":
        data = json.load(sys.stdin)
    else:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, BaseException):
        return repr(value)
    return value


def _emit(result: Any, out: TextIO) -> None:
    out.write(json.dumps(_jsonable(result), indent=2, default=repr))
    out.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="x402-facilitator",
        description="Verify and settle x402 payments against a facilitator",
    )
    parser.add_argument(
        "command",
        choices=("verify", "settle", "pay", "validate"),
        help="Operation to run (pay = verify then settle)",
    )
    parser.add_argument(
        "--payload",
        required=True,
        help="Path to a JSON file with the decoded payment payload ('-' for stdin)",
    )
    parser.add_argument(
        "--requirements",
        required=True,
        help="Path to a JSON file with the payment requirements",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing X402_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument(
        "--verify-only",
        action="store_true",
        help="With 'pay', submit the payload to /verify but skip settlement",
    )
    return parser


def run_cli(argv: Sequence[str] | None = None, *, out: TextIO | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    out = out or sys.stdout

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        payload = _load_json_object(args.payload)
        requirements = _load_json_object(args.requirements)
    except (OSError, ValueError) as exc:
        logging.error("Could not read input: %s", exc)
        return 1

    if args.command == "validate":
        return _handle_result(validate_payment_signature(payload, requirements), out)

    try:
        client = create_facilitator_client(
            env_file=args.env_file,
            overrides=overrides,
        )
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    with client:
        return _run_operation(client, args.command, payload, requirements, args.verify_only, out)


def _run_operation(
    client: FacilitatorClient,
    command: str,
    payload: Dict[str, Any],
    requirements: Dict[str, Any],
    verify_only: bool,
    out: TextIO,
) -> int:
    if command == "verify":
        result = client.verify(payload, requirements)
    elif command == "settle":
        result = client.settle(payload, requirements)
    else:
        result = client.pay(payload, requirements, verify_only=verify_only)
    return _handle_result(result, out)


def _handle_result(result: Any, out: TextIO) -> int:
    if isinstance(result, Err):
        logging.error("Operation failed: %s", result.error)
        _emit({"ok": False, "error": result.error}, out)
        return 1

    _emit({"ok": True, "result": result.value}, out)
    return 0


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
