"""Sign Action CLI — sign exchange actions from JSON on stdin.

The private key comes from ``PRIVATE_KEY`` (env / .env), never from argv.

Usage:
    echo '{"connection_id": "0x…", "is_mainnet": true}' | python3 -m cli.sign_action l1
    echo '{"chain": "ArbitrumGoerli", "amount": "1", "destination": "0x…", "timestamp": 1690393044548}' \\
        | python3 -m cli.sign_action usd-transfer
    echo '{"chain": "Arbitrum", "source": "https://hyperliquid.xyz", "connection_id": "0x…"}' \\
        | python3 -m cli.sign_action agent

Output is one JSON object on stdout:
    {"ok": true, "signature": "<r‖s‖v hex>", "wire": {"r": …, "s": …, "v": …}, "signer": "0x…"}
    {"ok": false, "error": {"code": …, "message": …, "details": {…}}}
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, NoReturn, Optional

import structlog

from config.settings import settings
from core.errors import SigningError
from core.logger import setup_logging
from models.chain import EthChain
from models.signature import Signature
from signing.create_signature import sign_l1_action, sign_usd_transfer_action, sign_with_agent
from signing.signer import LocalKeySigner

logger = structlog.get_logger("cli.sign_action")


class InputError(ValueError):
    """Malformed CLI input."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details = details or {}


def _emit(payload: dict[str, Any], exit_code: int = 0) -> NoReturn:
    sys.stdout.write(json.dumps(payload))
    sys.stdout.write("\n")
    sys.exit(exit_code)


def _fail(code: str, message: str, details: Optional[dict[str, Any]] = None) -> NoReturn:
    _emit(
        {"ok": False, "error": {"code": code, "message": message, "details": details or {}}},
        exit_code=1,
    )


def _require_str(obj: dict[str, Any], field: str) -> str:
    value = obj.get(field)
    if not isinstance(value, str) or not value.strip():
        raise InputError(f"field {field} is required", {"field": field})
    return value.strip()


def _require_int(obj: dict[str, Any], field: str) -> int:
    value = obj.get(field)
    if isinstance(value, bool):
        raise InputError(f"field {field} must be an integer", {"field": field, "value": value})
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InputError(
            f"field {field} must be an integer", {"field": field, "value": value}
        ) from None


def _require_bool(obj: dict[str, Any], field: str, default: bool = False) -> bool:
    value = obj.get(field, default)
    if not isinstance(value, bool):
        raise InputError(f"field {field} must be a boolean", {"field": field, "value": value})
    return value


def _require_chain(obj: dict[str, Any]) -> EthChain:
    name = obj.get("chain", settings.DEFAULT_CHAIN.value)
    try:
        return EthChain(name)
    except ValueError:
        raise InputError(
            f"unknown chain {name!r}",
            {"chain": name, "allowed": [c.value for c in EthChain]},
        ) from None


# ── Commands ─────────────────────────────────────────────────────────


def cmd_l1(signer: LocalKeySigner, request: dict[str, Any]) -> Signature:
    return sign_l1_action(
        signer,
        _require_str(request, "connection_id"),
        _require_bool(request, "is_mainnet"),
    )


def cmd_usd_transfer(signer: LocalKeySigner, request: dict[str, Any]) -> Signature:
    return sign_usd_transfer_action(
        signer,
        _require_chain(request),
        _require_str(request, "amount"),
        _require_str(request, "destination"),
        _require_int(request, "timestamp"),
    )


def cmd_agent(signer: LocalKeySigner, request: dict[str, Any]) -> Signature:
    return sign_with_agent(
        signer,
        _require_chain(request),
        request.get("source") or settings.AGENT_SOURCE,
        _require_str(request, "connection_id"),
    )


COMMANDS = {
    "l1": cmd_l1,
    "usd-transfer": cmd_usd_transfer,
    "agent": cmd_agent,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sign_action",
        description="Sign Hyperliquid exchange actions (JSON in, JSON out)",
    )
    parser.add_argument("command", choices=sorted(COMMANDS), help="What to sign")
    parser.add_argument(
        "--input",
        type=argparse.FileType("r"),
        default=sys.stdin,
        help="JSON request file (default: stdin)",
    )
    return parser


def run(command: str, raw_request: str, private_key: str) -> dict[str, Any]:
    """Sign one request and return the success payload.

    Raises ``InputError`` or ``SigningError`` on failure.
    """
    if not private_key:
        raise InputError("PRIVATE_KEY is not set")
    try:
        request = json.loads(raw_request or "{}")
    except json.JSONDecodeError as exc:
        raise InputError(f"invalid JSON: {exc.msg}") from None
    if not isinstance(request, dict):
        raise InputError("request must be a JSON object")

    signer = LocalKeySigner.from_hex(private_key)
    signature = COMMANDS[command](signer, request)
    logger.info("cli.signed", command=command, signer=signer.address)
    return {
        "ok": True,
        "signature": signature.to_hex(),
        "wire": signature.to_wire(),
        "signer": signer.address,
    }


def main() -> None:
    setup_logging()
    args = build_parser().parse_args()
    try:
        result = run(args.command, args.input.read(), settings.PRIVATE_KEY)
    except InputError as exc:
        _fail("INPUT_INVALID", str(exc), exc.details)
    except SigningError as exc:
        error = exc.to_dict()
        _fail(error["code"], error["message"], error["details"])
    _emit(result)


if __name__ == "__main__":
    main()
