"""EIP-712 payload builders and digest.

Payloads are immutable values; the free functions below turn them into
the full typed-data message and its 32-byte signing digest
``keccak(0x19 0x01 ‖ domainSeparator ‖ hashStruct(message))``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import structlog
from eth_abi.exceptions import EncodingError
from eth_account.messages import encode_typed_data
from eth_utils import ValidationError, keccak

from core.errors import TypedDataEncodingError

from .domains import EIP712_DOMAIN_FIELDS, Eip712Domain

logger = structlog.get_logger("signing.typed_data")

AGENT_FIELDS: list[dict[str, str]] = [
    {"name": "source", "type": "string"},
    {"name": "connectionId", "type": "bytes32"},
]

USD_TRANSFER_FIELDS: list[dict[str, str]] = [
    {"name": "destination", "type": "string"},
    {"name": "amount", "type": "string"},
    {"name": "time", "type": "uint64"},
]


@dataclass(frozen=True)
class AgentPayload:
    source: str
    connection_id: bytes


@dataclass(frozen=True)
class UsdTransferSignPayload:
    destination: str
    amount: str
    time: int


TypedPayload = Union[AgentPayload, UsdTransferSignPayload]


def agent_typed_data(agent: AgentPayload, domain: Eip712Domain) -> dict[str, Any]:
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN_FIELDS, "Agent": AGENT_FIELDS},
        "primaryType": "Agent",
        "domain": domain.as_dict(),
        "message": {"source": agent.source, "connectionId": agent.connection_id},
    }


def usd_transfer_typed_data(
    payload: UsdTransferSignPayload, domain: Eip712Domain
) -> dict[str, Any]:
    return {
        "types": {
            "EIP712Domain": EIP712_DOMAIN_FIELDS,
            "UsdTransferSignPayload": USD_TRANSFER_FIELDS,
        },
        "primaryType": "UsdTransferSignPayload",
        "domain": domain.as_dict(),
        "message": {
            "destination": payload.destination,
            "amount": payload.amount,
            "time": payload.time,
        },
    }


def build_typed_data(payload: TypedPayload, domain: Eip712Domain) -> dict[str, Any]:
    if isinstance(payload, AgentPayload):
        return agent_typed_data(payload, domain)
    if isinstance(payload, UsdTransferSignPayload):
        return usd_transfer_typed_data(payload, domain)
    raise TypedDataEncodingError(f"unsupported typed payload {type(payload).__name__}")


def typed_data_digest(typed_data: dict[str, Any]) -> bytes:
    """EIP-712 digest of a full typed-data message.

    Raises
    ------
    TypedDataEncodingError
        If a field is missing or does not fit its declared type.
    """
    primary_type = typed_data.get("primaryType")
    _check_fields(typed_data, primary_type)
    try:
        signable = encode_typed_data(full_message=typed_data)
    except (EncodingError, ValidationError, ValueError, TypeError, KeyError) as exc:
        raise TypedDataEncodingError(
            f"cannot encode {primary_type} typed data: {exc}"
        ) from exc

    digest = keccak(b"\x19" + signable.version + signable.header + signable.body)
    logger.debug(
        "typed_data.digest",
        primary_type=primary_type,
        chain_id=typed_data["domain"].get("chainId"),
        digest="0x" + digest.hex(),
    )
    return digest


def build_and_digest(payload: TypedPayload, domain: Eip712Domain) -> bytes:
    return typed_data_digest(build_typed_data(payload, domain))


def _check_fields(typed_data: dict[str, Any], primary_type: Any) -> None:
    # encode_typed_data zero-fills absent fields, so names are matched here
    try:
        types = typed_data["types"]
        sections = [
            ("domain", types["EIP712Domain"], typed_data["domain"]),
            ("message", types[primary_type], typed_data["message"]),
        ]
    except (KeyError, TypeError) as exc:
        raise TypedDataEncodingError(
            f"cannot encode {primary_type} typed data: missing {exc}"
        ) from None
    for section, fields, values in sections:
        declared = {field["name"] for field in fields}
        missing = sorted(declared - set(values))
        unexpected = sorted(set(values) - declared)
        if missing or unexpected:
            raise TypedDataEncodingError(
                f"cannot encode {primary_type} typed data: {section} "
                f"missing fields {missing}, unexpected fields {unexpected}"
            )
