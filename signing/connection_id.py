"""Connection id — canonical Keccak digest of an exchange action.

The exchange recomputes this digest from the posted action, so the ABI
form built here has to match its verifier byte for byte: field order,
integer widths and the trailing ``(vault, nonce)`` context all matter.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal
from functools import singledispatch
from typing import Any, Sequence

import structlog
from eth_abi import encode
from eth_utils import keccak as _keccak256

from models.actions import (
    ZERO_ADDRESS,
    BulkCancel,
    BulkOrder,
    Grouping,
    LimitOrderType,
    OrderRequest,
    SetReferrer,
    Tif,
    Tpsl,
    TriggerOrderType,
    UpdateIsolatedMargin,
    UpdateLeverage,
)

logger = structlog.get_logger("signing.connection_id")

HASHING_DECIMALS = 8

ORDER_ABI_TYPE = "(uint32,bool,uint64,uint64,bool,uint8,uint64)[]"
CANCEL_ABI_TYPE = "(uint32,uint64)[]"

_LIMIT_CODES: dict[Tif, int] = {Tif.ALO: 1, Tif.GTC: 2, Tif.IOC: 3}
_TRIGGER_CODES: dict[tuple[bool, Tpsl], int] = {
    (True, Tpsl.TP): 4,
    (False, Tpsl.TP): 5,
    (True, Tpsl.SL): 6,
    (False, Tpsl.SL): 7,
}
_GROUPING_CODES: dict[Grouping, int] = {
    Grouping.NA: 0,
    Grouping.NORMAL_TPSL: 1,
    Grouping.POSITION_TPSL: 2,
}


def keccak(abi_types: Sequence[str], values: Sequence[Any]) -> bytes:
    """ABI-encode *values* as the tuple *abi_types* and Keccak-256 the bytes."""
    return _keccak256(encode(list(abi_types), list(values)))


def action_hash(
    abi_types: Sequence[str],
    values: Sequence[Any],
    nonce: int | None = None,
    vault_address: str | None = None,
) -> bytes:
    """Connection id for an action given in canonical ABI form.

    With a *nonce* the tuple is extended with ``(address, uint64)``: the
    vault address, or the zero address when trading for the account itself,
    followed by the nonce.  Without a nonce nothing is appended; that form
    is for actions with no nonce/vault context at all.
    """
    if len(abi_types) != len(values):
        raise ValueError(
            f"{len(abi_types)} ABI types given for {len(values)} values"
        )
    types = list(abi_types)
    data = list(values)
    if nonce is not None:
        types += ["address", "uint64"]
        data += [_address_bytes(vault_address or ZERO_ADDRESS), nonce]
    elif vault_address is not None:
        raise ValueError("vault_address requires a nonce")

    digest = keccak(types, data)
    logger.debug(
        "connection_id.computed",
        abi_types=types,
        has_vault=vault_address is not None,
        connection_id="0x" + digest.hex(),
    )
    return digest


def to_hashing_int(value: Decimal, decimals: int = HASHING_DECIMALS) -> int:
    """Scale *value* by ``10**decimals`` to the integer that gets hashed.

    Raises
    ------
    TypeError
        If *value* is not a ``Decimal`` (floats are never accepted).
    ValueError
        If scaling would drop more than 1e-3 of a unit.
    """
    if not isinstance(value, Decimal):
        raise TypeError(f"expected Decimal, got {type(value).__name__}")
    scaled = value * (Decimal(10) ** decimals)
    rounded = scaled.to_integral_value(rounding=ROUND_HALF_EVEN)
    if abs(rounded - scaled) >= Decimal("0.001"):
        raise ValueError(f"{value} has more than {decimals} decimals of precision")
    return int(rounded)


def order_type_code(order_type: LimitOrderType | TriggerOrderType) -> tuple[int, int]:
    """``(type code, hashed trigger price)`` for an order type."""
    if isinstance(order_type, LimitOrderType):
        return _LIMIT_CODES[order_type.tif], 0
    return (
        _TRIGGER_CODES[(order_type.is_market, order_type.tpsl)],
        to_hashing_int(order_type.trigger_px),
    )


def order_tuple(order: OrderRequest) -> tuple[int, bool, int, int, bool, int, int]:
    code, trigger_px = order_type_code(order.order_type)
    return (
        order.asset,
        order.is_buy,
        to_hashing_int(order.limit_px),
        to_hashing_int(order.sz),
        order.reduce_only,
        code,
        trigger_px,
    )


# ── Canonical ABI form per action kind ──────────────────────────────


@singledispatch
def abi_form(action: Any) -> tuple[list[str], list[Any]]:
    """``(abi_types, values)`` an L1 action is hashed from."""
    raise TypeError(f"no canonical ABI form for {type(action).__name__}")


@abi_form.register
def _(action: BulkOrder) -> tuple[list[str], list[Any]]:
    return (
        [ORDER_ABI_TYPE, "uint8"],
        [[order_tuple(o) for o in action.orders], _GROUPING_CODES[action.grouping]],
    )


@abi_form.register
def _(action: BulkCancel) -> tuple[list[str], list[Any]]:
    return [CANCEL_ABI_TYPE], [[(c.asset, c.oid) for c in action.cancels]]


@abi_form.register
def _(action: UpdateLeverage) -> tuple[list[str], list[Any]]:
    return ["uint32", "bool", "uint32"], [action.asset, action.is_cross, action.leverage]


@abi_form.register
def _(action: UpdateIsolatedMargin) -> tuple[list[str], list[Any]]:
    return ["uint32", "bool", "int64"], [action.asset, action.is_buy, action.ntli]


@abi_form.register
def _(action: SetReferrer) -> tuple[list[str], list[Any]]:
    return ["string"], [action.code]


def connection_id_for(action: Any, nonce: int, vault_address: str | None = None) -> bytes:
    """Connection id of an L1 action signed with *nonce* (and optional vault)."""
    abi_types, values = abi_form(action)
    return action_hash(abi_types, values, nonce=nonce, vault_address=vault_address)


def agent_connection_id(agent_address: str) -> bytes:
    """Connection id of an approve-agent action: the agent address alone."""
    return action_hash(["address"], [_address_bytes(agent_address)])


def _address_bytes(address: str) -> bytes:
    raw = bytes.fromhex(address[2:] if address.startswith("0x") else address)
    if len(raw) != 20:
        raise ValueError(f"address must be 20 bytes, got {len(raw)}")
    return raw
