"""Exchange actions — the payload shapes that get signed and posted.

These are plain DTOs.  Their canonical ABI form (what the connection id
is computed from) lives in ``signing.connection_id``; their JSON wire form
is produced by ``to_wire()``.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field

from .chain import EthChain

ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_UINT32_MAX = 2**32 - 1
_UINT64_MAX = 2**64 - 1
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def decimal_to_wire(value: Decimal) -> str:
    """Shortest plain-notation string for *value* (``"1.50"`` -> ``"1.5"``)."""
    if not isinstance(value, Decimal):
        raise TypeError(f"expected Decimal, got {type(value).__name__}")
    text = format(value.normalize(), "f")
    return "0" if text == "-0" else text


class Tif(str, Enum):
    """Time-in-force for limit orders."""

    ALO = "Alo"  # Add-Liquidity-Only
    GTC = "Gtc"  # Good-Til-Cancelled
    IOC = "Ioc"  # Immediate-Or-Cancel


class Tpsl(str, Enum):
    TP = "tp"
    SL = "sl"


class Grouping(str, Enum):
    """How the orders of a bulk order relate to each other."""

    NA = "na"
    NORMAL_TPSL = "normalTpsl"
    POSITION_TPSL = "positionTpsl"


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    action_type: ClassVar[str]

    def to_wire(self) -> dict[str, Any]:
        raise NotImplementedError


# ── Orders ──────────────────────────────────────────────────────────


class LimitOrderType(BaseModel):
    model_config = ConfigDict(frozen=True)

    tif: Tif = Tif.GTC

    def to_wire(self) -> dict[str, Any]:
        return {"limit": {"tif": self.tif.value}}


class TriggerOrderType(BaseModel):
    model_config = ConfigDict(frozen=True)

    trigger_px: Decimal = Field(..., gt=0)
    is_market: bool
    tpsl: Tpsl

    def to_wire(self) -> dict[str, Any]:
        return {
            "trigger": {
                "triggerPx": decimal_to_wire(self.trigger_px),
                "isMarket": self.is_market,
                "tpsl": self.tpsl.value,
            }
        }


class OrderRequest(BaseModel):
    """Single order inside a bulk order."""

    model_config = ConfigDict(frozen=True)

    asset: int = Field(..., ge=0, le=_UINT32_MAX)
    is_buy: bool
    limit_px: Decimal = Field(..., gt=0)
    sz: Decimal = Field(..., gt=0)
    reduce_only: bool = False
    order_type: Union[LimitOrderType, TriggerOrderType] = Field(default_factory=LimitOrderType)

    def to_wire(self) -> dict[str, Any]:
        return {
            "asset": self.asset,
            "isBuy": self.is_buy,
            "limitPx": decimal_to_wire(self.limit_px),
            "sz": decimal_to_wire(self.sz),
            "reduceOnly": self.reduce_only,
            "orderType": self.order_type.to_wire(),
        }


class BulkOrder(_Action):
    action_type: ClassVar[str] = "order"

    orders: list[OrderRequest] = Field(..., min_length=1)
    grouping: Grouping = Grouping.NA

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.action_type,
            "grouping": self.grouping.value,
            "orders": [o.to_wire() for o in self.orders],
        }


# ── Cancels ─────────────────────────────────────────────────────────


class CancelRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset: int = Field(..., ge=0, le=_UINT32_MAX)
    oid: int = Field(..., ge=0, le=_UINT64_MAX)

    def to_wire(self) -> dict[str, Any]:
        return {"asset": self.asset, "oid": self.oid}


class BulkCancel(_Action):
    action_type: ClassVar[str] = "cancel"

    cancels: list[CancelRequest] = Field(..., min_length=1)

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.action_type, "cancels": [c.to_wire() for c in self.cancels]}


# ── Account settings ────────────────────────────────────────────────


class UpdateLeverage(_Action):
    action_type: ClassVar[str] = "updateLeverage"

    asset: int = Field(..., ge=0, le=_UINT32_MAX)
    is_cross: bool
    leverage: int = Field(..., ge=1, le=_UINT32_MAX)

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.action_type,
            "asset": self.asset,
            "isCross": self.is_cross,
            "leverage": self.leverage,
        }


class UpdateIsolatedMargin(_Action):
    """Add (positive ``ntli``) or remove margin, in 1e-6 USD units."""

    action_type: ClassVar[str] = "updateIsolatedMargin"

    asset: int = Field(..., ge=0, le=_UINT32_MAX)
    is_buy: bool
    ntli: int = Field(..., ge=_INT64_MIN, le=_INT64_MAX)

    @classmethod
    def from_usd(cls, asset: int, is_buy: bool, amount_usd: Decimal) -> UpdateIsolatedMargin:
        if not isinstance(amount_usd, Decimal):
            raise TypeError(f"amount_usd must be Decimal, got {type(amount_usd).__name__}")
        scaled = amount_usd * Decimal(10**6)
        ntli = int(scaled.to_integral_value())
        if abs(Decimal(ntli) - scaled) >= Decimal("0.001"):
            raise ValueError(f"amount {amount_usd} has more precision than 1e-6 USD")
        return cls(asset=asset, is_buy=is_buy, ntli=ntli)

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.action_type,
            "asset": self.asset,
            "isBuy": self.is_buy,
            "ntli": self.ntli,
        }


class SetReferrer(_Action):
    action_type: ClassVar[str] = "setReferrer"

    code: str = Field(..., min_length=1)

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.action_type, "code": self.code}


# ── Chain-scoped actions (signed under a public chain domain) ───────


class UsdTransferPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    destination: str = Field(..., pattern=ADDRESS_PATTERN)
    amount: str = Field(..., min_length=1)
    time: int = Field(..., ge=0, le=_UINT64_MAX)

    def to_wire(self) -> dict[str, Any]:
        return {"destination": self.destination, "amount": self.amount, "time": self.time}


class UsdcTransfer(_Action):
    action_type: ClassVar[str] = "usdTransfer"

    chain: EthChain
    payload: UsdTransferPayload

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.action_type,
            "chain": self.chain.value,
            "payload": self.payload.to_wire(),
        }


class AgentWire(BaseModel):
    """``Agent`` struct as it appears inside a connect action."""

    model_config = ConfigDict(frozen=True)

    source: str
    connection_id: bytes = Field(..., min_length=32, max_length=32)

    def to_wire(self) -> dict[str, Any]:
        return {"source": self.source, "connectionId": "0x" + self.connection_id.hex()}


class AgentConnect(_Action):
    """Approve ``agent_address`` to sign L1 actions on the account's behalf."""

    action_type: ClassVar[str] = "connect"

    chain: EthChain
    agent: AgentWire
    agent_address: str = Field(..., pattern=ADDRESS_PATTERN)

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.action_type,
            "chain": self.chain.value,
            "agent": self.agent.to_wire(),
            "agentAddress": self.agent_address,
        }


L1Action = Union[BulkOrder, BulkCancel, UpdateLeverage, UpdateIsolatedMargin, SetReferrer]
