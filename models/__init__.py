"""Hyperliquid signer — models package."""

from .actions import (
    AgentConnect,
    AgentWire,
    BulkCancel,
    BulkOrder,
    CancelRequest,
    Grouping,
    LimitOrderType,
    OrderRequest,
    SetReferrer,
    Tif,
    Tpsl,
    TriggerOrderType,
    UpdateIsolatedMargin,
    UpdateLeverage,
    UsdcTransfer,
    UsdTransferPayload,
)
from .chain import EthChain
from .signature import Signature

__all__ = [
    "AgentConnect",
    "AgentWire",
    "BulkCancel",
    "BulkOrder",
    "CancelRequest",
    "EthChain",
    "Grouping",
    "LimitOrderType",
    "OrderRequest",
    "SetReferrer",
    "Signature",
    "Tif",
    "Tpsl",
    "TriggerOrderType",
    "UpdateIsolatedMargin",
    "UpdateLeverage",
    "UsdcTransfer",
    "UsdTransferPayload",
]
