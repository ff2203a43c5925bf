"""Signed exchange requests — action + nonce + signature, ready to post.

Nothing here talks to the network; the transport layer takes
``SignedAction.to_wire()`` and sends it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

import structlog

from config.settings import settings
from models.actions import (
    AgentConnect,
    AgentWire,
    BulkCancel,
    BulkOrder,
    CancelRequest,
    L1Action,
    OrderRequest,
    SetReferrer,
    UpdateIsolatedMargin,
    UpdateLeverage,
    UsdcTransfer,
    UsdTransferPayload,
)
from models.chain import EthChain
from models.signature import Signature

from .connection_id import agent_connection_id, connection_id_for
from .create_signature import sign_l1_action, sign_usd_transfer_action, sign_with_agent
from .domains import require_public_chain
from .signer import DigestSigner

logger = structlog.get_logger("signing.exchange")


@dataclass(frozen=True)
class SignedAction:
    """An action with everything the exchange needs to verify it."""

    action: Any
    nonce: int
    signature: Signature
    vault_address: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        return {
            "action": self.action.to_wire(),
            "nonce": self.nonce,
            "signature": self.signature.to_wire(),
            "vaultAddress": self.vault_address,
        }


def sign_l1(
    signer: DigestSigner,
    action: L1Action,
    nonce: int,
    is_mainnet: bool,
    vault_address: str | None = None,
) -> SignedAction:
    """Hash *action* with its nonce/vault context and sign it as an L1 action."""
    connection_id = connection_id_for(action, nonce, vault_address)
    signature = sign_l1_action(signer, connection_id, is_mainnet)
    logger.info(
        "exchange.l1_signed",
        action=action.action_type,
        nonce=nonce,
        is_mainnet=is_mainnet,
        vault=vault_address,
    )
    return SignedAction(
        action=action,
        nonce=nonce,
        signature=signature,
        vault_address=vault_address,
    )


def sign_order(
    signer: DigestSigner,
    orders: list[OrderRequest],
    nonce: int,
    is_mainnet: bool,
    vault_address: str | None = None,
    grouping: str = "na",
) -> SignedAction:
    action = BulkOrder(orders=orders, grouping=grouping)
    return sign_l1(signer, action, nonce, is_mainnet, vault_address)


def sign_cancel(
    signer: DigestSigner,
    cancels: list[CancelRequest],
    nonce: int,
    is_mainnet: bool,
    vault_address: str | None = None,
) -> SignedAction:
    return sign_l1(signer, BulkCancel(cancels=cancels), nonce, is_mainnet, vault_address)


def sign_update_leverage(
    signer: DigestSigner,
    asset: int,
    leverage: int,
    is_cross: bool,
    nonce: int,
    is_mainnet: bool,
    vault_address: str | None = None,
) -> SignedAction:
    action = UpdateLeverage(asset=asset, is_cross=is_cross, leverage=leverage)
    return sign_l1(signer, action, nonce, is_mainnet, vault_address)


def sign_update_isolated_margin(
    signer: DigestSigner,
    asset: int,
    is_buy: bool,
    amount_usd: Decimal,
    nonce: int,
    is_mainnet: bool,
    vault_address: str | None = None,
) -> SignedAction:
    action = UpdateIsolatedMargin.from_usd(asset, is_buy, amount_usd)
    return sign_l1(signer, action, nonce, is_mainnet, vault_address)


def sign_set_referrer(
    signer: DigestSigner,
    code: str,
    nonce: int,
    is_mainnet: bool,
) -> SignedAction:
    return sign_l1(signer, SetReferrer(code=code), nonce, is_mainnet)


def sign_usd_transfer(
    signer: DigestSigner,
    chain: EthChain,
    amount: str,
    destination: str,
    timestamp: int,
) -> SignedAction:
    """Transfer *amount* USD to *destination*; the timestamp doubles as nonce."""
    payload = UsdTransferPayload(destination=destination, amount=amount, time=timestamp)
    signature = sign_usd_transfer_action(signer, chain, amount, destination, timestamp)
    action = UsdcTransfer(chain=EthChain(chain), payload=payload)
    logger.info("exchange.transfer_signed", chain=EthChain(chain).value, amount=amount)
    return SignedAction(action=action, nonce=timestamp, signature=signature)


def sign_approve_agent(
    signer: DigestSigner,
    chain: EthChain,
    agent_address: str,
    nonce: int,
    source: str | None = None,
) -> SignedAction:
    """Authorize *agent_address* to sign L1 actions for the account.

    The agent is signed under the public chain's domain, so ``LOCALHOST``
    is rejected with ``ChainNotAllowed``.
    """
    chain = require_public_chain(chain, "connect")
    agent = AgentWire(
        source=source or settings.AGENT_SOURCE,
        connection_id=agent_connection_id(agent_address),
    )
    signature = sign_with_agent(signer, chain, agent.source, agent.connection_id)
    action = AgentConnect(chain=chain, agent=agent, agent_address=agent_address)
    logger.info("exchange.agent_approved", chain=chain.value, agent=agent_address)
    return SignedAction(action=action, nonce=nonce, signature=signature)
