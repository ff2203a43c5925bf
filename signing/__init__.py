"""Hyperliquid action signing — signing package.

- connection_id: canonical Keccak digest of an action (+ nonce/vault)
- domains: EIP-712 domain per chain, agent source tag
- typed_data: Agent / UsdTransferSignPayload typed data and digest
- signer: recoverable low-s secp256k1 signing behind ``DigestSigner``
- create_signature: sign_l1_action / sign_usd_transfer_action / sign_with_agent
- exchange: signed request bodies per action kind
- async_signer: process-pool signer for asyncio callers
"""

from .async_signer import AsyncActionSigner
from .connection_id import action_hash, agent_connection_id, connection_id_for, keccak
from .create_signature import sign_l1_action, sign_usd_transfer_action, sign_with_agent
from .exchange import SignedAction
from .signer import DigestSigner, LocalKeySigner, recover_address, sign_hash

__all__ = [
    "AsyncActionSigner",
    "DigestSigner",
    "LocalKeySigner",
    "SignedAction",
    "action_hash",
    "agent_connection_id",
    "connection_id_for",
    "keccak",
    "recover_address",
    "sign_hash",
    "sign_l1_action",
    "sign_usd_transfer_action",
    "sign_with_agent",
]
