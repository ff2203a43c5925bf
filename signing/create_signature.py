"""Signing entry points: connection id / transfer → typed data → signature.

Every function here is a pure pipeline of its arguments; nothing is
cached or shared between calls, so they are safe to call from any
number of threads or worker processes.
"""

from __future__ import annotations

import structlog

from core.errors import SigningError, TypedDataEncodingError
from models.chain import EthChain
from models.signature import Signature

from .domains import Eip712Domain, agent_domain, source_tag, transfer_domain
from .signer import DigestSigner, sign_hash
from .typed_data import (
    AgentPayload,
    TypedPayload,
    UsdTransferSignPayload,
    build_and_digest,
)

logger = structlog.get_logger("signing.create_signature")


def sign_l1_action(
    signer: DigestSigner,
    connection_id: bytes | str,
    is_mainnet: bool,
) -> Signature:
    """Sign an L1 action (order, cancel, leverage, margin, referrer).

    L1 actions are always signed under the ``LOCALHOST`` domain;
    *is_mainnet* only picks the ``source`` tag embedded in the agent.
    """
    return sign_with_agent(
        signer,
        EthChain.LOCALHOST,
        source_tag(is_mainnet),
        connection_id,
    )


def sign_usd_transfer_action(
    signer: DigestSigner,
    chain: EthChain,
    amount: str,
    destination: str,
    timestamp: int,
) -> Signature:
    """Sign a USD transfer.  Raises ``ChainNotAllowed`` on ``LOCALHOST``."""
    domain = transfer_domain(chain)
    payload = UsdTransferSignPayload(destination=destination, amount=amount, time=timestamp)
    return _sign_payload(signer, payload, domain, action="usdTransfer", chain=chain)


def sign_with_agent(
    signer: DigestSigner,
    chain: EthChain,
    source: str,
    connection_id: bytes | str,
) -> Signature:
    """Sign an ``Agent(source, connectionId)`` under *chain*'s domain."""
    domain = agent_domain(chain)
    payload = AgentPayload(source=source, connection_id=_as_bytes32(connection_id, chain))
    return _sign_payload(signer, payload, domain, action="agent", chain=chain)


def _sign_payload(
    signer: DigestSigner,
    payload: TypedPayload,
    domain: Eip712Domain,
    *,
    action: str,
    chain: EthChain,
) -> Signature:
    try:
        digest = build_and_digest(payload, domain)
        signature = sign_hash(digest, signer)
    except SigningError as exc:
        # attach call-site context the lower layers do not know
        if exc.action is None:
            exc.action = action
        if exc.chain is None:
            exc.chain = chain
        raise
    logger.debug(
        "signature.created",
        action=action,
        chain=EthChain(chain).value,
        chain_id=domain.chain_id,
    )
    return signature


def _as_bytes32(value: bytes | str, chain: EthChain) -> bytes:
    # bytes32 encoding right-pads short values, so the length is checked here
    if isinstance(value, str):
        try:
            value = bytes.fromhex(value[2:] if value.startswith("0x") else value)
        except ValueError:
            raise TypedDataEncodingError(
                "connection id is not valid hex", action="agent", chain=chain
            ) from None
    if len(value) != 32:
        raise TypedDataEncodingError(
            f"connection id must be 32 bytes, got {len(value)}",
            action="agent",
            chain=chain,
        )
    return bytes(value)
