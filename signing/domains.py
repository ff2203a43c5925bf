"""Signing domain selection per chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.errors import ChainNotAllowed
from models.chain import EthChain

DOMAIN_NAME = "Exchange"
DOMAIN_VERSION = "1"
VERIFYING_CONTRACT = "0x0000000000000000000000000000000000000000"

MAINNET_SOURCE = "a"
TESTNET_SOURCE = "b"

EIP712_DOMAIN_FIELDS: list[dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]


@dataclass(frozen=True)
class Eip712Domain:
    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


def _domain(chain: EthChain) -> Eip712Domain:
    return Eip712Domain(
        name=DOMAIN_NAME,
        version=DOMAIN_VERSION,
        chain_id=chain.chain_id,
        verifying_contract=VERIFYING_CONTRACT,
    )


L1_DOMAIN = _domain(EthChain.LOCALHOST)
TESTNET_DOMAIN = _domain(EthChain.ARBITRUM_GOERLI)
MAINNET_DOMAIN = _domain(EthChain.ARBITRUM)

_AGENT_DOMAINS: dict[EthChain, Eip712Domain] = {
    EthChain.LOCALHOST: L1_DOMAIN,
    EthChain.ARBITRUM_GOERLI: TESTNET_DOMAIN,
    EthChain.ARBITRUM: MAINNET_DOMAIN,
}

# No LOCALHOST entry: value transfers need a real chain.
_TRANSFER_DOMAINS: dict[EthChain, Eip712Domain] = {
    EthChain.ARBITRUM_GOERLI: TESTNET_DOMAIN,
    EthChain.ARBITRUM: MAINNET_DOMAIN,
}


def source_tag(is_mainnet: bool) -> str:
    """Source literal embedded in an L1 agent: ``"a"`` mainnet, ``"b"`` otherwise."""
    return MAINNET_SOURCE if is_mainnet else TESTNET_SOURCE


def agent_domain(chain: EthChain) -> Eip712Domain:
    """Domain an ``Agent`` payload is signed under on *chain*."""
    try:
        return _AGENT_DOMAINS[EthChain(chain)]
    except (KeyError, ValueError):
        raise ChainNotAllowed(action="agent", chain=chain) from None


def transfer_domain(chain: EthChain) -> Eip712Domain:
    """Domain a USD transfer is signed under; ``LOCALHOST`` is rejected."""
    try:
        return _TRANSFER_DOMAINS[EthChain(chain)]
    except (KeyError, ValueError):
        raise ChainNotAllowed(action="usdTransfer", chain=chain) from None


def require_public_chain(chain: EthChain, action: str) -> EthChain:
    """Return *chain* if it is a public chain, else raise ``ChainNotAllowed``."""
    if chain not in _TRANSFER_DOMAINS:
        raise ChainNotAllowed(action=action, chain=chain)
    return EthChain(chain)
