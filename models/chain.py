"""EthChain — target chain/environment for a signing call."""

from __future__ import annotations

from enum import Enum


class EthChain(str, Enum):
    """Closed set of chains an action can be signed for.

    Values are the chain names the exchange expects on the wire.
    """

    LOCALHOST = "Localhost"
    ARBITRUM_GOERLI = "ArbitrumGoerli"
    ARBITRUM = "Arbitrum"

    @property
    def chain_id(self) -> int:
        return _CHAIN_IDS[self]


_CHAIN_IDS: dict[EthChain, int] = {
    EthChain.LOCALHOST: 1337,
    EthChain.ARBITRUM_GOERLI: 421613,
    EthChain.ARBITRUM: 42161,
}
