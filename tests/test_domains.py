"""Tests for signing/domains.py."""

from __future__ import annotations

import pytest

from core.errors import ChainNotAllowed
from models.chain import EthChain
from signing.domains import (
    L1_DOMAIN,
    MAINNET_DOMAIN,
    TESTNET_DOMAIN,
    agent_domain,
    require_public_chain,
    source_tag,
    transfer_domain,
)


class TestSourceTag:

    def test_mainnet(self) -> None:
        assert source_tag(True) == "a"

    def test_not_mainnet(self) -> None:
        assert source_tag(False) == "b"


class TestAgentDomain:

    @pytest.mark.parametrize(
        "chain,domain,chain_id",
        [
            (EthChain.LOCALHOST, L1_DOMAIN, 1337),
            (EthChain.ARBITRUM_GOERLI, TESTNET_DOMAIN, 421613),
            (EthChain.ARBITRUM, MAINNET_DOMAIN, 42161),
        ],
    )
    def test_every_chain_resolves(self, chain: EthChain, domain, chain_id: int) -> None:
        resolved = agent_domain(chain)
        assert resolved == domain
        assert resolved.chain_id == chain_id
        assert resolved.name == "Exchange"
        assert resolved.version == "1"

    def test_unknown_chain(self) -> None:
        with pytest.raises(ChainNotAllowed):
            agent_domain("Optimism")  # type: ignore[arg-type]


class TestTransferDomain:

    def test_localhost_rejected(self) -> None:
        with pytest.raises(ChainNotAllowed) as exc_info:
            transfer_domain(EthChain.LOCALHOST)
        assert exc_info.value.action == "usdTransfer"
        assert "Localhost" in str(exc_info.value)

    def test_public_chains(self) -> None:
        assert transfer_domain(EthChain.ARBITRUM) == MAINNET_DOMAIN
        assert transfer_domain(EthChain.ARBITRUM_GOERLI) == TESTNET_DOMAIN


class TestRequirePublicChain:

    def test_localhost_rejected(self) -> None:
        with pytest.raises(ChainNotAllowed, match="connect"):
            require_public_chain(EthChain.LOCALHOST, "connect")

    def test_wire_name_accepted(self) -> None:
        assert require_public_chain("Arbitrum", "connect") is EthChain.ARBITRUM  # type: ignore[arg-type]
