"""Tests for signing/create_signature.py — known vectors and chain gating."""

from __future__ import annotations

import pytest

from core.errors import ChainNotAllowed, SigningFailure, TypedDataEncodingError
from models.chain import EthChain
from signing.create_signature import (
    sign_l1_action,
    sign_usd_transfer_action,
    sign_with_agent,
)
from signing.domains import L1_DOMAIN
from signing.signer import LocalKeySigner, recover_address
from signing.typed_data import AgentPayload, build_and_digest

from .conftest import CONNECTION_ID

MAINNET_L1_SIG = (
    "fa8a41f6a3fa728206df80801a83bcbfbab08649cd34d9c0bfba7c7b2f99340f"
    "53a00226604567b98a1492803190d65a201d6805e5831b7044f17fd530aec784"
    "1c"
)
TESTNET_L1_SIG = (
    "1713c0fc661b792a50e8ffdd59b637b1ed172d9a3aa4d801d9d88646710fb74b"
    "33959f4d075a7ccbec9f2374a6da21ffa4448d58d0413a0d335775f680a88143"
    "1c"
)
TRANSFER_SIG = (
    "78f879e7ae6fbc3184dc304317e602507ac562b49ad9a5db120a41ac181b96ba"
    "2e8bd7022526a1827cf4b0ba96384d40ec3a5ed4239499c328081f3d0b394bb6"
    "1b"
)

DESTINATION = "0x0D1d9635D0640821d15e323ac8AdADfA9c111414"
TIMESTAMP = 1690393044548


class TestSignL1Action:

    def test_mainnet_vector(self, signer: LocalKeySigner, connection_id: bytes) -> None:
        sig = sign_l1_action(signer, connection_id, True)
        assert str(sig) == MAINNET_L1_SIG

    def test_testnet_vector(self, signer: LocalKeySigner, connection_id: bytes) -> None:
        sig = sign_l1_action(signer, connection_id, False)
        assert str(sig) == TESTNET_L1_SIG

    def test_accepts_hex_connection_id(self, signer: LocalKeySigner) -> None:
        assert sign_l1_action(signer, CONNECTION_ID, True).to_hex() == MAINNET_L1_SIG

    def test_signed_under_localhost_domain(
        self, signer: LocalKeySigner, connection_id: bytes
    ) -> None:
        sig = sign_l1_action(signer, connection_id, True)
        via_agent = sign_with_agent(signer, EthChain.LOCALHOST, "a", connection_id)
        assert sig == via_agent

    def test_recovers_signer(self, signer: LocalKeySigner, connection_id: bytes) -> None:
        sig = sign_l1_action(signer, connection_id, False)
        digest = build_and_digest(AgentPayload("b", connection_id), L1_DOMAIN)
        assert recover_address(digest, sig) == signer.address

    def test_deterministic(self, signer: LocalKeySigner, connection_id: bytes) -> None:
        sigs = {sign_l1_action(signer, connection_id, True).to_hex() for _ in range(5)}
        assert sigs == {MAINNET_L1_SIG}

    def test_short_connection_id_rejected(self, signer: LocalKeySigner) -> None:
        with pytest.raises(TypedDataEncodingError, match="32 bytes") as exc_info:
            sign_l1_action(signer, b"\x01" * 31, True)
        assert exc_info.value.chain is EthChain.LOCALHOST

    def test_non_hex_connection_id_rejected(self, signer: LocalKeySigner) -> None:
        with pytest.raises(TypedDataEncodingError):
            sign_l1_action(signer, "0xnothex", True)


class TestSignUsdTransferAction:

    def test_testnet_vector(self, signer: LocalKeySigner) -> None:
        sig = sign_usd_transfer_action(
            signer, EthChain.ARBITRUM_GOERLI, "1", DESTINATION, TIMESTAMP
        )
        assert sig.to_hex() == TRANSFER_SIG
        assert sig.v == 27

    def test_localhost_not_allowed(self, signer: LocalKeySigner) -> None:
        with pytest.raises(ChainNotAllowed) as exc_info:
            sign_usd_transfer_action(signer, EthChain.LOCALHOST, "1", DESTINATION, TIMESTAMP)
        assert exc_info.value.action == "usdTransfer"
        assert exc_info.value.chain is EthChain.LOCALHOST

    def test_mainnet_differs_from_testnet(self, signer: LocalKeySigner) -> None:
        mainnet = sign_usd_transfer_action(signer, EthChain.ARBITRUM, "1", DESTINATION, TIMESTAMP)
        testnet = sign_usd_transfer_action(
            signer, EthChain.ARBITRUM_GOERLI, "1", DESTINATION, TIMESTAMP
        )
        assert mainnet != testnet

    def test_amount_changes_signature(self, signer: LocalKeySigner) -> None:
        one = sign_usd_transfer_action(signer, EthChain.ARBITRUM, "1", DESTINATION, TIMESTAMP)
        two = sign_usd_transfer_action(signer, EthChain.ARBITRUM, "2", DESTINATION, TIMESTAMP)
        assert one != two

    def test_negative_time_is_encoding_error(self, signer: LocalKeySigner) -> None:
        with pytest.raises(TypedDataEncodingError) as exc_info:
            sign_usd_transfer_action(signer, EthChain.ARBITRUM, "1", DESTINATION, -1)
        assert exc_info.value.action == "usdTransfer"
        assert exc_info.value.chain is EthChain.ARBITRUM


class TestSignWithAgent:

    @pytest.mark.parametrize(
        "first,second",
        [
            (EthChain.ARBITRUM, EthChain.ARBITRUM_GOERLI),
            (EthChain.ARBITRUM, EthChain.LOCALHOST),
            (EthChain.ARBITRUM_GOERLI, EthChain.LOCALHOST),
        ],
    )
    def test_domain_separation(
        self,
        signer: LocalKeySigner,
        connection_id: bytes,
        first: EthChain,
        second: EthChain,
    ) -> None:
        a = sign_with_agent(signer, first, "https://hyperliquid.xyz", connection_id)
        b = sign_with_agent(signer, second, "https://hyperliquid.xyz", connection_id)
        assert a != b

    def test_source_tag_changes_signature(
        self, signer: LocalKeySigner, connection_id: bytes
    ) -> None:
        a = sign_with_agent(signer, EthChain.ARBITRUM, "a", connection_id)
        b = sign_with_agent(signer, EthChain.ARBITRUM, "b", connection_id)
        assert a != b

    def test_chain_given_by_wire_name(self, signer: LocalKeySigner, connection_id: bytes) -> None:
        by_name = sign_with_agent(signer, "Arbitrum", "a", connection_id)  # type: ignore[arg-type]
        assert by_name == sign_with_agent(signer, EthChain.ARBITRUM, "a", connection_id)

    def test_unknown_chain_rejected(self, signer: LocalKeySigner, connection_id: bytes) -> None:
        with pytest.raises(ChainNotAllowed):
            sign_with_agent(signer, "Polygon", "a", connection_id)  # type: ignore[arg-type]


class _BrokenSigner:
    address = "0x0000000000000000000000000000000000000001"

    def sign_digest(self, digest: bytes):
        raise SigningFailure("hsm unavailable")


class TestErrorContext:

    def test_signing_failure_carries_call_site(self, connection_id: bytes) -> None:
        with pytest.raises(SigningFailure) as exc_info:
            sign_with_agent(_BrokenSigner(), EthChain.ARBITRUM, "a", connection_id)
        assert exc_info.value.action == "agent"
        assert exc_info.value.chain is EthChain.ARBITRUM
        assert exc_info.value.to_dict()["details"] == {"action": "agent", "chain": "Arbitrum"}
