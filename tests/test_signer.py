"""Tests for signing/signer.py — includes property-based tests via hypothesis."""

from __future__ import annotations

import pickle

import pytest
from eth_utils import to_checksum_address
from hypothesis import given, settings
from hypothesis import strategies as st

from core.errors import SigningFailure
from models.signature import SECP256K1_HALF_N, SECP256K1_N, Signature
from signing.signer import (
    DigestSigner,
    LocalKeySigner,
    recover_address,
    sign_hash,
    to_low_s,
)

from .conftest import PRIVATE_KEY

digests = st.binary(min_size=32, max_size=32)

_SIGNER = LocalKeySigner.from_hex(PRIVATE_KEY)


class TestLocalKeySigner:

    def test_from_hex_accepts_prefix(self) -> None:
        assert LocalKeySigner.from_hex("0x" + PRIVATE_KEY).address == _SIGNER.address

    def test_is_digest_signer(self, signer: LocalKeySigner) -> None:
        assert isinstance(signer, DigestSigner)

    def test_address_is_checksummed(self, signer: LocalKeySigner) -> None:
        assert signer.address.startswith("0x")
        assert len(signer.address) == 42
        assert to_checksum_address(signer.address) == signer.address

    def test_repr_hides_key(self, signer: LocalKeySigner) -> None:
        assert PRIVATE_KEY not in repr(signer)
        assert signer.address in repr(signer)

    @pytest.mark.parametrize(
        "key",
        [
            "00" * 32,
            format(SECP256K1_N, "064x"),
            "ab" * 31,
            "zz" * 32,
        ],
    )
    def test_invalid_keys_rejected(self, key: str) -> None:
        with pytest.raises(SigningFailure):
            LocalKeySigner.from_hex(key)

    @pytest.mark.parametrize("size", [0, 31, 33, 64])
    def test_wrong_digest_size(self, signer: LocalKeySigner, size: int) -> None:
        with pytest.raises(SigningFailure, match="32 bytes"):
            signer.sign_digest(b"\x11" * size)

    def test_picklable(self, signer: LocalKeySigner) -> None:
        clone = pickle.loads(pickle.dumps(signer))
        digest = b"\x42" * 32
        assert clone.address == signer.address
        assert clone.sign_digest(digest) == signer.sign_digest(digest)


class TestToLowS:

    def test_low_s_untouched(self) -> None:
        sig = to_low_s(5, 7, 1)
        assert (sig.r, sig.s, sig.v) == (5, 7, 28)

    def test_high_s_flipped_with_recovery_id(self) -> None:
        sig = to_low_s(5, SECP256K1_N - 7, 0)
        assert sig.s == 7
        assert sig.v == 28

    def test_bad_recovery_id(self) -> None:
        with pytest.raises(SigningFailure):
            to_low_s(5, 7, 2)


class _HighSSigner:
    address = "0x0000000000000000000000000000000000000001"

    def sign_digest(self, digest: bytes) -> Signature:
        return Signature(r=1, s=SECP256K1_HALF_N + 1, v=27)


class TestSignHash:

    def test_rejects_high_s_from_foreign_signer(self) -> None:
        with pytest.raises(SigningFailure, match="high-s"):
            sign_hash(b"\x00" * 32, _HighSSigner())

    def test_rejects_short_digest(self, signer: LocalKeySigner) -> None:
        with pytest.raises(SigningFailure):
            sign_hash(b"\x00" * 20, signer)


# ── Property tests ───────────────────────────────────────────────────


class TestSignerProperties:

    @given(digest=digests)
    @settings(max_examples=1000, deadline=None)
    def test_s_always_low(self, digest: bytes) -> None:
        sig = _SIGNER.sign_digest(digest)
        assert sig.s <= SECP256K1_N // 2
        assert sig.v in (27, 28)

    @given(digest=digests)
    @settings(max_examples=50, deadline=None)
    def test_deterministic(self, digest: bytes) -> None:
        assert _SIGNER.sign_digest(digest) == _SIGNER.sign_digest(digest)

    @given(digest=digests)
    @settings(max_examples=50, deadline=None)
    def test_recovers_own_address(self, digest: bytes) -> None:
        sig = sign_hash(digest, _SIGNER)
        assert recover_address(digest, sig) == _SIGNER.address
