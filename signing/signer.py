"""Recoverable secp256k1 signing of 32-byte digests.

Keys are reached only through the ``DigestSigner`` capability so that
HSM or remote-wallet backends can stand in for ``LocalKeySigner``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError

from core.errors import SigningFailure
from models.signature import SECP256K1_HALF_N, SECP256K1_N, Signature

logger = structlog.get_logger("signing.signer")

DIGEST_SIZE = 32


@runtime_checkable
class DigestSigner(Protocol):
    """Anything that can sign a 32-byte digest."""

    @property
    def address(self) -> str: ...

    def sign_digest(self, digest: bytes) -> Signature: ...


class LocalKeySigner:
    """In-process signer over a raw secp256k1 private key.

    Nonces are derived deterministically (RFC 6979), so the same digest
    and key always give the same signature.  Only the raw key bytes are
    stored, which keeps the signer picklable for process pools.
    """

    __slots__ = ("_key_bytes", "_address")

    def __init__(self, private_key: bytes) -> None:
        if len(private_key) != 32:
            raise SigningFailure(
                f"private key must be 32 bytes, got {len(private_key)}"
            )
        scalar = int.from_bytes(private_key, "big")
        if not 0 < scalar < SECP256K1_N:
            raise SigningFailure("private key is outside the secp256k1 range")
        self._key_bytes = bytes(private_key)
        self._address = keys.PrivateKey(self._key_bytes).public_key.to_checksum_address()

    @classmethod
    def from_hex(cls, private_key: str) -> LocalKeySigner:
        raw = private_key.strip()
        if raw.startswith(("0x", "0X")):
            raw = raw[2:]
        try:
            key_bytes = bytes.fromhex(raw)
        except ValueError:
            raise SigningFailure("private key is not valid hex") from None
        return cls(key_bytes)

    @property
    def address(self) -> str:
        return self._address

    def sign_digest(self, digest: bytes) -> Signature:
        if len(digest) != DIGEST_SIZE:
            raise SigningFailure(f"digest must be {DIGEST_SIZE} bytes, got {len(digest)}")
        try:
            raw = keys.PrivateKey(self._key_bytes).sign_msg_hash(digest)
        except (ValidationError, BadSignature) as exc:
            raise SigningFailure(f"secp256k1 signing failed: {exc}") from exc
        return to_low_s(raw.r, raw.s, raw.v)

    def __getstate__(self) -> tuple[bytes, str]:
        return self._key_bytes, self._address

    def __setstate__(self, state: tuple[bytes, str]) -> None:
        self._key_bytes, self._address = state

    def __repr__(self) -> str:
        return f"LocalKeySigner(address={self._address})"


def to_low_s(r: int, s: int, recovery_id: int) -> Signature:
    """Chain-style signature in canonical low-s form.

    ``s`` and ``N - s`` are both valid; the high one is flipped and the
    recovery id flipped with it so the signature still recovers the same key.
    """
    if recovery_id not in (0, 1):
        raise SigningFailure(f"unexpected recovery id {recovery_id}")
    if s > SECP256K1_HALF_N:
        s = SECP256K1_N - s
        recovery_id ^= 1
    return Signature(r=r, s=s, v=recovery_id + 27)


def sign_hash(digest: bytes, signer: DigestSigner) -> Signature:
    """Sign *digest* and re-check the result is low-s.

    Raises
    ------
    SigningFailure
        If the digest is not 32 bytes or the signer returns a high-s value.
    """
    if len(digest) != DIGEST_SIZE:
        raise SigningFailure(f"digest must be {DIGEST_SIZE} bytes, got {len(digest)}")
    signature = signer.sign_digest(digest)
    if not signature.is_low_s:
        raise SigningFailure("signer produced a non-canonical high-s signature")
    logger.debug(
        "signer.signed",
        signer=signer.address,
        digest="0x" + digest.hex(),
        v=signature.v,
    )
    return signature


def recover_address(digest: bytes, signature: Signature) -> str:
    """Checksum address of the key that produced *signature* over *digest*."""
    raw = keys.Signature(vrs=(signature.recovery_id, signature.r, signature.s))
    try:
        public_key = raw.recover_public_key_from_msg_hash(digest)
    except (ValidationError, BadSignature) as exc:
        raise SigningFailure(f"cannot recover signer: {exc}") from exc
    return public_key.to_checksum_address()
