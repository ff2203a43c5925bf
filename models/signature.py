"""Signature — recoverable secp256k1 signature in chain-style ``(r, s, v)``."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

_UINT256_MAX = 2**256 - 1


class Signature(BaseModel):
    """Immutable ``(r, s, v)`` triple with ``v`` in ``{27, 28}``."""

    model_config = ConfigDict(frozen=True)

    r: int = Field(..., ge=1, le=_UINT256_MAX)
    s: int = Field(..., ge=1, le=_UINT256_MAX)
    v: int

    @field_validator("v")
    @classmethod
    def _v_is_chain_style(cls, v: int) -> int:
        if v not in (27, 28):
            raise ValueError(f"v must be 27 or 28, got {v}")
        return v

    @property
    def recovery_id(self) -> int:
        return self.v - 27

    @property
    def is_low_s(self) -> bool:
        return self.s <= SECP256K1_HALF_N

    def to_bytes(self) -> bytes:
        """65 bytes: ``r`` (32, big-endian) ‖ ``s`` (32) ‖ ``v`` (1)."""
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes([self.v])

    def to_hex(self) -> str:
        """Lowercase hex of :meth:`to_bytes`, without ``0x``."""
        return self.to_bytes().hex()

    def to_wire(self) -> dict[str, str | int]:
        """JSON form attached to exchange requests."""
        return {"r": hex(self.r), "s": hex(self.s), "v": self.v}

    @classmethod
    def from_hex(cls, value: str) -> Signature:
        raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
        if len(raw) != 65:
            raise ValueError(f"signature must be 65 bytes, got {len(raw)}")
        return cls(
            r=int.from_bytes(raw[:32], "big"),
            s=int.from_bytes(raw[32:64], "big"),
            v=raw[64],
        )

    def __str__(self) -> str:
        return self.to_hex()
