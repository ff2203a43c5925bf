"""Signing error taxonomy.

Every error carries the action kind and chain it was raised for, so a
caller can diagnose a rejected call without re-deriving state.  None of
these are retried inside the signing core.
"""

from __future__ import annotations

from typing import Any


class SigningError(Exception):
    """Base class for all signing-core failures."""

    code = "SIGNING_ERROR"

    def __init__(
        self,
        message: str,
        *,
        action: str | None = None,
        chain: Any = None,
    ) -> None:
        self.action = action
        self.chain = chain
        super().__init__(message)

    def __reduce__(self) -> tuple[Any, ...]:
        # keyword-only constructors do not survive the default exception pickling
        return _restore_error, (type(self), self.args, dict(self.__dict__))

    def to_dict(self) -> dict[str, Any]:
        chain = getattr(self.chain, "value", self.chain)
        return {
            "code": self.code,
            "message": str(self),
            "details": {"action": self.action, "chain": chain},
        }


class ChainNotAllowed(SigningError):
    """The action kind cannot be signed against the requested chain."""

    code = "CHAIN_NOT_ALLOWED"

    def __init__(self, *, action: str, chain: Any) -> None:
        chain_name = getattr(chain, "value", chain)
        super().__init__(
            f"{action} cannot be signed on chain {chain_name}",
            action=action,
            chain=chain,
        )


class TypedDataEncodingError(SigningError):
    """The typed-data payload could not be encoded to an EIP-712 digest."""

    code = "TYPED_DATA_ENCODING"


class SigningFailure(SigningError):
    """Invalid key or digest; the signature could not be produced."""

    code = "SIGNING_FAILURE"


def _restore_error(cls: type[SigningError], args: tuple[Any, ...], state: dict[str, Any]) -> SigningError:
    exc = cls.__new__(cls)
    exc.args = args
    exc.__dict__.update(state)
    return exc
