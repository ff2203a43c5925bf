"""AsyncActionSigner — off-event-loop signing for async exchange clients.

Signing is CPU-bound (elliptic-curve math), so we offload it to a
``ProcessPoolExecutor`` to avoid blocking the asyncio event loop.  The
worker runs the same pure functions as ``signing.create_signature``; the
signer capability is pickled across, so it must be picklable
(``LocalKeySigner`` is).
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Callable

import structlog

from config.settings import settings
from models.chain import EthChain
from models.signature import Signature

from .create_signature import sign_l1_action, sign_usd_transfer_action, sign_with_agent
from .signer import DigestSigner

logger = structlog.get_logger("signing.async_signer")


class AsyncActionSigner:
    """Async-safe action signer backed by a process pool.

    Parameters
    ----------
    signer:
        Key capability used for every call.  Must be picklable.
    max_workers:
        Number of processes in the signing pool.  Defaults to
        ``settings.SIGNER_MAX_WORKERS``.
    """

    def __init__(
        self,
        signer: DigestSigner,
        max_workers: int | None = None,
    ) -> None:
        self._signer = signer
        self._max_workers = max_workers or settings.SIGNER_MAX_WORKERS
        self._pool: ProcessPoolExecutor | None = None

    @property
    def address(self) -> str:
        return self._signer.address

    # ── Lifecycle ────────────────────────────────────────────────

    def start(self) -> None:
        """Start the process pool.  Idempotent."""
        if self._pool is None:
            self._pool = ProcessPoolExecutor(max_workers=self._max_workers)
            logger.info(
                "async_signer.started",
                max_workers=self._max_workers,
                signer=self._signer.address,
            )

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the process pool."""
        if self._pool is not None:
            self._pool.shutdown(wait=wait)
            self._pool = None
            logger.info("async_signer.shutdown")

    # ── Signing ──────────────────────────────────────────────────

    async def sign_l1_action(self, connection_id: bytes, is_mainnet: bool) -> Signature:
        return await self._run(sign_l1_action, connection_id, is_mainnet)

    async def sign_usd_transfer_action(
        self,
        chain: EthChain,
        amount: str,
        destination: str,
        timestamp: int,
    ) -> Signature:
        return await self._run(sign_usd_transfer_action, chain, amount, destination, timestamp)

    async def sign_with_agent(
        self,
        chain: EthChain,
        source: str,
        connection_id: bytes,
    ) -> Signature:
        return await self._run(sign_with_agent, chain, source, connection_id)

    async def _run(self, fn: Callable[..., Signature], *args: Any) -> Signature:
        """Run *fn(signer, *args)* in the pool.

        Raises
        ------
        RuntimeError
            If the signer has not been started.
        SigningError
            Whatever the signing function raised, re-raised here.
        """
        if self._pool is None:
            raise RuntimeError(
                "AsyncActionSigner not started — call start() first"
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(self._pool, fn, self._signer, *args)
        logger.debug("async_signer.signed", fn=fn.__name__, v=result.v)
        return result

    # ── Context manager ──────────────────────────────────────────

    async def __aenter__(self) -> AsyncActionSigner:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.shutdown(wait=True)
