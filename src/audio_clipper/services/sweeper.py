"""Periodic purge of abandoned authorization handshakes."""

import asyncio
import contextlib

from audio_clipper.logging import get_logger
from audio_clipper.repositories.base import EntityRepository

logger = get_logger(__name__)


class HandshakeSweeper:
    """Deletes handshakes older than the TTL on a fixed interval."""

    def __init__(
        self,
        repository: EntityRepository,
        ttl_seconds: int = 600,
        interval_seconds: float = 60,
    ) -> None:
        self.repository = repository
        self.ttl_seconds = ttl_seconds
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> int:
        removed = await self.repository.purge_expired_handshakes(self.ttl_seconds)
        if removed:
            logger.info("auth_handshakes_purged", removed=removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep_once()
            except Exception as e:
                # Keep sweeping; the next interval retries.
                logger.error("auth_handshake_sweep_failed", error=str(e))

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="handshake-sweeper")
        logger.info(
            "handshake_sweeper_started",
            ttl_seconds=self.ttl_seconds,
            interval_seconds=self.interval_seconds,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("handshake_sweeper_stopped")
