"""Exclusive section serialising every write to the settings document."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

logger = logging.getLogger(__name__)


class WriteSectionTimeoutError(TimeoutError):
    pass


class WriteSection:
    """Single-writer lock held across load, mutate, persist and reload.

    ``timeout_seconds`` of ``None`` or ``0`` waits without bound.
    """

    def __init__(self, timeout_seconds: Optional[float] = None) -> None:
        self._lock = asyncio.Lock()
        self.timeout_seconds = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None
        self.acquisitions = 0

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    async def _acquire(self) -> None:
        if self.timeout_seconds is None:
            await self._lock.acquire()
            return
        try:
            await asyncio.wait_for(self._lock.acquire(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise WriteSectionTimeoutError(
                f"Timed out after {self.timeout_seconds}s waiting for the configuration write lock"
            ) from e

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        await self._acquire()
        self.acquisitions += 1
        logger.debug("Write section acquired (#%d)", self.acquisitions)
        try:
            yield
        finally:
            self._lock.release()
            logger.debug("Write section released")
