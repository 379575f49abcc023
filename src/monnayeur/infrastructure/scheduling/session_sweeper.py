"""
Periodic deletion of expired bridging sessions.
"""

import asyncio
from typing import Optional

from monnayeur.infrastructure.monitoring import metrics
from monnayeur.infrastructure.monitoring.logger import get_logger
from monnayeur.infrastructure.persistence.database import Database
from monnayeur.infrastructure.persistence.repositories.session_store import (
    SessionStore,
)
from monnayeur.utils.clock import Clock, utc_now

logger = get_logger(__name__)


class SessionSweeper:
    """
    Background task that sweeps expired sessions on a fixed interval.

    Owned by the application lifespan. Request-path reads re-check expiry
    themselves, so a late or failed sweep only leaves inert rows behind.
    """

    def __init__(
        self,
        database: Database,
        interval_seconds: float = 3600.0,
        now_fn: Clock = utc_now,
    ):
        """
        Initialize sweeper.

        Args:
            database: Connected database
            interval_seconds: Seconds between sweeps
            now_fn: Clock passed to the session store
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.database = database
        self.interval_seconds = interval_seconds
        self.now_fn = now_fn
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Session sweeper started (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the sweep loop and wait for it to exit."""
        if self._task is None:
            return

        self._stop_event.set()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

        logger.info("Session sweeper stopped")

    async def run_once(self) -> int:
        """
        Delete every expired session now.

        Returns:
            Number of sessions deleted
        """
        async with self.database.session() as session:
            store = SessionStore(session, now_fn=self.now_fn)
            count = await store.sweep()

        if count:
            metrics.sessions_swept_total.inc(count)
        logger.info(
            f"Cleaned up {count} expired sessions",
            extra={"operation": "sweep_sessions", "count": count},
        )
        return count

    async def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self.interval_seconds
                )
            except asyncio.TimeoutError:
                pass

            if self._stop_event.is_set():
                break

            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Session sweep failed: {e}", exc_info=True)
