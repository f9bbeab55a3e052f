from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta

from .service import TurnService

logger = logging.getLogger(__name__)


class RetentionScheduler:
    """Periodically prune terminal turns older than ``max_age``.

    Runs as an asyncio task on the serving event loop. Pruning is the only
    thing that bounds the queue scans, so a failing tick is logged and the loop
    keeps going.
    """

    def __init__(self, service: TurnService, *, max_age: timedelta, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.service = service
        self.max_age = max_age
        self.interval = interval
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        removed = self.service.prune(self.max_age // timedelta(milliseconds=1))
        logger.info("Retention sweep removed %d turns", removed)
        return removed

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop(), name="turn-retention")

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        try:
            await asyncio.wait_for(task, timeout=self.interval + 1.0)
        except asyncio.TimeoutError:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        finally:
            self._task = None

    async def _loop(self) -> None:
        while not self._stop_event.is_set():
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            if self._stop_event.is_set():
                break
            try:
                self.run_once()
            except Exception:
                logger.exception("Retention sweep failed")
