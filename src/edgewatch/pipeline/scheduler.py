"""Periodic task runner that never overlaps ticks."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

import structlog

log = structlog.get_logger(__name__)


class PeriodicTask:
    """Run an async callback every `interval_sec` seconds on the running loop.

    Each tick is awaited before the next sleep starts, so a slow tick delays
    the following one instead of running concurrently with it. Exceptions are
    logged and the schedule continues.
    """

    def __init__(
        self,
        name: str,
        interval_sec: float,
        fn: Callable[[], Awaitable[object]],
        run_immediately: bool = True,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        self.name = name
        self.interval_sec = interval_sec
        self._fn = fn
        self._run_immediately = run_immediately
        self._task: asyncio.Task[None] | None = None
        self._stop = asyncio.Event()
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name=f"periodic:{self.name}")
        log.info("periodic_started", task=self.name, interval_sec=self.interval_sec)

    async def _run(self) -> None:
        if not self._run_immediately:
            if await self._wait(self.interval_sec):
                return
        while not self._stop.is_set():
            started = time.monotonic()
            try:
                await self._fn()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.exception("periodic_tick_failed", task=self.name, error=str(e))
            self.ticks += 1
            elapsed = time.monotonic() - started
            if await self._wait(max(self.interval_sec - elapsed, 0.0)):
                return

    async def _wait(self, delay: float) -> bool:
        """Sleep up to delay seconds; True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def stop(self, timeout: float = 30.0) -> None:
        """Request stop and wait for the current tick, cancelling it after timeout seconds."""
        if self._task is None:
            return
        self._stop.set()
        task, self._task = self._task, None
        try:
            await asyncio.wait_for(task, timeout=timeout)
        except asyncio.TimeoutError:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        log.info("periodic_stopped", task=self.name, ticks=self.ticks)
