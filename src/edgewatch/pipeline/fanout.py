"""Subscriber fan-out: observer list with releasable subscription handles."""

from __future__ import annotations

import asyncio
import inspect
import itertools
from typing import Any, Awaitable, Callable

import structlog

log = structlog.get_logger(__name__)

Callback = Callable[[dict[str, Any]], Awaitable[None] | None]


class Subscription:
    """Handle returned by Broadcaster.subscribe. close() must be called on disconnect."""

    def __init__(self, broadcaster: Broadcaster, sub_id: int) -> None:
        self._broadcaster = broadcaster
        self.id = sub_id
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._broadcaster._release(self.id)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class Broadcaster:
    """Pushes every published payload to all live subscribers.

    New subscribers receive the last payload immediately. A subscriber whose
    callback raises is logged and dropped; the others still get the payload.
    """

    def __init__(self) -> None:
        self._subscribers: dict[int, Callback] = {}
        self._ids = itertools.count(1)
        self._latest: dict[str, Any] | None = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def latest(self) -> dict[str, Any] | None:
        return self._latest

    async def subscribe(self, callback: Callback) -> Subscription:
        sub_id = next(self._ids)
        self._subscribers[sub_id] = callback
        sub = Subscription(self, sub_id)
        log.debug("subscriber_attached", sub_id=sub_id, total=len(self._subscribers))
        if self._latest is not None:
            await self._deliver(sub_id, callback, self._latest)
        return sub

    def _release(self, sub_id: int) -> None:
        if self._subscribers.pop(sub_id, None) is not None:
            log.debug("subscriber_released", sub_id=sub_id, total=len(self._subscribers))

    async def publish(self, payload: dict[str, Any]) -> int:
        """Deliver payload to every subscriber. Returns the number reached."""
        self._latest = payload
        targets = list(self._subscribers.items())
        if not targets:
            return 0
        results = await asyncio.gather(
            *(self._deliver(sub_id, cb, payload) for sub_id, cb in targets)
        )
        return sum(1 for ok in results if ok)

    async def _deliver(self, sub_id: int, callback: Callback, payload: dict[str, Any]) -> bool:
        try:
            result = callback(payload)
            if inspect.isawaitable(result):
                await result
            return True
        except Exception as e:
            log.warning("subscriber_dropped", sub_id=sub_id, error=str(e))
            self._release(sub_id)
            return False
