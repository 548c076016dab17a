"""Adaptive backoff for sink writes. Grows on rate-limit failures, decays on success."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable


class RateLimitState:
    """Current pre-call delay in milliseconds. Never negative, never above max_delay_ms."""

    def __init__(
        self,
        step_ms: int = 5000,
        decay_ms: int = 1000,
        max_delay_ms: int = 20000,
        current_delay_ms: int = 0,
    ) -> None:
        if step_ms < 0 or decay_ms < 0 or max_delay_ms < 0:
            raise ValueError("backoff parameters must be non-negative")
        self.step_ms = step_ms
        self.decay_ms = decay_ms
        self.max_delay_ms = max_delay_ms
        self.current_delay_ms = min(max(current_delay_ms, 0), max_delay_ms)

    def on_rate_limited(self) -> int:
        """Increase the delay by one step, capped. Returns the new delay."""
        self.current_delay_ms = min(self.current_delay_ms + self.step_ms, self.max_delay_ms)
        return self.current_delay_ms

    def on_success(self) -> int:
        """Decay the delay toward 0. Returns the new delay."""
        self.current_delay_ms = max(self.current_delay_ms - self.decay_ms, 0)
        return self.current_delay_ms

    async def wait(self, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> int:
        """Pause for the current delay. Returns the delay applied (ms)."""
        delay = self.current_delay_ms
        if delay > 0:
            await sleep(delay / 1000.0)
        return delay
