"""Poll cycle, published cache, subscriber fan-out and periodic scheduling."""

from edgewatch.pipeline.cache import EdgeCache, PollState
from edgewatch.pipeline.fanout import Broadcaster, Subscription
from edgewatch.pipeline.poller import PollOrchestrator, PollPhase, PollResult
from edgewatch.pipeline.scheduler import PeriodicTask

__all__ = [
    "Broadcaster",
    "EdgeCache",
    "PeriodicTask",
    "PollOrchestrator",
    "PollPhase",
    "PollResult",
    "PollState",
    "Subscription",
]
