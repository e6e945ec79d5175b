"""
Broadcast channel for real-time sensor updates

The channel is owned by the application and handed to the ingest path.
Every observer gets its own bounded queue; publishing never waits on
observers and nothing is replayed to late subscribers.
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Any, Dict

import structlog

logger = structlog.get_logger(__name__)

SENSOR_DATA_EVENT = "sensorDataUpdate"

_ids = itertools.count(1)


@dataclass(eq=False)
class Subscription:
    """One connected observer"""
    queue: asyncio.Queue
    id: int = field(default_factory=lambda: next(_ids))

    async def next_event(self) -> Dict[str, Any]:
        return await self.queue.get()


class BroadcastChannel:
    """Fire-and-forget fan-out of events to connected observers"""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscriptions: Dict[int, Subscription] = {}

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self) -> Subscription:
        subscription = Subscription(queue=asyncio.Queue(maxsize=self.queue_size))
        self._subscriptions[subscription.id] = subscription
        logger.info("Observer connected", observer_id=subscription.id, observers=self.observer_count)
        return subscription

    def unsubscribe(self, subscription: Subscription):
        if self._subscriptions.pop(subscription.id, None) is not None:
            logger.info("Observer disconnected", observer_id=subscription.id, observers=self.observer_count)

    def publish(self, event: Dict[str, Any]) -> int:
        """Queue the event for every observer; returns how many received it"""
        delivered = 0
        for subscription in list(self._subscriptions.values()):
            try:
                subscription.queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning("Observer queue full, event dropped", observer_id=subscription.id)
                continue
            delivered += 1
        return delivered


def sensor_data_event(sensor_id: str, timestamp: str, count: int) -> Dict[str, Any]:
    return {
        "sensor_id": sensor_id,
        "timestamp": timestamp,
        "count": count,
        "type": "new_data",
    }
