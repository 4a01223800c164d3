# backend/utils/notifications.py
"""
Fan-out of product change events to push-channel subscribers.

Request handlers run in the threadpool and publish; every websocket
connection owns one Subscription whose queue lives on that connection's
event loop. Publishing never waits on a subscriber: a full queue drops its
oldest event instead.
"""
import asyncio
import logging
import threading
from typing import Set

from config import settings
from schemas.product import ProductEvent

logger = logging.getLogger(__name__)


class Subscription:
    """One subscriber's bounded inbox, bound to the loop that created it."""

    def __init__(self, loop: asyncio.AbstractEventLoop, maxsize: int):
        self._loop = loop
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def deliver(self, event: ProductEvent) -> None:
        # Safe from any thread; raises RuntimeError once the loop is closed
        self._loop.call_soon_threadsafe(self._offer, event)

    def _offer(self, event: ProductEvent) -> None:
        if self._queue.full():
            self._queue.get_nowait()
            self.dropped += 1
            logger.debug("Subscriber queue full, dropped oldest event (total dropped=%s)", self.dropped)
        self._queue.put_nowait(event)

    async def get(self) -> ProductEvent:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()


class ProductNotifier:

    def __init__(self, queue_size: int = settings.WS_QUEUE_SIZE):
        self._queue_size = queue_size
        self._lock = threading.Lock()
        self._subscriptions: Set[Subscription] = set()

    def subscribe(self) -> Subscription:
        """Register a subscriber. Must be called from the subscriber's event loop."""
        subscription = Subscription(asyncio.get_running_loop(), self._queue_size)
        with self._lock:
            self._subscriptions.add(subscription)
            total = len(self._subscriptions)
        logger.info("Subscriber connected, total_subscribers=%s", total)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription not in self._subscriptions:
                return
            self._subscriptions.discard(subscription)
            total = len(self._subscriptions)
        logger.info("Subscriber disconnected, remaining=%s", total)

    def publish(self, event: ProductEvent) -> int:
        """Hand ``event`` to every subscriber; returns how many were reached."""
        with self._lock:
            targets = list(self._subscriptions)

        delivered = 0
        for subscription in targets:
            try:
                subscription.deliver(event)
                delivered += 1
            except RuntimeError as e:
                logger.warning("Dropping subscriber with closed event loop: %s", e)
                self.unsubscribe(subscription)
        logger.debug("Published %s event for product %s to %s subscriber(s)", event.event, event.product_id, delivered)
        return delivered

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)


notifier = ProductNotifier()


def get_notifier() -> ProductNotifier:
    return notifier
