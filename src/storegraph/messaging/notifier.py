"""
In-process change notifier.

Subscribers get a bounded channel per topic. Publishing holds a per-topic
lock while it hands the event to every subscriber, so all subscribers of a
topic see events in publish order. A full channel blocks the publisher for
up to ``publish_timeout`` seconds, after which the event is dropped for that
subscriber only. Closing a subscription releases a publisher blocked on it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .events import ChangeEvent, Topic

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """
    Bounded event channel for one topic.

    Usage:
        async with notifier.subscribe(Topic.of("Order", "added")) as events:
            async for event in events:
                print(event.payload)
    """

    def __init__(self, notifier: ChangeNotifier, topic: Topic, maxsize: int):
        self.notifier = notifier
        self.topic = topic
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self._closed_event = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    async def _put(self, event: ChangeEvent) -> bool:
        """
        Enqueue ``event``, waiting for space.

        Returns False without enqueueing if the subscription closes first.
        """
        if self._closed:
            return False
        if not self._queue.full():
            self._queue.put_nowait(event)
            return True
        put = asyncio.ensure_future(self._queue.put(event))
        closed = asyncio.ensure_future(self._closed_event.wait())
        try:
            await asyncio.wait({put, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            put.cancel()
            closed.cancel()
        return put.done() and not put.cancelled()

    async def get(self) -> ChangeEvent:
        """Wait for the next event. Raises ``StopAsyncIteration`` once closed and drained."""
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def get_nowait(self) -> ChangeEvent:
        """Return the next queued event. Raises ``asyncio.QueueEmpty`` if none."""
        item = self._queue.get_nowait()
        if item is _CLOSED:
            raise asyncio.QueueEmpty
        return item

    def close(self) -> None:
        """Unsubscribe. Events already queued can still be read."""
        if self._closed:
            return
        self._closed = True
        self._closed_event.set()
        self.notifier.unsubscribe(self)
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            pass

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeEvent:
        return await self.get()

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class ChangeNotifier:
    """
    Topic registry with FIFO delivery per topic.

    Usage:
        notifier = ChangeNotifier()
        sub = notifier.subscribe(Topic.of("Product", "added"))
        await notifier.publish(sub.topic, event)
        event = await sub.get()
    """

    def __init__(self, capacity: int = 100, publish_timeout: Optional[float] = 5.0):
        """
        Initialize notifier.

        Args:
            capacity: Default bounded size of each subscriber channel
            publish_timeout: Seconds to wait on a full channel before dropping
                the event for that subscriber (None waits indefinitely)
        """
        self.capacity = capacity
        self.publish_timeout = publish_timeout
        self._subscribers: dict[Topic, list[Subscription]] = {}
        self._locks: dict[Topic, asyncio.Lock] = {}

    def subscribe(self, topic: Topic, maxsize: Optional[int] = None) -> Subscription:
        """Register a new subscriber channel for ``topic``."""
        subscription = Subscription(self, topic, maxsize if maxsize is not None else self.capacity)
        self._subscribers.setdefault(topic, []).append(subscription)
        logger.debug(f"Subscribed to {topic.channel} ({len(self._subscribers[topic])} subscribers)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscriber channel. Unknown subscriptions are ignored."""
        subscribers = self._subscribers.get(subscription.topic)
        if not subscribers or subscription not in subscribers:
            return
        # Replace rather than mutate so in-flight publishes keep their snapshot
        remaining = [s for s in subscribers if s is not subscription]
        if remaining:
            self._subscribers[subscription.topic] = remaining
        else:
            del self._subscribers[subscription.topic]
        if not subscription.closed:
            subscription.close()
        logger.debug(f"Unsubscribed from {subscription.topic.channel}")

    def subscriber_count(self, topic: Topic) -> int:
        return len(self._subscribers.get(topic, []))

    async def publish(self, topic: Topic, event: ChangeEvent) -> int:
        """
        Deliver ``event`` to every subscriber of ``topic``.

        Returns:
            Number of subscribers that received the event
        """
        if not self._subscribers.get(topic):
            return 0

        lock = self._locks.setdefault(topic, asyncio.Lock())
        async with lock:
            subscribers = self._subscribers.get(topic, [])
            delivered = 0
            for subscription in subscribers:
                if subscription.closed:
                    continue
                if await self._deliver(subscription, event):
                    delivered += 1

        logger.debug(f"Published to {topic.channel}: {delivered} subscribers received")
        return delivered

    async def _deliver(self, subscription: Subscription, event: ChangeEvent) -> bool:
        try:
            if self.publish_timeout is None:
                return await subscription._put(event)
            return await asyncio.wait_for(subscription._put(event), timeout=self.publish_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Subscriber channel for {subscription.topic.channel} full for "
                f"{self.publish_timeout}s, event dropped for that subscriber"
            )
            return False

    def close(self) -> None:
        """Close every subscription."""
        for subscribers in list(self._subscribers.values()):
            for subscription in list(subscribers):
                subscription.close()
        self._subscribers.clear()
