"""
Redis relay - forwards change events to Redis Pub/Sub.

Each event on topic (entity, verb) is published as JSON to the Redis
channel ``"<prefix>.<entity>.<verb>"``, e.g. ``"storegraph.order.added"``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import redis.asyncio as aioredis

from .events import ChangeEvent, Topic, all_topics
from .notifier import ChangeNotifier, Subscription

logger = logging.getLogger(__name__)


class RedisEventRelay:
    """
    Subscribes to every topic of a notifier and republishes to Redis.

    Usage:
        relay = RedisEventRelay(notifier, redis_url="redis://redis:6379")
        await relay.start()
        ...
        await relay.stop()
    """

    def __init__(
        self,
        notifier: ChangeNotifier,
        redis_url: Optional[str] = None,
        *,
        client: Any = None,
        prefix: str = "storegraph",
        topics: Optional[list[Topic]] = None,
    ):
        """
        Initialize relay.

        Args:
            notifier: Source of change events
            redis_url: Redis connection URL (ignored when ``client`` is given)
            client: Object with an async ``publish(channel, message)`` method
            prefix: Channel prefix
            topics: Topics to forward (default: all)
        """
        if client is None and redis_url is None:
            raise ValueError("redis_url or client is required")
        self.notifier = notifier
        self.redis_url = redis_url
        self.prefix = prefix
        self.topics = topics or all_topics()
        self._client = client
        self._owns_client = client is None
        self._subscriptions: list[Subscription] = []
        self._tasks: list[asyncio.Task] = []

    def channel_for(self, topic: Topic) -> str:
        return f"{self.prefix}.{topic.channel}"

    async def start(self):
        """Connect to Redis and start forwarding."""
        if self._tasks:
            logger.warning("Redis relay already running")
            return

        if self._client is None:
            logger.info(f"Connecting relay to Redis: {self.redis_url}")
            self._client = aioredis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)

        for topic in self.topics:
            subscription = self.notifier.subscribe(topic)
            self._subscriptions.append(subscription)
            self._tasks.append(asyncio.create_task(self._forward(subscription)))
        logger.info(f"Redis relay started for {len(self.topics)} topics")

    async def stop(self):
        """Stop forwarding and close the Redis connection if we own it."""
        for subscription in self._subscriptions:
            subscription.close()
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._subscriptions.clear()
        self._tasks.clear()

        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.info("Redis relay stopped")

    async def _forward(self, subscription: Subscription):
        """Publish each event of one subscription to Redis."""
        channel = self.channel_for(subscription.topic)
        async for event in subscription:
            await self.publish(channel, event)

    async def publish(self, channel: str, event: ChangeEvent) -> int:
        """
        Publish event to Redis channel.

        Returns:
            Number of Redis subscribers that received the message (0 on failure)
        """
        try:
            count = await self._client.publish(channel, event.model_dump_json())
            logger.debug(f"Relayed to {channel}: {count} subscribers received")
            return count
        except Exception as e:
            logger.error(f"Failed to relay to {channel}: {e}", exc_info=True)
            return 0
