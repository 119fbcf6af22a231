"""Redis relay with an in-memory stand-in for the Redis client."""

import asyncio
import json
import logging

import pytest

from storegraph.messaging import RedisEventRelay, Topic


class FakeRedis:
    """Records publish calls like redis.asyncio.Redis.publish."""

    def __init__(self, fail=False):
        self.published = []
        self.fail = fail
        self.closed = False

    async def publish(self, channel, message):
        if self.fail:
            raise ConnectionError("redis down")
        self.published.append((channel, message))
        return 1

    async def aclose(self):
        self.closed = True


async def _wait_for(predicate, timeout=1.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.01)


def test_requires_url_or_client(notifier):
    with pytest.raises(ValueError):
        RedisEventRelay(notifier)


async def test_forwards_events_as_json(graph):
    redis = FakeRedis()
    relay = RedisEventRelay(graph.notifier, client=redis)
    await relay.start()

    product = await graph.create_product(name="KeyBoard", price=99)
    await graph.delete_product(product["id"])
    await _wait_for(lambda: len(redis.published) == 2)
    await relay.stop()

    channels = [channel for channel, _ in redis.published]
    assert sorted(channels) == ["storegraph.product.added", "storegraph.product.deleted"]
    added = json.loads(dict(redis.published)["storegraph.product.added"])
    assert added["entity"] == "Product"
    assert added["verb"] == "added"
    assert added["payload"] == product


async def test_stop_unsubscribes_and_keeps_injected_client(graph):
    redis = FakeRedis()
    relay = RedisEventRelay(graph.notifier, client=redis, topics=[Topic.of("User", "added")])
    await relay.start()
    assert graph.notifier.subscriber_count(Topic.of("User", "added")) == 1

    await relay.stop()

    assert graph.notifier.subscriber_count(Topic.of("User", "added")) == 0
    assert redis.closed is False


async def test_custom_prefix(notifier):
    relay = RedisEventRelay(notifier, client=FakeRedis(), prefix="shop")

    assert relay.channel_for(Topic.of("orders", "updated")) == "shop.order.updated"


async def test_publish_failure_is_logged_not_raised(graph, caplog):
    redis = FakeRedis(fail=True)
    relay = RedisEventRelay(graph.notifier, client=redis)
    await relay.start()

    with caplog.at_level(logging.ERROR, logger="storegraph.messaging.relay"):
        product = await graph.create_product(name="KeyBoard", price=99)
        await _wait_for(lambda: any("Failed to relay" in r.getMessage() for r in caplog.records))

    assert await graph.get_product(product["id"]) == product
    await relay.stop()
