"""
Messaging module - change notification.

Provides:
- ChangeNotifier/Subscription: in-process topic registry with bounded channels
- ChangeEvent/Topic/Verb: event types
- RedisEventRelay: forwards events to Redis Pub/Sub for other processes

Usage:
    from storegraph.messaging import ChangeNotifier, Topic

    notifier = ChangeNotifier(capacity=100)
    async with notifier.subscribe(Topic.of("Order", "added")) as events:
        async for event in events:
            print(event.payload)
"""

from __future__ import annotations

from .events import ChangeEvent, Topic, Verb, all_topics
from .notifier import ChangeNotifier, Subscription
from .relay import RedisEventRelay

__all__ = [
    "ChangeEvent",
    "Topic",
    "Verb",
    "all_topics",
    "ChangeNotifier",
    "Subscription",
    "RedisEventRelay",
]
