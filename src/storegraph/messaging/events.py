"""
Change events published after successful mutations.

A topic is the pair (entity, verb). Its channel name is ``"<entity>.<verb>"``,
e.g. ``"order.added"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..core.defs import ENTITIES, get_entity


class Verb(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class Topic:
    """Key under which change events are published."""
    entity: str
    verb: Verb

    @classmethod
    def of(cls, entity: str, verb: Verb | str) -> "Topic":
        """Build a topic, normalizing the entity name ("orders" -> "Order")."""
        return cls(entity=get_entity(entity).name, verb=Verb(verb))

    @property
    def channel(self) -> str:
        return f"{self.entity.lower()}.{self.verb.value}"


def all_topics() -> list[Topic]:
    """Every (entity, verb) topic."""
    return [Topic(entity=name, verb=verb) for name in ENTITIES for verb in Verb]


class ChangeEvent(BaseModel):
    """
    Event payload.

    ``payload`` is the entity document for added/updated, ``{"id": ...}`` for deleted.
    """
    entity: str
    verb: Verb
    payload: dict[str, Any]
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def topic(self) -> Topic:
        return Topic(entity=self.entity, verb=self.verb)
