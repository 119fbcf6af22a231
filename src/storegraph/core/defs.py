"""
Core dataclass definitions for the Storegraph system.

These define the schema structure for entities and the reference relations
between them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .entities import (
    MutationInput,
    OrderCreate,
    OrderUpdate,
    PartialInput,
    ProductCreate,
    ProductUpdate,
    UserCreate,
    UserUpdate,
)
from .errors import ValidationError


@dataclass
class RelationDef:
    """
    Definition of a reference relation (foreign key held on the parent).

    Example: Order.user where Order.user -> User.id
    """
    name: str
    target: str  # target entity name
    from_field: str  # local field holding the id (or list of ids)
    cardinality: Literal["one", "many"]


@dataclass
class EntityDef:
    """Complete definition of an entity in the store graph."""
    name: str
    collection: str
    create_input: type[MutationInput]
    update_input: type[PartialInput]
    filterable: tuple[str, ...] = ("id",)
    relations: dict[str, RelationDef] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """Lowercase entity key used in topics and channels."""
        return self.name.lower()


PRODUCT = EntityDef(
    name="Product",
    collection="products",
    create_input=ProductCreate,
    update_input=ProductUpdate,
    filterable=("id", "name", "price", "category", "status"),
)

USER = EntityDef(
    name="User",
    collection="users",
    create_input=UserCreate,
    update_input=UserUpdate,
    filterable=("id", "username", "email", "role"),
)

ORDER = EntityDef(
    name="Order",
    collection="orders",
    create_input=OrderCreate,
    update_input=OrderUpdate,
    filterable=("id", "user", "total", "status"),
    relations={
        "products": RelationDef(name="products", target="Product", from_field="products", cardinality="many"),
        "user": RelationDef(name="user", target="User", from_field="user", cardinality="one"),
    },
)

ENTITIES: dict[str, EntityDef] = {e.name: e for e in (PRODUCT, USER, ORDER)}


def get_entity(name: str) -> EntityDef:
    """
    Look up an entity definition by name.

    Accepts the canonical name ("Order"), the lowercase key ("order") or the
    collection name ("orders").
    """
    for entity in ENTITIES.values():
        if name in (entity.name, entity.key, entity.collection):
            return entity
    raise ValidationError([f"Unknown entity: {name}"])
