"""
Core module - definitions, types, and validation.
"""

from __future__ import annotations

from .defs import ENTITIES, ORDER, PRODUCT, USER, EntityDef, RelationDef, get_entity
from .entities import (
    OrderCreate,
    OrderStatus,
    OrderUpdate,
    ProductCreate,
    ProductStatus,
    ProductUpdate,
    Role,
    UserCreate,
    UserUpdate,
)
from .errors import (
    DanglingReferenceError,
    NotFoundError,
    StoregraphError,
    StoreUnavailableError,
    ValidationError,
)
from .query_types import JSONQuery, NormalizedFilter, SelectionNode, full_selection, normalize_filters

__all__ = [
    # Definitions
    "EntityDef",
    "RelationDef",
    "ENTITIES",
    "PRODUCT",
    "USER",
    "ORDER",
    "get_entity",
    # Entities
    "ProductStatus",
    "Role",
    "OrderStatus",
    "ProductCreate",
    "ProductUpdate",
    "UserCreate",
    "UserUpdate",
    "OrderCreate",
    "OrderUpdate",
    # Errors
    "StoregraphError",
    "ValidationError",
    "NotFoundError",
    "StoreUnavailableError",
    "DanglingReferenceError",
    # Query types
    "NormalizedFilter",
    "SelectionNode",
    "JSONQuery",
    "normalize_filters",
    "full_selection",
]
