"""
Storegraph - graph-shaped access to products, users and orders.

Resolves order references (products, user) with one batched lookup per
referenced type, and publishes a change event after every successful write.

Usage:
    from storegraph import StoreGraph
    from storegraph.store import MemoryDocumentStore

    graph = StoreGraph(MemoryDocumentStore())
    events = graph.subscribe("Order", "added")

    order = await graph.create_order(products=[...], user=user_id, total=200, status="PENDING")
    resolved = await graph.get_order(order["id"])
    event = await events.get()

HTTP service:
    from storegraph import create_app
    app = create_app()
"""

from __future__ import annotations

from .client import StoregraphClient
from .config import StoregraphConfig, load_config
from .core import (
    DanglingReferenceError,
    JSONQuery,
    NormalizedFilter,
    NotFoundError,
    OrderStatus,
    ProductStatus,
    Role,
    SelectionNode,
    StoregraphError,
    StoreUnavailableError,
    ValidationError,
)
from .graph import StoreGraph
from .messaging import ChangeEvent, ChangeNotifier, RedisEventRelay, Subscription, Topic, Verb
from .runtime import MutationPipeline, ReferenceResolver, SelectionExecutor
from .service import create_app
from .store import DocumentStore, MemoryDocumentStore, SQLDocumentStore

__version__ = "0.1.0"

__all__ = [
    # Facade
    "StoreGraph",
    "create_app",
    "StoregraphClient",
    # Config
    "StoregraphConfig",
    "load_config",
    # Errors
    "StoregraphError",
    "ValidationError",
    "NotFoundError",
    "StoreUnavailableError",
    "DanglingReferenceError",
    # Query types
    "JSONQuery",
    "SelectionNode",
    "NormalizedFilter",
    # Enums
    "ProductStatus",
    "Role",
    "OrderStatus",
    # Runtime
    "ReferenceResolver",
    "SelectionExecutor",
    "MutationPipeline",
    # Messaging
    "ChangeNotifier",
    "Subscription",
    "ChangeEvent",
    "Topic",
    "Verb",
    "RedisEventRelay",
    # Stores
    "DocumentStore",
    "MemoryDocumentStore",
    "SQLDocumentStore",
]
