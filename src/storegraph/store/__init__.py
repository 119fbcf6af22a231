"""
Store module - document store adapters.

Provides:
- DocumentStore: adapter interface used by the runtime
- MemoryDocumentStore: process-local store
- SQLDocumentStore: SQLAlchemy async store (SQLite, PostgreSQL)
"""

from __future__ import annotations

from .base import DocumentStore, new_id
from .database import Base, OrderRow, ProductRow, UserRow, get_database_url
from .memory import MemoryDocumentStore
from .sql import SQLDocumentStore

__all__ = [
    "DocumentStore",
    "new_id",
    "MemoryDocumentStore",
    "SQLDocumentStore",
    "Base",
    "ProductRow",
    "UserRow",
    "OrderRow",
    "get_database_url",
]
