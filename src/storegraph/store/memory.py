"""
In-memory document store.

Keeps each collection as an insertion-ordered dict. Documents are copied on
the way in and out so callers never alias stored state.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from ..core.query_types import NormalizedFilter
from .base import DocumentStore, new_id

logger = logging.getLogger(__name__)


def matches(doc: dict[str, Any], filters: list[NormalizedFilter]) -> bool:
    """Check if a document matches all filters."""
    for f in filters:
        value = doc.get(f.field)
        if f.op == "eq" and value != f.value:
            return False
        if f.op == "in" and value not in f.value:
            return False
    return True


class MemoryDocumentStore(DocumentStore):
    """
    Document store backed by process memory.

    Usage:
        store = MemoryDocumentStore()
        product = await store.insert("products", {"name": "Mouse", "price": 10})
        await store.get("products", product["id"])
    """

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find(
        self,
        collection: str,
        filters: Optional[list[NormalizedFilter]] = None,
    ) -> list[dict[str, Any]]:
        filters = filters or []
        return [
            copy.deepcopy(doc)
            for doc in self._collection(collection).values()
            if matches(doc, filters)
        ]

    async def insert(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        doc = copy.deepcopy(data)
        doc["id"] = new_id()
        self._collection(collection)[doc["id"]] = doc
        logger.debug(f"Inserted {collection}/{doc['id']}")
        return copy.deepcopy(doc)

    async def update(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return None
        doc.update(copy.deepcopy({k: v for k, v in changes.items() if k != "id"}))
        return copy.deepcopy(doc)

    async def delete(self, collection: str, doc_id: str) -> bool:
        return self._collection(collection).pop(doc_id, None) is not None
