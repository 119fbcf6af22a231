"""
Document store adapter interface.

Every collection is addressed by name ("products", "users", "orders").
Documents are plain dicts carrying a store-assigned ``id``.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..core.query_types import NormalizedFilter


def new_id() -> str:
    """Generate a store identity."""
    return uuid.uuid4().hex


class DocumentStore(ABC):
    """
    Async document store used by the executor and the mutation pipeline.

    Implementations raise ``StoreUnavailableError`` when the backend fails.
    """

    async def init(self) -> None:
        """Prepare the backend (create tables, connect)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Fetch one document by id, or None."""

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: Optional[list[NormalizedFilter]] = None,
    ) -> list[dict[str, Any]]:
        """Fetch documents matching all filters, in insertion order."""

    async def find_by_ids(self, collection: str, ids: list[str]) -> list[dict[str, Any]]:
        """Fetch many documents with a single lookup."""
        if not ids:
            return []
        return await self.find(collection, [NormalizedFilter(field="id", op="in", value=ids)])

    @abstractmethod
    async def insert(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a document, assign its id and return it."""

    @abstractmethod
    async def update(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        """Apply ``changes`` to a document. Returns the new document, or None if absent."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """Remove a document. Returns False if it did not exist."""
