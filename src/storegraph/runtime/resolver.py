"""
Reference resolver - batched lookup of referenced entities.

All ids needed for one target type are collected first and fetched with a
single ``find_by_ids`` call, instead of one lookup per parent record.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from ..core.defs import get_entity
from ..store.base import DocumentStore

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """
    Resolves typed foreign-key values to documents.

    Usage:
        resolver = ReferenceResolver(store)
        users = await resolver.resolve("User", ["a1", "b2", "a1"])
        users.get("a1")  # document, or None if dangling
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def resolve(self, entity: str, ids: Iterable[Any]) -> dict[Any, dict[str, Any]]:
        """
        Fetch the referenced entities in one lookup.

        Args:
            entity: Referenced entity name (e.g. "Product")
            ids: Identities to resolve; duplicates and None are ignored

        Returns:
            Dict mapping id to document. Ids that do not resolve are absent.
        """
        unique_ids = self._unique(ids)
        if not unique_ids:
            return {}

        entity_def = get_entity(entity)
        docs = await self.store.find_by_ids(entity_def.collection, unique_ids)
        resolved = {doc["id"]: doc for doc in docs}

        missing = len(unique_ids) - len(resolved)
        logger.debug(
            f"Resolved {len(resolved)}/{len(unique_ids)} {entity_def.name} references"
            + (f" ({missing} dangling)" if missing else "")
        )
        return resolved

    async def missing(self, entity: str, ids: Iterable[Any]) -> list[Any]:
        """Return the ids that do not resolve to an existing entity."""
        unique_ids = self._unique(ids)
        resolved = await self.resolve(entity, unique_ids)
        return [i for i in unique_ids if i not in resolved]

    def _unique(self, ids: Iterable[Any]) -> list[Any]:
        """Extract unique non-null ids, keeping first-seen order."""
        values = []
        seen = set()
        for value in ids:
            if value is not None and value not in seen:
                values.append(value)
                seen.add(value)
        return values
