"""
Selection executor - runs a query and resolves its relation fields.

Handles:
- Validating the selection tree against entity definitions
- Executing the base lookup (by id, or filtered at the store level)
- Resolving requested relations once per target type across the whole
  result set, then attaching them to each parent
- Field projection
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from ..core.defs import EntityDef, RelationDef, get_entity
from ..core.errors import ValidationError
from ..core.query_types import JSONQuery, NormalizedFilter, SelectionNode, normalize_filters
from ..store.base import DocumentStore
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)


class SelectionExecutor:
    """
    Executes entity queries against the document store.

    Usage:
        executor = SelectionExecutor(store)
        order = await executor.fetch_one(
            "Order", order_id,
            SelectionNode(relations={"user": SelectionNode(), "products": SelectionNode()}),
        )
    """

    def __init__(self, store: DocumentStore, resolver: Optional[ReferenceResolver] = None):
        """
        Initialize executor.

        Args:
            store: Document store adapter
            resolver: Reference resolver (default: one over the same store)
        """
        self.store = store
        self.resolver = resolver or ReferenceResolver(store)

    async def execute(self, query: JSONQuery) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Execute a parsed query: single lookup if ``id`` is set, else a collection query."""
        if query.id is not None:
            return await self.fetch_one(query.entity, query.id, query.select)
        return await self.fetch_many(query.entity, normalize_filters(query.filters), query.select)

    async def fetch_one(
        self,
        entity: str,
        entity_id: str,
        select: Optional[SelectionNode] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Fetch a single entity by id with its requested relations.

        Returns None if the entity does not exist.
        """
        entity_def = get_entity(entity)
        select = select or SelectionNode()
        self._validate_selection(entity_def, select)

        doc = await self.store.get(entity_def.collection, entity_id)
        if doc is None:
            return None

        items = await self._resolve(entity_def, [doc], select)
        return items[0]

    async def fetch_many(
        self,
        entity: str,
        filters: Optional[list[NormalizedFilter]] = None,
        select: Optional[SelectionNode] = None,
    ) -> list[dict[str, Any]]:
        """Fetch every entity matching ``filters`` with its requested relations."""
        entity_def = get_entity(entity)
        select = select or SelectionNode()
        filters = filters or []
        self._validate_filters(entity_def, filters)
        self._validate_selection(entity_def, select)

        docs = await self.store.find(entity_def.collection, filters)
        return await self._resolve(entity_def, docs, select)

    async def _resolve(
        self,
        entity_def: EntityDef,
        items: list[dict[str, Any]],
        select: SelectionNode,
    ) -> list[dict[str, Any]]:
        """
        Resolve requested relations on ``items`` and project fields.

        Ids are grouped by target type so each type is fetched once per pass,
        no matter how many parents or relations point at it.
        """
        relations = [
            (entity_def.relations[name], node)
            for name, node in select.relations.items()
        ]
        if not relations or not items:
            return [self._project(item, select) for item in items]

        # Collect the union of referenced ids per target type
        ids_by_target: dict[str, list[Any]] = {}
        for relation, _ in relations:
            bucket = ids_by_target.setdefault(relation.target, [])
            for item in items:
                bucket.extend(self._refs(item, relation))

        targets = list(ids_by_target)
        lookups = await asyncio.gather(
            *(self.resolver.resolve(target, ids_by_target[target]) for target in targets)
        )
        resolved_by_target = dict(zip(targets, lookups))

        # Resolve nested selections on the fetched children
        resolved_by_relation = await asyncio.gather(
            *(
                self._resolve_children(relation, node, resolved_by_target[relation.target])
                for relation, node in relations
            )
        )

        result = []
        for item in items:
            merged = dict(item)
            for (relation, _), children in zip(relations, resolved_by_relation):
                self._attach(merged, item, relation, children)
            result.append(self._project(merged, select))
        return result

    async def _resolve_children(
        self,
        relation: RelationDef,
        select: SelectionNode,
        docs: dict[Any, dict[str, Any]],
    ) -> dict[Any, dict[str, Any]]:
        """Apply the relation's own selection to its resolved documents."""
        target_def = get_entity(relation.target)
        ids = list(docs)
        children = await self._resolve(target_def, [docs[i] for i in ids], select)
        return dict(zip(ids, children))

    def _attach(
        self,
        merged: dict[str, Any],
        item: dict[str, Any],
        relation: RelationDef,
        children: dict[Any, dict[str, Any]],
    ) -> None:
        """Attach resolved children to a parent. Dangling ids become None."""
        if relation.cardinality == "one":
            ref = item.get(relation.from_field)
            child = children.get(ref) if ref is not None else None
            merged[relation.name] = dict(child) if child is not None else None
        else:
            merged[relation.name] = [
                dict(children[ref]) if ref in children else None
                for ref in item.get(relation.from_field) or []
            ]

    def _refs(self, item: dict[str, Any], relation: RelationDef) -> list[Any]:
        value = item.get(relation.from_field)
        if value is None:
            return []
        if relation.cardinality == "many":
            return list(value)
        return [value]

    def _project(self, item: dict[str, Any], select: SelectionNode) -> dict[str, Any]:
        """Keep only selected fields (plus id and requested relations)."""
        if not select.fields:
            return item
        keep = {"id", *select.fields, *select.relations}
        return {key: value for key, value in item.items() if key in keep}

    def _validate_selection(self, entity_def: EntityDef, select: SelectionNode) -> None:
        """Check requested fields and relations exist on the entity (recursively)."""
        errors = []
        known_fields = {"id", *entity_def.create_input.model_fields}
        for field in select.fields:
            if field not in known_fields:
                errors.append(f"Unknown field '{field}' on {entity_def.name}")
        for name in select.relations:
            if name not in entity_def.relations:
                errors.append(f"Unknown relation '{name}' on {entity_def.name}")
        if errors:
            raise ValidationError(errors)

        for name, node in select.relations.items():
            self._validate_selection(get_entity(entity_def.relations[name].target), node)

    def _validate_filters(self, entity_def: EntityDef, filters: list[NormalizedFilter]) -> None:
        errors = [
            f"Field '{f.field}' is not filterable on {entity_def.name}"
            for f in filters
            if f.field not in entity_def.filterable
        ]
        if errors:
            raise ValidationError(errors)
