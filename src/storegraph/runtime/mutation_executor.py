"""
Mutation pipeline for Storegraph.

Handles create, partial update and delete for each entity type, then
publishes a change event for every write that changed the store.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import pydantic

from ..core.defs import EntityDef, get_entity
from ..core.entities import MutationInput
from ..core.errors import DanglingReferenceError, NotFoundError, ValidationError
from ..messaging.events import ChangeEvent, Verb
from ..messaging.notifier import ChangeNotifier
from ..store.base import DocumentStore
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)


class MutationPipeline:
    """
    Validates and applies mutations against the document store.

    By default references held by an Order are stored unchecked, so an order
    may point at products or users that do not exist. With
    ``strict_references=True`` every referenced id must resolve first.
    """

    def __init__(
        self,
        store: DocumentStore,
        notifier: ChangeNotifier,
        *,
        strict_references: bool = False,
        resolver: Optional[ReferenceResolver] = None,
    ):
        """
        Initialize mutation pipeline.

        Args:
            store: Document store adapter
            notifier: Change notifier receiving one event per successful write
            strict_references: Reject writes whose references do not resolve
            resolver: Resolver used for reference checks
        """
        self.store = store
        self.notifier = notifier
        self.strict_references = strict_references
        self.resolver = resolver or ReferenceResolver(store)

    async def create(self, entity: str, data: dict[str, Any] | MutationInput) -> dict[str, Any]:
        """
        Validate and insert a new entity.

        Returns:
            The created document including its store-assigned id

        Raises:
            ValidationError: Missing required field, unknown field or bad enum value
            DanglingReferenceError: Strict mode and a reference does not resolve
        """
        entity_def = get_entity(entity)
        document = self._validate(entity_def.create_input, data).document()
        await self._check_references(entity_def, document)

        created = await self.store.insert(entity_def.collection, document)
        logger.info(f"Created {entity_def.name} {created['id']}")

        await self._publish(entity_def, Verb.ADDED, created)
        return created

    async def update(
        self,
        entity: str,
        entity_id: str,
        data: dict[str, Any] | MutationInput,
    ) -> dict[str, Any]:
        """
        Apply a partial update. Omitted fields keep their stored values.

        Returns:
            The document after the update

        Raises:
            ValidationError: Unknown field, bad enum value, or null for a required field
            NotFoundError: No entity with ``entity_id``
            DanglingReferenceError: Strict mode and a new reference does not resolve
        """
        entity_def = get_entity(entity)
        changes = self._validate(entity_def.update_input, data).changes()
        await self._check_references(entity_def, changes)

        updated = await self.store.update(entity_def.collection, entity_id, changes)
        if updated is None:
            raise NotFoundError(entity_def.name, entity_id)
        logger.info(f"Updated {entity_def.name} {entity_id}: {sorted(changes)}")

        await self._publish(entity_def, Verb.UPDATED, updated)
        return updated

    async def delete(self, entity: str, entity_id: str) -> bool:
        """
        Delete an entity. Idempotent.

        Returns:
            True if the entity was removed, False if it was already absent
        """
        entity_def = get_entity(entity)
        deleted = await self.store.delete(entity_def.collection, entity_id)
        if not deleted:
            logger.info(f"Delete {entity_def.name} {entity_id}: already absent")
            return False

        logger.info(f"Deleted {entity_def.name} {entity_id}")
        await self._publish(entity_def, Verb.DELETED, {"id": entity_id})
        return True

    def _validate(self, model: type[MutationInput], data: dict[str, Any] | MutationInput) -> MutationInput:
        """Convert raw input to the operation's input model."""
        if isinstance(data, model):
            return data
        if isinstance(data, MutationInput):
            data = data.model_dump(exclude_unset=True)
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            raise ValidationError([
                f"{'.'.join(str(loc) for loc in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            ])

    async def _check_references(self, entity_def: EntityDef, document: dict[str, Any]) -> None:
        """In strict mode, ensure every referenced id in ``document`` exists."""
        if not self.strict_references or not entity_def.relations:
            return

        ids_by_target: dict[str, list[Any]] = {}
        for relation in entity_def.relations.values():
            if relation.from_field not in document:
                continue
            value = document[relation.from_field]
            refs = list(value or []) if relation.cardinality == "many" else [value]
            ids_by_target.setdefault(relation.target, []).extend(refs)

        missing = {}
        for target, ids in ids_by_target.items():
            absent = await self.resolver.missing(target, ids)
            if absent:
                missing[target] = absent
        if missing:
            raise DanglingReferenceError(entity_def.name, missing)

    async def _publish(self, entity_def: EntityDef, verb: Verb, payload: dict[str, Any]) -> None:
        """Publish a change event. Failures are logged, never raised: the write is committed."""
        event = ChangeEvent(entity=entity_def.name, verb=verb, payload=payload)
        try:
            count = await self.notifier.publish(event.topic, event)
            logger.info(f"Published {event.topic.channel}: {count} subscribers")
        except Exception as e:
            logger.error(f"Failed to publish {event.topic.channel}: {e}", exc_info=True)
