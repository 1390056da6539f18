"""
Entity store for campaign-trail.

Defines the query capability the trail resolver depends on (EntityStore) and
an in-memory implementation with JSON snapshot persistence.
"""

import copy
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Protocol

from .exceptions import DuplicateLinkError, EntityNotFoundError
from .models import BaseEntity, EntityLink, FOLLOWS, LEADS_TO

logger = logging.getLogger("campaign-trail")

EntityPredicate = Callable[[BaseEntity], bool]

INVERSE_RELATIONSHIPS: dict[str, str] = {
    LEADS_TO: FOLLOWS,
    FOLLOWS: LEADS_TO,
    "parent_of": "child_of",
    "child_of": "parent_of",
    "located_in": "contains",
    "contains": "located_in",
    "member_of": "has_member",
    "has_member": "member_of",
    "knows": "knows",
    "friend_of": "friend_of",
    "allied_with": "allied_with",
    "enemy_of": "enemy_of",
}


def get_inverse_relationship(relationship: str) -> str:
    """Relationship name to use on the reverse side of a bidirectional link."""
    return INVERSE_RELATIONSHIPS.get(relationship, f"inverse_of_{relationship}")


class EntityStore(Protocol):
    """Asynchronous, predicate-filterable query over typed records."""

    async def filter(self, predicate: EntityPredicate) -> list[BaseEntity]:
        """Return every record matching the predicate, without pagination.

        Args:
            predicate: Called once per record; truthy keeps the record.

        Returns:
            The full matching set, in store order.
        """
        ...


class InMemoryEntityStore:
    """Entity store kept in process memory.

    Records are kept in insertion order. Every read returns deep copies, so
    callers cannot change stored state through a returned entity.
    """

    def __init__(self, entities: list[BaseEntity] | None = None) -> None:
        self._entities: dict[str, BaseEntity] = {}
        for entity in entities or []:
            self._entities[entity.id] = entity.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._entities)

    async def filter(self, predicate: EntityPredicate) -> list[BaseEntity]:
        return [
            entity.model_copy(deep=True)
            for entity in self._entities.values()
            if predicate(entity)
        ]

    async def get_by_id(self, entity_id: str) -> BaseEntity | None:
        entity = self._entities.get(entity_id)
        return entity.model_copy(deep=True) if entity else None

    async def create(self, entity: BaseEntity) -> BaseEntity:
        """Store a new entity and return a copy of it."""
        self._entities[entity.id] = entity.model_copy(deep=True)
        logger.debug(f"✨ Created {entity.type} '{entity.name}' ({entity.id})")
        return entity.model_copy(deep=True)

    async def add_link(
        self,
        source_id: str,
        target_id: str,
        relationship: str,
        bidirectional: bool = False,
        reverse_relationship: str | None = None,
        notes: str | None = None,
        strength: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> EntityLink:
        """Link two stored entities.

        Args:
            source_id: Entity the link is stored on
            target_id: Entity the link points to
            relationship: Relationship name, e.g. ``leads_to``
            bidirectional: Also store a reverse link on the target
            reverse_relationship: Name of the reverse relationship; defaults
                to the inverse from INVERSE_RELATIONSHIPS
            notes: Free-text notes for the link
            strength: strong, moderate or weak
            metadata: Extra link metadata

        Returns:
            The forward link

        Raises:
            EntityNotFoundError: If either entity is missing
            DuplicateLinkError: If the source already links to the target
        """
        source = self._entities.get(source_id)
        if source is None:
            raise EntityNotFoundError("Source entity not found", entity_id=source_id)
        target = self._entities.get(target_id)
        if target is None:
            raise EntityNotFoundError("Target entity not found", entity_id=target_id)

        if any(link.target_id == target_id for link in source.links):
            raise DuplicateLinkError(
                "Link already exists",
                details={"source_id": source_id, "target_id": target_id},
            )

        now = datetime.now()
        forward = EntityLink(
            source_id=source_id,
            target_id=target_id,
            target_type=target.type,
            relationship=relationship,
            bidirectional=bidirectional,
            reverse_relationship=reverse_relationship if bidirectional else None,
            notes=notes,
            strength=strength,
            created_at=now,
            updated_at=now,
            metadata=copy.deepcopy(metadata) if metadata else {},
        )
        source.links.append(forward)
        source.updated_at = now

        if bidirectional:
            reverse = EntityLink(
                source_id=target_id,
                target_id=source_id,
                target_type=source.type,
                relationship=reverse_relationship or get_inverse_relationship(relationship),
                bidirectional=True,
                reverse_relationship=relationship if reverse_relationship else None,
                strength=strength,
                created_at=now,
                updated_at=now,
                metadata=copy.deepcopy(metadata) if metadata else {},
            )
            target.links.append(reverse)
            target.updated_at = now

        logger.debug(f"🔗 Linked {source_id} -[{relationship}]-> {target_id}")
        return forward.model_copy(deep=True)

    # Persistence
    def save(self, path: str | Path) -> None:
        """Write every entity to a JSON file."""
        path = Path(path)
        logger.debug(f"💾 Saving {len(self._entities)} entities to {path}...")
        data = [entity.model_dump(mode="json") for entity in self._entities.values()]
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
        logger.debug("✅ Entities saved successfully.")

    def load(self, path: str | Path) -> int:
        """Replace the store contents with the entities in a JSON file.

        Returns:
            Number of entities loaded
        """
        path = Path(path)
        logger.debug(f"📂 Loading entities from {path}...")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            entities = [BaseEntity.model_validate(item) for item in data]
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"❌ Error loading entities from {path}: {e}")
            raise

        self._entities = {entity.id: entity for entity in entities}
        logger.info(f"✅ Loaded {len(entities)} entities from {path}")
        return len(entities)


__all__ = [
    "EntityPredicate",
    "EntityStore",
    "InMemoryEntityStore",
    "INVERSE_RELATIONSHIPS",
    "get_inverse_relationship",
]
