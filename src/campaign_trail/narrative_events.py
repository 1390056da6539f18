"""
Narrative event creation and sequencing.

Turns completed combats, montages, negotiations, respites and scenes into
``narrative_event`` entities, and links events into a timeline with
``leads_to`` / ``follows`` relationships.
"""

import logging
from typing import Any

from .exceptions import EntityNotFoundError, EntityTypeError, SessionNotCompletedError
from .models import (
    BaseEntity,
    CombatSession,
    EVENT_TYPE_FIELD,
    FOLLOWS,
    LEADS_TO,
    MontageSession,
    NARRATIVE_EVENT_TYPE,
    NarrativeEventType,
    NegotiationSession,
    OUTCOME_FIELD,
    RespiteSession,
    SCENE_TYPE,
    SESSION_FIELD,
    SOURCE_ID_FIELD,
)
from .storage import InMemoryEntityStore

logger = logging.getLogger("campaign-trail")


def _require_completed(kind: str, status: str) -> None:
    if status != "completed":
        raise SessionNotCompletedError(
            f"Cannot create narrative event from {kind} that is not completed",
            status=status,
        )


class NarrativeEventService:
    """Creates narrative events in an entity store and links them together."""

    def __init__(self, store: InMemoryEntityStore) -> None:
        self.store = store

    async def _create_event(
        self,
        name: str,
        description: str | None,
        event_type: NarrativeEventType,
        source_id: str,
        outcome: str | None = None,
        session_id: str | None = None,
    ) -> BaseEntity:
        fields: dict[str, Any] = {
            EVENT_TYPE_FIELD: event_type.value,
            SOURCE_ID_FIELD: source_id,
        }
        if outcome is not None:
            fields[OUTCOME_FIELD] = outcome
        if session_id is not None:
            fields[SESSION_FIELD] = session_id

        entity = BaseEntity(
            type=NARRATIVE_EVENT_TYPE,
            name=name,
            description=description or "",
            fields=fields,
        )
        created = await self.store.create(entity)
        logger.info(f"📜 Narrative event '{name}' created from {event_type.value} {source_id}")
        return created

    async def create_from_combat(self, combat: CombatSession, session_id: str | None = None) -> BaseEntity:
        """Create a narrative event from a completed combat.

        Raises:
            SessionNotCompletedError: If the combat is not completed
        """
        _require_completed("combat", combat.status)
        outcome = f"Victory in {combat.current_round} rounds, earned {combat.victory_points} VP"
        return await self._create_event(
            combat.name, combat.description, NarrativeEventType.COMBAT,
            combat.id, outcome, session_id,
        )

    async def create_from_montage(self, montage: MontageSession, session_id: str | None = None) -> BaseEntity:
        """Create a narrative event from a completed montage."""
        _require_completed("montage", montage.status)
        return await self._create_event(
            montage.name, montage.description, NarrativeEventType.MONTAGE,
            montage.id, montage.outcome, session_id,
        )

    async def create_from_negotiation(
        self, negotiation: NegotiationSession, session_id: str | None = None
    ) -> BaseEntity:
        """Create a narrative event from a completed negotiation."""
        _require_completed("negotiation", negotiation.status)
        return await self._create_event(
            negotiation.name, negotiation.description, NarrativeEventType.NEGOTIATION,
            negotiation.id, negotiation.outcome, session_id,
        )

    async def create_from_respite(self, respite: RespiteSession, session_id: str | None = None) -> BaseEntity:
        """Create a narrative event from a completed respite.

        Respite activities live in their own entities, so the outcome only
        reports hero count and converted victory points.
        """
        _require_completed("respite", respite.status)
        outcome = (
            f"{len(respite.heroes)} heroes rested, 0 activities completed, "
            f"{respite.victory_points_converted} VP converted"
        )
        return await self._create_event(
            respite.name, respite.description, NarrativeEventType.RESPITE,
            respite.id, outcome, session_id,
        )

    async def create_from_scene(self, scene_id: str, session_id: str | None = None) -> BaseEntity:
        """Create a narrative event from a scene entity.

        Raises:
            EntityNotFoundError: If no entity has this id
            EntityTypeError: If the entity is not a scene
        """
        scene = await self.store.get_by_id(scene_id)
        if scene is None:
            raise EntityNotFoundError("Scene entity not found", entity_id=scene_id)
        if scene.type != SCENE_TYPE:
            raise EntityTypeError(
                "Entity is not a scene type",
                entity_id=scene_id,
                expected_type=SCENE_TYPE,
                actual_type=scene.type,
            )
        return await self._create_event(
            scene.name, scene.description, NarrativeEventType.SCENE,
            scene_id, None, session_id,
        )

    async def link_events(self, from_id: str, to_id: str) -> None:
        """Record that one narrative event leads to another.

        Stores ``leads_to`` on the earlier event and ``follows`` on the later one.

        Args:
            from_id: Earlier event
            to_id: Later event

        Raises:
            EntityNotFoundError: If either event is missing
            EntityTypeError: If either entity is not a narrative event
            DuplicateLinkError: If the events are already linked
        """
        for role, entity_id in (("Source", from_id), ("Target", to_id)):
            entity = await self.store.get_by_id(entity_id)
            if entity is None:
                raise EntityNotFoundError(f"{role} entity not found", entity_id=entity_id)
            if entity.type != NARRATIVE_EVENT_TYPE:
                raise EntityTypeError(
                    f"{role} entity is not a narrative_event type",
                    entity_id=entity_id,
                    expected_type=NARRATIVE_EVENT_TYPE,
                    actual_type=entity.type,
                )

        await self.store.add_link(
            from_id, to_id, LEADS_TO,
            bidirectional=True,
            reverse_relationship=FOLLOWS,
        )
        logger.info(f"🔗 Narrative event {from_id} now leads to {to_id}")
