"""
Data models for campaign-trail.

Entities are generic typed records with a free-form attribute bag and a list
of outgoing links. Narrative events are a read-only view over entities whose
type is ``narrative_event``.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from shortuuid import random

logger = logging.getLogger("campaign-trail")

NARRATIVE_EVENT_TYPE = "narrative_event"
SCENE_TYPE = "scene"

# Attribute bag keys used by narrative events
SESSION_FIELD = "session"
EVENT_TYPE_FIELD = "eventType"
OUTCOME_FIELD = "outcome"
SOURCE_ID_FIELD = "sourceId"

# Sequence relationships between narrative events
LEADS_TO = "leads_to"
FOLLOWS = "follows"

_timestamp_adapter = TypeAdapter(datetime)


class EntityLink(BaseModel):
    """Directed relationship edge, stored on its source entity."""
    id: str = Field(default_factory=lambda: random(length=8))
    source_id: str
    target_id: str
    target_type: str | None = None
    relationship: str
    bidirectional: bool = False
    reverse_relationship: str | None = None
    notes: str | None = None
    strength: str | None = None  # strong, moderate, weak
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    metadata: dict[str, Any] = Field(default_factory=dict)


class BaseEntity(BaseModel):
    """Generic typed campaign record (character, location, scene, narrative event, ...)."""
    id: str = Field(default_factory=lambda: random(length=8))
    type: str
    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    fields: dict[str, Any] = Field(default_factory=dict)
    links: list[EntityLink] = Field(default_factory=list)
    notes: str = ""
    created_at: datetime | None = Field(default_factory=datetime.now)
    updated_at: datetime | None = Field(default_factory=datetime.now)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        """Keep records with unreadable timestamps instead of rejecting them."""
        if value is None or isinstance(value, datetime):
            return value
        try:
            return _timestamp_adapter.validate_python(value)
        except ValidationError:
            logger.warning(f"⚠️ Unreadable timestamp {value!r}, treating it as missing")
            return None


class NarrativeEventType(str, Enum):
    SCENE = "scene"
    COMBAT = "combat"
    MONTAGE = "montage"
    NEGOTIATION = "negotiation"
    RESPITE = "respite"
    OTHER = "other"


class NarrativeEvent(BaseModel):
    """Read-only view of a ``narrative_event`` entity.

    Attributes:
        id: Entity id, unique within a query result
        session_id: Owning session, None when the event belongs to no session
        event_type: Narrative category; missing or unknown values become OTHER
        outcome: How the event resolved, free text or a snake_case token
        source_id: Combat, montage, negotiation or scene the event came from
        name: Display name
        description: Display description
        created_at: Creation time, None when missing or unreadable
        links: Outgoing relationship edges
    """
    model_config = ConfigDict(frozen=True)

    id: str
    session_id: str | None = None
    event_type: NarrativeEventType = NarrativeEventType.OTHER
    outcome: str | None = None
    source_id: str | None = None
    name: str
    description: str = ""
    created_at: datetime | None = None
    links: tuple[EntityLink, ...] = ()

    @classmethod
    def from_entity(cls, entity: BaseEntity) -> "NarrativeEvent":
        """Build the view from a stored entity.

        Args:
            entity: A record of type ``narrative_event``

        Returns:
            NarrativeEvent sharing the entity's id, name and links
        """
        attrs = entity.fields
        try:
            event_type = NarrativeEventType(attrs.get(EVENT_TYPE_FIELD))
        except ValueError:
            event_type = NarrativeEventType.OTHER

        session = attrs.get(SESSION_FIELD)
        outcome = attrs.get(OUTCOME_FIELD)
        source_id = attrs.get(SOURCE_ID_FIELD)

        return cls(
            id=entity.id,
            session_id=session if isinstance(session, str) else None,
            event_type=event_type,
            outcome=outcome if isinstance(outcome, str) else None,
            source_id=source_id if isinstance(source_id, str) else None,
            name=entity.name,
            description=entity.description,
            created_at=entity.created_at,
            links=tuple(link.model_copy(deep=True) for link in entity.links),
        )

    def successor_ids(self) -> list[str]:
        """Ids this event ``leads_to``, in link order (duplicates kept)."""
        return [link.target_id for link in self.links if link.relationship == LEADS_TO]


# Encounter sessions that can be turned into narrative events.
# Only the fields read by the conversion are modelled.

class CombatSession(BaseModel):
    """Finished or running combat encounter."""
    id: str = Field(default_factory=lambda: random(length=8))
    name: str
    description: str | None = None
    status: str = "preparing"  # preparing, active, paused, completed
    current_round: int = 0
    victory_points: int = 0


class MontageSession(BaseModel):
    """Montage test (a series of skill challenges)."""
    id: str = Field(default_factory=lambda: random(length=8))
    name: str
    description: str | None = None
    status: str = "preparing"  # preparing, active, completed
    outcome: str | None = None  # total_success, partial_success, total_failure


class NegotiationSession(BaseModel):
    """Negotiation with an NPC."""
    id: str = Field(default_factory=lambda: random(length=8))
    name: str
    description: str | None = None
    status: str = "preparing"  # preparing, active, completed
    outcome: str | None = None  # failure, minor_favor, major_favor, alliance


class RespiteSession(BaseModel):
    """Downtime between adventures."""
    id: str = Field(default_factory=lambda: random(length=8))
    name: str
    description: str | None = None
    status: str = "preparing"  # preparing, active, completed
    heroes: list[str] = Field(default_factory=list)
    victory_points_converted: int = 0


__all__ = [
    "NARRATIVE_EVENT_TYPE",
    "SCENE_TYPE",
    "SESSION_FIELD",
    "EVENT_TYPE_FIELD",
    "OUTCOME_FIELD",
    "SOURCE_ID_FIELD",
    "LEADS_TO",
    "FOLLOWS",
    "EntityLink",
    "BaseEntity",
    "NarrativeEventType",
    "NarrativeEvent",
    "CombatSession",
    "MontageSession",
    "NegotiationSession",
    "RespiteSession",
]
