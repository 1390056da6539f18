"""
Session trail reconstruction.

Recovers one deterministic linear order for the narrative events of a
session. Explicit ``leads_to`` links win whenever they order the whole set;
when a cycle gets in the way the events fall back to creation order.
"""

from __future__ import annotations

import heapq
import logging
from datetime import datetime, timezone

from ..exceptions import InvalidArgumentError
from ..models import BaseEntity, NARRATIVE_EVENT_TYPE, NarrativeEvent, SESSION_FIELD
from ..storage import EntityStore

logger = logging.getLogger("campaign-trail")


def order_by_relationships(events: list[NarrativeEvent]) -> list[NarrativeEvent]:
    """Topologically sort events along their ``leads_to`` links.

    Uses Kahn's algorithm over an id-keyed adjacency map. Links to events
    outside ``events`` are ignored. When several events are ready at once the
    lexicographically smallest id goes first, so the result does not depend
    on input order.

    Args:
        events: Events with unique ids

    Returns:
        The ordered events. Shorter than ``events`` when a cycle blocked
        part of the graph.
    """
    by_id = {event.id: event for event in events}
    outgoing: dict[str, list[str]] = {event_id: [] for event_id in by_id}
    in_degree: dict[str, int] = {event_id: 0 for event_id in by_id}

    for event in events:
        for target_id in event.successor_ids():
            if target_id in by_id:
                outgoing[event.id].append(target_id)
                in_degree[target_id] += 1

    ready = [event_id for event_id, count in in_degree.items() if count == 0]
    heapq.heapify(ready)

    ordered: list[NarrativeEvent] = []
    while ready:
        event_id = heapq.heappop(ready)
        ordered.append(by_id[event_id])
        for target_id in outgoing[event_id]:
            in_degree[target_id] -= 1
            if in_degree[target_id] == 0:
                heapq.heappush(ready, target_id)

    return ordered


# Stands in for missing or unreadable creation times
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _timestamp(event: NarrativeEvent) -> datetime:
    created_at = event.created_at
    if not isinstance(created_at, datetime):
        return EPOCH
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


def order_by_creation(events: list[NarrativeEvent]) -> list[NarrativeEvent]:
    """Stable sort by ``created_at``, oldest first; missing timestamps count as zero."""
    return sorted(events, key=_timestamp)


class TrailResolver:
    """Builds the ordered trail of narrative events for a session.

    Usage:
        resolver = TrailResolver(store)
        events = await resolver.get_trail("session-1")
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def get_trail(self, session_id: str | None) -> list[NarrativeEvent]:
        """Get the ordered trail of narrative events for a session.

        Args:
            session_id: Session whose events to order. Matched exactly
                against each event's ``session`` attribute.

        Returns:
            Ordered events, oldest first. Empty when the session has none.

        Raises:
            InvalidArgumentError: If session_id is None
        """
        if session_id is None:
            raise InvalidArgumentError("session_id cannot be None")

        if session_id == "":
            return []

        def belongs_to_session(entity: BaseEntity) -> bool:
            return (
                entity.type == NARRATIVE_EVENT_TYPE
                and entity.fields.get(SESSION_FIELD) == session_id
            )

        entities = await self.store.filter(belongs_to_session)
        events = [NarrativeEvent.from_entity(entity) for entity in entities]
        logger.debug(f"📜 Found {len(events)} narrative events for session '{session_id}'")

        if not events:
            return []

        ordered = order_by_relationships(events)
        if len(ordered) == len(events):
            return ordered

        logger.debug(
            f"🔁 Cycle in leads_to links for session '{session_id}' "
            f"({len(ordered)}/{len(events)} ordered), using creation order"
        )
        return order_by_creation(events)
