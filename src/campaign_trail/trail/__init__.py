"""
Session trail reconstruction and narrative summaries.

Components:
- TrailResolver: Orders a session's narrative events, following leads_to
  links and falling back to creation time when the links form a cycle
- SummaryComposer: Renders an ordered trail as prose

Usage:
    from campaign_trail.trail import get_trail, generate_summary

    events = await get_trail(store, "session-1")
    text = await generate_summary(store, "session-1")
"""

from ..storage import EntityStore
from ..models import NarrativeEvent
from .resolver import TrailResolver, order_by_creation, order_by_relationships
from .summary import (
    EMPTY_TRAIL_SUMMARY,
    SummaryComposer,
    format_outcome,
)


async def get_trail(store: EntityStore, session_id: str | None) -> list[NarrativeEvent]:
    """Ordered narrative events of a session, read from ``store``."""
    return await TrailResolver(store).get_trail(session_id)


async def generate_summary(store: EntityStore, session_id: str | None) -> str:
    """Prose summary of a session's trail, read from ``store``."""
    return await SummaryComposer(TrailResolver(store)).generate_summary(session_id)


__all__ = [
    # Operations
    "get_trail",
    "generate_summary",
    # Resolver
    "TrailResolver",
    "order_by_relationships",
    "order_by_creation",
    # Composer
    "SummaryComposer",
    "EMPTY_TRAIL_SUMMARY",
    "format_outcome",
]
