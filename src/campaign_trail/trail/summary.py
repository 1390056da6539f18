"""
Prose summaries of session trails.

The wording is fully deterministic: the same trail always yields the same
text. Transition phrases and category descriptors come from the lookup
tables below.
"""

from __future__ import annotations

import logging
import re

from ..exceptions import InvalidArgumentError
from ..models import NarrativeEvent, NarrativeEventType
from .resolver import TrailResolver

logger = logging.getLogger("campaign-trail")

EMPTY_TRAIL_SUMMARY = "No events recorded for this session."

OPENING_PHRASE = "The session began with "
CLOSING_PHRASE = "The session concluded with "

# Cycled through for every event between the first and the last
TRANSITION_PHRASES = (
    "Following this, ",
    "Then, ",
    "Next, ",
    "After that, ",
    "Subsequently, ",
)

CATEGORY_DESCRIPTORS: dict[NarrativeEventType, str] = {
    NarrativeEventType.COMBAT: "a combat encounter: ",
    NarrativeEventType.MONTAGE: "a montage: ",
    NarrativeEventType.SCENE: "a scene: ",
}
DEFAULT_DESCRIPTOR = "an event: "

_WORD_START = re.compile(r"\b\w")


def format_outcome(outcome: str) -> str:
    """Turn a snake_case token into Title Case: ``total_success`` -> ``Total Success``."""
    return _WORD_START.sub(lambda m: m.group(0).upper(), outcome.replace("_", " "))


def _lead_in(position: int, count: int) -> str:
    if position == 0:
        return OPENING_PHRASE
    if position == count - 1:
        return CLOSING_PHRASE
    return TRANSITION_PHRASES[(position - 1) % len(TRANSITION_PHRASES)]


def describe_event(event: NarrativeEvent, position: int, count: int) -> str:
    """Render one sentence of the summary.

    Args:
        event: The event to describe
        position: Zero-based position of the event in the trail
        count: Length of the trail
    """
    segment = _lead_in(position, count)
    segment += CATEGORY_DESCRIPTORS.get(event.event_type, DEFAULT_DESCRIPTOR)
    segment += event.name
    if event.outcome:
        segment += f". Outcome: {format_outcome(event.outcome)}"
    return segment + "."


class SummaryComposer:
    """Turns a session trail into readable prose.

    Usage:
        composer = SummaryComposer(TrailResolver(store))
        text = await composer.generate_summary("session-1")
    """

    def __init__(self, resolver: TrailResolver) -> None:
        self.resolver = resolver

    @staticmethod
    def compose(events: list[NarrativeEvent]) -> str:
        """Compose the summary for an already ordered trail."""
        if not events:
            return EMPTY_TRAIL_SUMMARY
        count = len(events)
        return " ".join(describe_event(event, i, count) for i, event in enumerate(events))

    async def generate_summary(self, session_id: str | None) -> str:
        """Generate a narrative summary of a session's trail.

        Args:
            session_id: Session to summarize

        Returns:
            Summary text, or EMPTY_TRAIL_SUMMARY when the session has no events

        Raises:
            InvalidArgumentError: If session_id is None
        """
        if session_id is None:
            raise InvalidArgumentError("session_id cannot be None")

        events = await self.resolver.get_trail(session_id)
        logger.debug(f"✍️ Summarizing {len(events)} events for session '{session_id}'")
        return self.compose(events)
