"""
Pytest configuration and fixtures for campaign-trail tests.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import pytest

# Add src directory to Python path to allow importing campaign_trail
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from campaign_trail.models import BaseEntity, EntityLink, LEADS_TO  # noqa: E402
from campaign_trail.storage import InMemoryEntityStore  # noqa: E402


# Configure anyio to only use asyncio (not trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


def build_event(
    event_id: str,
    name: str | None = None,
    session: Any = "session-1",
    event_type: str | None = "scene",
    outcome: Any = None,
    created_at: Any = None,
    leads_to: list[str] | None = None,
) -> BaseEntity:
    """Create a narrative_event entity for tests.

    ``created_at`` is passed through as given, so tests can supply None or
    unreadable values.
    """
    fields: dict[str, Any] = {}
    if session is not None:
        fields["session"] = session
    if event_type is not None:
        fields["eventType"] = event_type
    if outcome is not None:
        fields["outcome"] = outcome

    links = [
        EntityLink(source_id=event_id, target_id=target, relationship=LEADS_TO)
        for target in leads_to or []
    ]
    return BaseEntity(
        id=event_id,
        type="narrative_event",
        name=name or f"Event {event_id}",
        fields=fields,
        links=links,
        created_at=created_at,
    )


@pytest.fixture
def make_event() -> Callable[..., BaseEntity]:
    return build_event


@pytest.fixture
def at() -> Callable[[int, int], datetime]:
    """Timestamp on the test day at the given hour and minute."""
    def _at(hour: int, minute: int = 0) -> datetime:
        return datetime(2024, 5, 4, hour, minute)
    return _at


class RecordingStore(InMemoryEntityStore):
    """In-memory store that counts filter queries."""

    def __init__(self, entities: list[BaseEntity] | None = None) -> None:
        super().__init__(entities)
        self.query_count = 0

    async def filter(self, predicate):
        self.query_count += 1
        return await super().filter(predicate)


class FailingStore:
    """Store whose queries always fail."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or ConnectionError("database unavailable")

    async def filter(self, predicate):
        raise self.error


@pytest.fixture
def store_factory() -> Callable[..., RecordingStore]:
    return RecordingStore


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()
