"""
Tests for TrailResolver.

Tests cover:
- Argument validation (None vs empty session id)
- Session and type filtering
- leads_to ordering with deterministic tie-breaks
- Creation-time fallback when links form a cycle
- Store failures propagating unchanged
"""

from __future__ import annotations

import itertools
from datetime import datetime, timezone

import pytest

from campaign_trail.exceptions import InvalidArgumentError
from campaign_trail.models import BaseEntity, EntityLink, NarrativeEvent
from campaign_trail.trail import get_trail
from campaign_trail.trail.resolver import (
    TrailResolver,
    order_by_creation,
    order_by_relationships,
)

pytestmark = pytest.mark.anyio


def ids(events: list[NarrativeEvent]) -> list[str]:
    return [event.id for event in events]


# ============================================================================
# Argument Validation
# ============================================================================


class TestArguments:

    async def test_none_session_id_raises_before_query(self, store_factory):
        store = store_factory()
        resolver = TrailResolver(store)

        with pytest.raises(InvalidArgumentError, match="session_id cannot be None"):
            await resolver.get_trail(None)

        assert store.query_count == 0

    async def test_invalid_argument_is_a_value_error(self, store_factory):
        with pytest.raises(ValueError):
            await TrailResolver(store_factory()).get_trail(None)

    async def test_empty_session_id_returns_empty(self, store_factory, make_event):
        store = store_factory([make_event("a", session="")])

        assert await TrailResolver(store).get_trail("") == []

    async def test_store_failure_propagates_unchanged(self, failing_store):
        with pytest.raises(ConnectionError) as exc_info:
            await TrailResolver(failing_store).get_trail("session-1")

        assert exc_info.value is failing_store.error


# ============================================================================
# Filtering
# ============================================================================


class TestFiltering:

    async def test_no_matching_events(self, store_factory):
        assert await TrailResolver(store_factory()).get_trail("session-1") == []

    async def test_only_narrative_events_of_the_session(self, store_factory, make_event):
        other_type = BaseEntity(id="npc", type="npc", name="Bartender", fields={"session": "session-1"})
        store = store_factory([
            make_event("a"),
            make_event("b", session="session-2"),
            make_event("c", session=None),
            other_type,
        ])

        trail = await TrailResolver(store).get_trail("session-1")

        assert ids(trail) == ["a"]
        assert trail[0].session_id == "session-1"

    async def test_session_match_is_exact(self, store_factory, make_event):
        store = store_factory([
            make_event("a", session="Session-1"),
            make_event("b", session=" session-1"),
            make_event("c", session="session-1"),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["c"]

    async def test_module_level_operation(self, store_factory, make_event):
        store = store_factory([make_event("a")])

        assert ids(await get_trail(store, "session-1")) == ["a"]


# ============================================================================
# Relationship Ordering
# ============================================================================


class TestRelationshipOrdering:

    async def test_chain_overrides_creation_time(self, store_factory, make_event, at):
        # Created in reverse order, linked start -> middle -> end
        store = store_factory([
            make_event("event-end", created_at=at(9)),
            make_event("event-middle", created_at=at(10), leads_to=["event-end"]),
            make_event("event-start", created_at=at(11), leads_to=["event-middle"]),
        ])

        trail = await TrailResolver(store).get_trail("session-1")

        assert ids(trail) == ["event-start", "event-middle", "event-end"]

    async def test_chain_order_independent_of_input_order(self, store_factory, make_event):
        events = [
            make_event("e1", leads_to=["e2"]),
            make_event("e2", leads_to=["e3"]),
            make_event("e3", leads_to=["e4"]),
            make_event("e4"),
        ]
        for permutation in itertools.permutations(events):
            trail = await TrailResolver(store_factory(list(permutation))).get_trail("session-1")
            assert ids(trail) == ["e1", "e2", "e3", "e4"]

    async def test_unlinked_events_ordered_by_id(self, store_factory, make_event, at):
        store = store_factory([
            make_event("charlie", created_at=at(8)),
            make_event("alpha", created_at=at(12)),
            make_event("bravo", created_at=at(10)),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["alpha", "bravo", "charlie"]

    async def test_smallest_ready_id_wins_at_every_step(self, store_factory, make_event):
        # z -> a, and b is independent: z and b start ready, b < z,
        # then a becomes ready after z and a < nothing else left.
        store = store_factory([
            make_event("z", leads_to=["a"]),
            make_event("a"),
            make_event("b"),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["b", "z", "a"]

    async def test_branch_and_merge(self, store_factory, make_event):
        store = store_factory([
            make_event("start", leads_to=["left", "right"]),
            make_event("right", leads_to=["wrapup"]),
            make_event("left", leads_to=["wrapup"]),
            make_event("wrapup"),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["start", "left", "right", "wrapup"]

    async def test_links_outside_the_session_are_ignored(self, store_factory, make_event, at):
        store = store_factory([
            make_event("b", created_at=at(10), leads_to=["elsewhere"]),
            make_event("a", created_at=at(11), leads_to=["b"]),
            make_event("elsewhere", session="session-2", leads_to=["a"]),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["a", "b"]

    async def test_follows_links_do_not_order(self, store_factory, make_event):
        # "a follows b" alone does not put b first
        a = make_event("a")
        a.links.append(EntityLink(source_id="a", target_id="b", relationship="follows"))
        store = store_factory([make_event("b"), a])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["a", "b"]

    async def test_linked_events_keep_both_sides(self, store_factory, make_event):
        # A bidirectional link stores leads_to on the source and follows on the target
        a = make_event("b-first", leads_to=["a-second"])
        b = make_event("a-second")
        b.links.append(EntityLink(source_id="a-second", target_id="b-first", relationship="follows"))
        store = store_factory([b, a])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["b-first", "a-second"]


# ============================================================================
# Cycle Fallback
# ============================================================================


class TestCycleFallback:

    async def test_two_event_cycle_uses_creation_time(self, store_factory, make_event, at):
        store = store_factory([
            make_event("a", created_at=at(11), leads_to=["b"]),
            make_event("b", created_at=at(10), leads_to=["a"]),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["b", "a"]

    async def test_partial_order_is_discarded(self, store_factory, make_event, at):
        # "first" would resolve before the x <-> y cycle, but the whole set
        # falls back to creation order.
        store = store_factory([
            make_event("first", created_at=at(12), leads_to=["x"]),
            make_event("x", created_at=at(9), leads_to=["y"]),
            make_event("y", created_at=at(10), leads_to=["x"]),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["x", "y", "first"]

    async def test_self_loop_is_a_cycle(self, store_factory, make_event, at):
        store = store_factory([
            make_event("b", created_at=at(9)),
            make_event("a", created_at=at(10), leads_to=["a"]),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["b", "a"]

    async def test_ties_keep_store_order(self, store_factory, make_event, at):
        store = store_factory([
            make_event("y", created_at=at(10), leads_to=["x"]),
            make_event("x", created_at=at(10), leads_to=["y"]),
            make_event("early", created_at=at(9)),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["early", "y", "x"]

    async def test_missing_and_unreadable_timestamps_sort_first(self, store_factory, make_event, at):
        store = store_factory([
            make_event("dated", created_at=at(10), leads_to=["missing"]),
            make_event("missing", created_at=None, leads_to=["garbled"]),
            make_event("garbled", created_at="not a date", leads_to=["dated"]),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["missing", "garbled", "dated"]

    async def test_earliest_representable_timestamp(self, store_factory, make_event, at):
        store = store_factory([
            make_event("b", created_at=at(10), leads_to=["a"]),
            make_event("a", created_at=datetime(1, 1, 1), leads_to=["b"]),
            make_event("c", created_at=None, leads_to=["a"]),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["a", "c", "b"]

    async def test_mixed_timezone_awareness(self, store_factory, make_event):
        store = store_factory([
            make_event("late", created_at=datetime(2030, 1, 1, tzinfo=timezone.utc), leads_to=["early"]),
            make_event("early", created_at=datetime(2020, 1, 1), leads_to=["late"]),
        ])

        assert ids(await TrailResolver(store).get_trail("session-1")) == ["early", "late"]


# ============================================================================
# Pure Ordering Helpers
# ============================================================================


class TestOrderingHelpers:

    def test_order_by_relationships_reports_partial_result(self, make_event):
        events = [
            NarrativeEvent.from_entity(make_event("a", leads_to=["b"])),
            NarrativeEvent.from_entity(make_event("b", leads_to=["c"])),
            NarrativeEvent.from_entity(make_event("c", leads_to=["b"])),
        ]

        assert ids(order_by_relationships(events)) == ["a"]

    def test_duplicate_links_still_resolve(self, make_event):
        events = [
            NarrativeEvent.from_entity(make_event("b")),
            NarrativeEvent.from_entity(make_event("a", leads_to=["b", "b"])),
        ]

        assert ids(order_by_relationships(events)) == ["a", "b"]

    def test_order_by_creation_is_stable(self, make_event, at):
        events = [
            NarrativeEvent.from_entity(make_event("p", created_at=at(10))),
            NarrativeEvent.from_entity(make_event("q", created_at=at(8))),
            NarrativeEvent.from_entity(make_event("r", created_at=at(10))),
        ]

        assert ids(order_by_creation(events)) == ["q", "p", "r"]

    def test_inputs_are_not_mutated(self, make_event, at):
        events = [
            NarrativeEvent.from_entity(make_event("b", created_at=at(10))),
            NarrativeEvent.from_entity(make_event("a", created_at=at(9))),
        ]
        snapshot = list(events)

        order_by_creation(events)
        order_by_relationships(events)

        assert events == snapshot
