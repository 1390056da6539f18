"""
Campaign Trail MCP Server
Exposes session trails and narrative summaries as FastMCP tools.
"""

import logging
from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from .config import load_settings
from .exceptions import CampaignTrailError
from .models import NarrativeEvent
from .narrative_events import NarrativeEventService
from .storage import InMemoryEntityStore
from .trail import EMPTY_TRAIL_SUMMARY, SummaryComposer, TrailResolver, format_outcome

logger = logging.getLogger("campaign-trail")

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    )

logger.debug(f"📂 Data path: {settings.data_dir}")

store = InMemoryEntityStore()
if settings.entities_path.exists():
    store.load(settings.entities_path)
else:
    logger.warning(f"⚠️ No entity snapshot at {settings.entities_path}, starting empty")

resolver = TrailResolver(store)
composer = SummaryComposer(resolver)
narrative_events = NarrativeEventService(store)

mcp = FastMCP(
    name="campaign-trail"
)

logger.debug("✅ Server initialized, registering tools")


def format_trail(events: list[NarrativeEvent]) -> str:
    """Numbered, one-line-per-event listing of a trail."""
    if not events:
        return EMPTY_TRAIL_SUMMARY
    lines = []
    for i, event in enumerate(events, start=1):
        line = f"{i}. [{event.event_type.value}] {event.name} ({event.id})"
        if event.outcome:
            line += f" - Outcome: {format_outcome(event.outcome)}"
        lines.append(line)
    return "\n".join(lines)


# ----------------------------------------------------------------------
# Tools
# ----------------------------------------------------------------------

@mcp.tool
async def get_session_trail(
    session_id: Annotated[str, Field(description="ID of the session whose narrative events to order")],
) -> str:
    """Get the ordered trail of narrative events for a session.

    Events follow their leads_to links; if the links form a cycle they are
    listed in creation order instead.
    """
    try:
        events = await resolver.get_trail(session_id)
    except CampaignTrailError as e:
        return f"❌ {e}"
    except Exception as e:
        logger.error(f"❌ Error getting trail for session '{session_id}': {e}")
        raise
    return format_trail(events)


@mcp.tool
async def summarize_session_trail(
    session_id: Annotated[str, Field(description="ID of the session to summarize")],
) -> str:
    """Generate a prose summary of a session from its trail of narrative events."""
    try:
        return await composer.generate_summary(session_id)
    except CampaignTrailError as e:
        return f"❌ {e}"
    except Exception as e:
        logger.error(f"❌ Error summarizing session '{session_id}': {e}")
        raise


@mcp.tool
async def link_narrative_events(
    from_id: Annotated[str, Field(description="ID of the earlier narrative event")],
    to_id: Annotated[str, Field(description="ID of the later narrative event")],
) -> str:
    """Record that one narrative event leads to another."""
    try:
        await narrative_events.link_events(from_id, to_id)
        store.save(settings.entities_path)
    except CampaignTrailError as e:
        return f"❌ {e}"
    except Exception as e:
        logger.error(f"❌ Error linking '{from_id}' to '{to_id}': {e}")
        raise
    return f"🔗 '{from_id}' now leads to '{to_id}'"


def main() -> None:
    """Main entry point for the Campaign Trail MCP Server."""
    mcp.run()

if __name__ == "__main__":
    main()
