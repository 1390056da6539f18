"""
Campaign Trail - session trail reconstruction and narrative summaries for
tabletop campaign records.
"""

from .models import *
from .exceptions import *
from .storage import EntityStore, InMemoryEntityStore
from .trail import TrailResolver, SummaryComposer, get_trail, generate_summary

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("campaign-trail")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "TrailResolver",
    "SummaryComposer",
    "get_trail",
    "generate_summary",
]
