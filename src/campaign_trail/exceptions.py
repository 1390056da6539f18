"""
Exception hierarchy for campaign-trail.

Store failures are deliberately absent from this module: whatever the entity
store raises propagates to the caller unchanged.
"""

from __future__ import annotations

from typing import Any


class CampaignTrailError(Exception):
    """Base exception for all campaign-trail errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary of additional error context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(CampaignTrailError, ValueError):
    """A required argument was missing.

    Signals a programming defect in the caller. Raised before any I/O and
    never worth retrying.
    """
    pass


class EntityNotFoundError(CampaignTrailError):
    """An entity id did not resolve to a stored entity."""

    def __init__(self, message: str, entity_id: str, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.entity_id = entity_id


class EntityTypeError(CampaignTrailError):
    """An entity exists but has the wrong type for the requested operation."""

    def __init__(
        self,
        message: str,
        entity_id: str,
        expected_type: str,
        actual_type: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.entity_id = entity_id
        self.expected_type = expected_type
        self.actual_type = actual_type


class DuplicateLinkError(CampaignTrailError):
    """The source entity already links to the target entity."""
    pass


class SessionNotCompletedError(CampaignTrailError):
    """An encounter session was converted into a narrative event too early."""

    def __init__(self, message: str, status: str, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.status = status


__all__ = [
    "CampaignTrailError",
    "InvalidArgumentError",
    "EntityNotFoundError",
    "EntityTypeError",
    "DuplicateLinkError",
    "SessionNotCompletedError",
]
