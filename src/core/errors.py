"""Subtrack exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Collaborator failures propagate unchanged to the aggregator caller.
"""

from __future__ import annotations


class SubtrackError(Exception):
    """Base exception for all Subtrack failures."""


class SubtrackConfigError(SubtrackError):
    """Raised for invalid runtime configuration."""


class SubtrackInputError(SubtrackError):
    """Raised for unreadable or malformed account dumps."""


class SubtrackDependencyError(SubtrackError):
    """Raised when an optional runtime dependency is missing."""


class NotFoundError(SubtrackError):
    """Raised when an account or bundle is unknown to the source."""


class ResolutionError(SubtrackError):
    """Raised when currency, report group, or collaborator data cannot be resolved."""


class AuditLookupError(ResolutionError):
    """Raised when an event has no record id or creation audit log."""


class TransitionStateError(SubtrackError):
    """Raised when a transition end date is assigned more than once."""
