"""Public SDK surface for Subtrack.

This module provides a stable import path for SDK users.
It re-exports the client, the builder entry points, and typed models.
"""

from __future__ import annotations

from analytics.bundle_aggregator import build_account_transitions
from analytics.client import SubtrackClient
from analytics.transition_payload import transition_to_payload, transitions_to_json_lines
from core.config import SubtrackConfig
from core.currency import CurrencyConverter
from core.ports import SubscriptionSource
from core.types import (
    Account,
    AuditLog,
    Bundle,
    RawEvent,
    ReportGroup,
    Snapshot,
    Transition,
)
from ingest.account_dump import AccountDumpSource
from transforms.end_date_backfill import backfill_end_dates
from transforms.transition_stream import (
    BundleContext,
    build_and_backfill_bundle,
    build_bundle_transitions,
)

__all__ = [
    "Account",
    "AccountDumpSource",
    "AuditLog",
    "Bundle",
    "BundleContext",
    "CurrencyConverter",
    "RawEvent",
    "ReportGroup",
    "Snapshot",
    "SubscriptionSource",
    "SubtrackClient",
    "SubtrackConfig",
    "Transition",
    "backfill_end_dates",
    "build_account_transitions",
    "build_and_backfill_bundle",
    "build_bundle_transitions",
    "transition_to_payload",
    "transitions_to_json_lines",
]
