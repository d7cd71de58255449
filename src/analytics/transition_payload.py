"""JSON serialization for Transition payloads.

This module renders transitions as JSON-safe dictionaries and lines for
CLI output. Unset end dates and creation snapshots render as null.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Iterable

from core.types import Snapshot, Transition


def transition_to_payload(transition: Transition) -> dict[str, object]:
    """Serialize a Transition into a JSON-safe payload.

    Args:
        transition: Transition instance.

    Returns:
        Dictionary payload for JSON encoding.
    """
    report_group = transition.report_group
    return {
        "account_id": transition.account_id,
        "account_record_id": transition.account_record_id,
        "tenant_record_id": transition.tenant_record_id,
        "bundle_id": transition.bundle_id,
        "bundle_external_key": transition.bundle_external_key,
        "subscription_id": transition.subscription_id,
        "event_id": transition.event_id,
        "subscription_event_record_id": transition.subscription_event_record_id,
        "business_event": transition.business_event,
        "next_service": transition.next_service,
        "prev": snapshot_to_payload(transition.prev_snapshot),
        "next": snapshot_to_payload(transition.next_snapshot),
        "next_start_date": _format_datetime(transition.next_start_date),
        "next_end_date": _format_datetime(transition.next_end_date),
        "converted_currency": transition.converted_currency,
        "report_group": report_group.value if report_group is not None else None,
        "created_by": transition.created_by,
        "created_reason_code": transition.created_reason_code,
        "created_comments": transition.created_comments,
    }


def snapshot_to_payload(snapshot: Snapshot | None) -> dict[str, object] | None:
    if snapshot is None:
        return None
    return {
        "plan": snapshot.plan,
        "phase": snapshot.phase,
        "price_list": snapshot.price_list,
        "currency": snapshot.currency,
        "effective_date": _format_datetime(snapshot.effective_date),
        "service": snapshot.service,
        "state_name": snapshot.state_name,
    }


def transitions_to_json_lines(transitions: Iterable[Transition]) -> list[str]:
    """Render transitions as sorted-key JSON lines."""
    return [json.dumps(transition_to_payload(item), sort_keys=True) for item in transitions]


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
