"""Snapshot construction from raw lifecycle events.

This module derives the per-service subscription state a raw event leads
to. Combined events call it once per constituent service.
"""

from __future__ import annotations

from core.types import RawEvent, Snapshot


def build_snapshot(event: RawEvent, currency: str, service_name: str | None = None) -> Snapshot:
    """Build the snapshot an event transitions into.

    Args:
        event: Raw lifecycle event.
        currency: Account currency.
        service_name: Target service; defaults to the event's own service.

    Returns:
        Immutable snapshot tagged with the target service.
    """
    # Blocked billing/entitlement flags are not recorded; the state name carries them.
    return Snapshot(
        plan=event.next_plan,
        phase=event.next_phase,
        price_list=event.next_price_list,
        currency=currency,
        effective_date=event.effective_date,
        service=service_name or event.service_name,
        state_name=event.service_state_name,
    )
