"""Business event classification.

This module labels a raw lifecycle event with the business event name
reported alongside its transitions, e.g. ``START_ENTITLEMENT_BASE``.
"""

from __future__ import annotations

from core.types import RawEvent


def classify_business_event(event: RawEvent) -> str:
    """Return the business event label for a raw event.

    Args:
        event: Raw lifecycle event.

    Returns:
        Label combining event type and product category.
    """
    return f"{event.event_type.value}_{event.product_category.value}"
