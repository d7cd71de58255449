"""End-date backfill for transition streams.

Each transition ends when the next transition of the same service starts.
The global stream interleaves services but keeps each service's relative
order, so one pass with an index cursor per service is enough.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.types import Transition


def backfill_end_dates(
    transitions: Sequence[Transition],
    buffers_by_service: Mapping[str, Sequence[Transition]] | None = None,
) -> None:
    """Set ``next_end_date`` on transitions in place.

    The last transition of each service keeps an unset end date; it is
    resolved later from catalog phase data.

    Args:
        transitions: Global transition stream in emission order.
        buffers_by_service: Per-service transitions in emission order.
            Derived from ``transitions`` when omitted.

    Raises:
        TransitionStateError: If a transition already has an end date, for
            example when the same stream is backfilled twice.
    """
    buffers = buffers_by_service
    if buffers is None:
        buffers = group_by_service(transitions)
    # Index of the transition whose start date ends the next visited one.
    cursors: dict[str, int] = {}
    for transition in transitions:
        service = transition.next_service
        buffer = buffers[service]
        cursor = cursors.get(service, 1)
        if cursor < len(buffer):
            transition.set_next_end_date(buffer[cursor].next_start_date)
        cursors[service] = cursor + 1


def group_by_service(transitions: Sequence[Transition]) -> dict[str, list[Transition]]:
    """Group transitions by target service, preserving emission order."""
    buffers: dict[str, list[Transition]] = {}
    for transition in transitions:
        buffers.setdefault(transition.next_service, []).append(transition)
    return buffers
