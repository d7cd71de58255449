"""Unit tests for account-level bundle aggregation."""

from __future__ import annotations

import pytest

from analytics.bundle_aggregator import build_account_transitions
from core.errors import AuditLookupError, NotFoundError
from core.types import Bundle, ReportGroup, SubscriptionEventType
from tests.source_fakes import FakeSource, at, make_event, usd_account


def _bundle(bundle_id: str, *event_ids: str) -> Bundle:
    events = tuple(
        make_event(event_id, at(index + 1, 1), "entitlement-service", SubscriptionEventType.CHANGE)
        for index, event_id in enumerate(event_ids)
    )
    return Bundle(bundle_id=bundle_id, external_key=f"{bundle_id}-key", events=events)


def test_concatenates_bundles_in_source_order() -> None:
    """Transitions of every bundle should be returned, bundle by bundle."""
    source = FakeSource(
        usd_account(),
        [_bundle("bundle-1", "e1", "e2"), _bundle("bundle-2", "e3")],
        report_group=ReportGroup.PARTNER,
    )

    transitions = build_account_transitions("acct-1", source, 3, 4)

    assert [item.bundle_id for item in transitions] == ["bundle-1", "bundle-1", "bundle-2"]
    assert all(item.report_group is ReportGroup.PARTNER for item in transitions)
    assert all((item.account_record_id, item.tenant_record_id) == (3, 4) for item in transitions)


def test_per_service_state_does_not_cross_bundles() -> None:
    """Each bundle should start with fresh per-service state."""
    source = FakeSource(usd_account(), [_bundle("bundle-1", "e1"), _bundle("bundle-2", "e2")])

    transitions = build_account_transitions("acct-1", source)

    assert all(item.prev_snapshot is None for item in transitions)
    assert all(item.next_end_date is None for item in transitions)


def test_unknown_account_raises_not_found() -> None:
    """Unknown accounts should abort with NotFoundError."""
    source = FakeSource(usd_account(), [])

    with pytest.raises(NotFoundError):
        build_account_transitions("acct-missing", source)


def test_failure_in_later_bundle_aborts_account() -> None:
    """A failing bundle should abort the account with no partial result."""
    source = FakeSource(
        usd_account(),
        [_bundle("bundle-1", "e1"), _bundle("bundle-2", "e2")],
        missing_audit=frozenset({"e2"}),
    )

    with pytest.raises(AuditLookupError):
        build_account_transitions("acct-1", source)
