"""Unit tests for per-bundle transition stream construction."""

from __future__ import annotations

import pytest

from core.currency import CurrencyConverter
from core.errors import AuditLookupError, ResolutionError
from core.types import Bundle, ObjectType, RawEvent, SubscriptionEventType
from tests.source_fakes import FakeSource, at, make_event, usd_account
from transforms.transition_stream import (
    BundleContext,
    TransitionStreamBuilder,
    build_and_backfill_bundle,
    build_bundle_transitions,
)

ENTITLEMENT = "entitlement-service"
BILLING = "billing-service"
COMBINED = "entitlement+billing-service"


def _context(source: FakeSource, events: list[RawEvent]) -> BundleContext:
    bundle = Bundle(bundle_id="bundle-1", external_key="main", events=tuple(events))
    return BundleContext(
        account=source.account,
        bundle=bundle,
        currency_converter=source.converter,
        account_record_id=5,
        tenant_record_id=9,
    )


def _build(events: list[RawEvent], source: FakeSource | None = None):
    fake = source or FakeSource(usd_account(), [])
    return build_and_backfill_bundle(_context(fake, events), events, fake)


def test_plain_event_yields_one_transition_for_its_service() -> None:
    """A non-combined event should produce exactly one transition."""
    transitions = _build([make_event("evt-1", at(1, 1), BILLING)])

    assert [item.next_service for item in transitions] == [BILLING]


def test_combined_event_yields_entitlement_then_billing() -> None:
    """A combined event should demultiplex into two creation transitions."""
    transitions = _build(
        [make_event("evt-1", at(1, 1), COMBINED, SubscriptionEventType.START_ENTITLEMENT)]
    )

    assert [item.next_service for item in transitions] == [ENTITLEMENT, BILLING]
    assert all(item.event_id == "evt-1" for item in transitions)
    assert all(item.next_start_date == at(1, 1) for item in transitions)
    assert all(item.prev_snapshot is None for item in transitions)
    assert all(item.next_end_date is None for item in transitions)


def test_create_then_change_links_snapshots_and_end_date() -> None:
    """Two entitlement events should chain prev snapshot and end date."""
    transitions = _build(
        [
            make_event("evt-1", at(1, 1), ENTITLEMENT, SubscriptionEventType.START_ENTITLEMENT),
            make_event("evt-2", at(2, 1), ENTITLEMENT, plan="platinum-monthly"),
        ]
    )

    first, second = transitions
    assert first.prev_snapshot is None and first.next_end_date == at(2, 1)
    assert second.prev_snapshot == first.next_snapshot and second.next_end_date is None


def test_combined_then_entitlement_only_backfills_per_service() -> None:
    """Entitlement-only follow-ups should not close the billing transition."""
    transitions = _build(
        [
            make_event("evt-1", at(1, 1), COMBINED, SubscriptionEventType.START_ENTITLEMENT),
            make_event("evt-2", at(2, 1), ENTITLEMENT, SubscriptionEventType.PAUSE_ENTITLEMENT),
        ]
    )

    entitlement = [item for item in transitions if item.next_service == ENTITLEMENT]
    billing = [item for item in transitions if item.next_service == BILLING]
    assert len(entitlement) == 2 and entitlement[0].next_end_date == at(2, 1)
    assert len(billing) == 1 and billing[0].next_end_date is None


def test_transitions_carry_account_audit_and_business_event() -> None:
    """Transitions should be stamped with account, audit, and event metadata."""
    source = FakeSource(usd_account(), [])
    transitions = _build(
        [make_event("evt-1", at(1, 1), ENTITLEMENT, SubscriptionEventType.START_ENTITLEMENT)],
        source,
    )

    transition = transitions[0]
    assert (transition.account_record_id, transition.tenant_record_id) == (5, 9)
    assert transition.business_event == "START_ENTITLEMENT_BASE"
    assert transition.created_comments == "created evt-1"
    assert transition.converted_currency == "USD"
    assert source.audit_lookups == [("evt-1", ObjectType.SUBSCRIPTION_EVENT)]


def test_blocking_events_are_audited_as_blocking_states() -> None:
    """Audit lookups should use the event type's object type."""
    source = FakeSource(usd_account(), [])
    _build(
        [make_event("evt-1", at(1, 1), ENTITLEMENT, SubscriptionEventType.PAUSE_ENTITLEMENT)],
        source,
    )

    assert source.audit_lookups == [("evt-1", ObjectType.BLOCKING_STATES)]


def test_rebuilding_identical_events_is_value_equal() -> None:
    """Re-running the builder on the same input should give equal output."""
    events = [
        make_event("evt-1", at(1, 1), COMBINED, SubscriptionEventType.START_ENTITLEMENT),
        make_event("evt-2", at(1, 31), BILLING, SubscriptionEventType.PHASE),
        make_event("evt-3", at(2, 15), COMBINED),
    ]

    assert _build(events) == _build(events)


def test_build_without_backfill_leaves_end_dates_unset() -> None:
    """The first pass alone should not assign end dates."""
    events = [
        make_event("evt-1", at(1, 1), ENTITLEMENT),
        make_event("evt-2", at(2, 1), ENTITLEMENT),
    ]
    source = FakeSource(usd_account(), [])

    transitions = build_bundle_transitions(_context(source, events), events, source)

    assert [item.next_end_date for item in transitions] == [None, None]


def test_missing_audit_aborts_bundle() -> None:
    """A missing audit entry should raise instead of dropping the transition."""
    source = FakeSource(usd_account(), [], missing_audit=frozenset({"evt-2"}))
    events = [make_event("evt-1", at(1, 1), ENTITLEMENT), make_event("evt-2", at(2, 1), BILLING)]

    with pytest.raises(AuditLookupError):
        _build(events, source)


def test_account_without_currency_fails_resolution() -> None:
    """An account with no currency should fail before emitting transitions."""
    source = FakeSource(usd_account(currency=None), [])

    with pytest.raises(ResolutionError):
        _build([make_event("evt-1", at(1, 1), ENTITLEMENT)], source)


def test_unsupported_account_currency_fails_resolution() -> None:
    """An account currency missing from the rate table should fail."""
    converter = CurrencyConverter(reference_currency="USD", rates={"EUR": 1.08})
    source = FakeSource(usd_account(currency="GBP"), [], converter=converter)

    with pytest.raises(ResolutionError):
        _build([make_event("evt-1", at(1, 1), ENTITLEMENT)], source)


def test_each_build_starts_from_empty_service_maps() -> None:
    """A second build on one builder should not see the first build's snapshots."""
    source = FakeSource(usd_account(), [])
    first_events = [make_event("evt-1", at(1, 1), COMBINED)]
    second_events = [make_event("evt-2", at(2, 1), ENTITLEMENT)]
    builder = TransitionStreamBuilder(_context(source, first_events), source)

    builder.build(first_events)
    transitions = builder.build(second_events)

    assert [item.event_id for item in transitions] == ["evt-2"]
    assert transitions[0].prev_snapshot is None
    assert builder.buffers_by_service == {ENTITLEMENT: transitions}
