"""Shared typed models.

This module defines the raw lifecycle event, snapshot, and transition
models exchanged between the source, transform, and analytics layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from core.errors import TransitionStateError


class ObjectType(Enum):
    """Object type under which event record ids and audit logs are stored."""

    SUBSCRIPTION_EVENT = "SUBSCRIPTION_EVENT"
    BLOCKING_STATES = "BLOCKING_STATES"


class SubscriptionEventType(Enum):
    START_ENTITLEMENT = "START_ENTITLEMENT"
    START_BILLING = "START_BILLING"
    PAUSE_ENTITLEMENT = "PAUSE_ENTITLEMENT"
    PAUSE_BILLING = "PAUSE_BILLING"
    RESUME_ENTITLEMENT = "RESUME_ENTITLEMENT"
    RESUME_BILLING = "RESUME_BILLING"
    PHASE = "PHASE"
    CHANGE = "CHANGE"
    STOP_ENTITLEMENT = "STOP_ENTITLEMENT"
    STOP_BILLING = "STOP_BILLING"
    SERVICE_STATE_CHANGE = "SERVICE_STATE_CHANGE"

    @property
    def object_type(self) -> ObjectType:
        if self in _BLOCKING_STATE_EVENT_TYPES:
            return ObjectType.BLOCKING_STATES
        return ObjectType.SUBSCRIPTION_EVENT


_BLOCKING_STATE_EVENT_TYPES = frozenset(
    {
        SubscriptionEventType.PAUSE_ENTITLEMENT,
        SubscriptionEventType.PAUSE_BILLING,
        SubscriptionEventType.RESUME_ENTITLEMENT,
        SubscriptionEventType.RESUME_BILLING,
        SubscriptionEventType.SERVICE_STATE_CHANGE,
    }
)


class ProductCategory(Enum):
    BASE = "BASE"
    ADD_ON = "ADD_ON"
    STANDALONE = "STANDALONE"


class ReportGroup(Enum):
    """Reporting bucket used to exclude test and partner accounts."""

    TEST = "test"
    PARTNER = "partner"


@dataclass(frozen=True)
class Account:
    """Resolved account owning the bundles.

    Attributes:
        account_id: Account identifier.
        external_key: Customer-facing account key.
        currency: Account currency, None when never set.
        tags: Control tag names attached to the account.
    """

    account_id: str
    external_key: str
    currency: str | None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class RawEvent:
    """Immutable subscription lifecycle event from a bundle timeline.

    Attributes:
        event_id: Event identifier used for record-id and audit lookups.
        subscription_id: Subscription the event belongs to.
        event_type: Lifecycle event kind.
        product_category: Category of the product the event applies to.
        effective_date: Timezone-aware effective timestamp.
        service_name: Logical service, possibly the combined service.
        next_plan: Plan in effect after the event, if any.
        next_phase: Phase in effect after the event, if any.
        next_price_list: Price list in effect after the event, if any.
        service_state_name: Service state name after the event.
    """

    event_id: str
    subscription_id: str
    event_type: SubscriptionEventType
    product_category: ProductCategory
    effective_date: datetime
    service_name: str
    next_plan: str | None
    next_phase: str | None
    next_price_list: str | None
    service_state_name: str


@dataclass(frozen=True)
class Bundle:
    """Group of subscriptions sharing one lifecycle timeline."""

    bundle_id: str
    external_key: str
    events: tuple[RawEvent, ...] = ()

    def timeline(self) -> tuple[RawEvent, ...]:
        """Return raw events in upstream chronological order."""
        return self.events


@dataclass(frozen=True)
class AuditLog:
    """Creation audit entry for one event."""

    changed_by: str
    reason_code: str | None
    comments: str | None
    created_date: datetime


@dataclass(frozen=True)
class Snapshot:
    """Subscription state for one service at one point in time."""

    plan: str | None
    phase: str | None
    price_list: str | None
    currency: str
    effective_date: datetime
    service: str
    state_name: str


@dataclass
class Transition:
    """Business subscription transition for one service.

    ``prev_snapshot`` is None exactly when this is the first transition
    recorded for its service. ``next_end_date`` is assigned at most once,
    by the end-date backfill pass; the last transition per service keeps
    it unset.
    """

    account_id: str
    account_record_id: int
    tenant_record_id: int
    bundle_id: str
    bundle_external_key: str
    subscription_id: str
    event_id: str
    subscription_event_record_id: int
    business_event: str
    prev_snapshot: Snapshot | None
    next_snapshot: Snapshot
    next_start_date: datetime
    converted_currency: str
    created_by: str
    created_reason_code: str | None
    created_comments: str | None
    report_group: ReportGroup | None = None
    next_end_date: datetime | None = field(default=None)

    @property
    def next_service(self) -> str:
        return self.next_snapshot.service

    @property
    def is_creation(self) -> bool:
        return self.prev_snapshot is None

    def set_next_end_date(self, end_date: datetime) -> None:
        """Assign the end date backfilled from the next transition.

        Raises:
            TransitionStateError: If an end date was already assigned.
        """
        if self.next_end_date is not None:
            raise TransitionStateError(
                f"Transition for event {self.event_id} on {self.next_service} "
                f"already ends at {self.next_end_date.isoformat()}; "
                "end dates may only be backfilled once."
            )
        self.next_end_date = end_date
