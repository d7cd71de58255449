"""Per-bundle transition stream construction.

This module turns one bundle's ordered raw events into business
subscription transitions. Combined entitlement+billing events are
demultiplexed into one transition per constituent service, and each
transition is paired with the previous snapshot of its own service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.constants import COMBINED_SERVICE_CONSTITUENTS, ENTITLEMENT_BILLING_SERVICE_NAME
from core.currency import CurrencyConverter
from core.errors import ResolutionError
from core.logging_config import get_logger
from core.ports import SubscriptionSource
from core.types import Account, Bundle, RawEvent, ReportGroup, Snapshot, Transition
from transforms.business_event import classify_business_event
from transforms.end_date_backfill import backfill_end_dates
from transforms.snapshot_builder import build_snapshot

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class BundleContext:
    """Account-level values stamped on every transition of a bundle."""

    account: Account
    bundle: Bundle
    currency_converter: CurrencyConverter
    account_record_id: int
    tenant_record_id: int
    report_group: ReportGroup | None = None


class TransitionStreamBuilder:
    """Stateful builder for one bundle's transition stream.

    Each ``build`` call starts from empty per-service maps, so output
    from an earlier call never leaks into the next one.
    """

    def __init__(self, context: BundleContext, source: SubscriptionSource) -> None:
        self._context = context
        self._source = source
        self._currency = _resolve_account_currency(context.account, context.currency_converter)
        self._reset()

    @property
    def buffers_by_service(self) -> dict[str, list[Transition]]:
        return self._buffers_by_service

    def build(self, events: Sequence[RawEvent]) -> list[Transition]:
        """Emit transitions for ordered raw events.

        Args:
            events: Bundle timeline in upstream order.

        Returns:
            Transitions in emission order.

        Raises:
            AuditLookupError: If an event has no record id or audit log.
        """
        self._reset()
        for event in events:
            for service_name in target_services(event):
                self._emit(event, service_name)
        return self._transitions

    def _reset(self) -> None:
        self._transitions: list[Transition] = []
        self._previous_by_service: dict[str, Snapshot] = {}
        self._buffers_by_service: dict[str, list[Transition]] = {}

    def _emit(self, event: RawEvent, service_name: str) -> None:
        next_snapshot = build_snapshot(event, self._currency, service_name)
        transition = self._create_transition(
            event, self._previous_by_service.get(service_name), next_snapshot
        )
        self._transitions.append(transition)
        self._buffers_by_service.setdefault(service_name, []).append(transition)
        self._previous_by_service[service_name] = next_snapshot

    def _create_transition(
        self,
        event: RawEvent,
        prev_snapshot: Snapshot | None,
        next_snapshot: Snapshot,
    ) -> Transition:
        context = self._context
        account_id = context.account.account_id
        object_type = event.event_type.object_type
        record_id = self._source.resolve_event_record_id(account_id, event.event_id, object_type)
        audit_log = self._source.resolve_creation_audit_log(
            account_id, event.event_id, object_type
        )
        return Transition(
            account_id=account_id,
            account_record_id=context.account_record_id,
            tenant_record_id=context.tenant_record_id,
            bundle_id=context.bundle.bundle_id,
            bundle_external_key=context.bundle.external_key,
            subscription_id=event.subscription_id,
            event_id=event.event_id,
            subscription_event_record_id=record_id,
            business_event=classify_business_event(event),
            prev_snapshot=prev_snapshot,
            next_snapshot=next_snapshot,
            next_start_date=next_snapshot.effective_date,
            converted_currency=context.currency_converter.reference_currency,
            created_by=audit_log.changed_by,
            created_reason_code=audit_log.reason_code,
            created_comments=audit_log.comments,
            report_group=context.report_group,
        )


def target_services(event: RawEvent) -> tuple[str, ...]:
    """Return the services an event produces transitions for, in emission order."""
    if event.service_name == ENTITLEMENT_BILLING_SERVICE_NAME:
        return COMBINED_SERVICE_CONSTITUENTS
    return (event.service_name,)


def build_bundle_transitions(
    context: BundleContext,
    events: Sequence[RawEvent],
    source: SubscriptionSource,
) -> list[Transition]:
    """Build transitions for a bundle without backfilling end dates.

    Args:
        context: Account and bundle values for the transitions.
        events: Ordered raw events of the bundle.
        source: Collaborator used for record-id and audit lookups.

    Returns:
        Transitions in emission order with unset end dates.

    Raises:
        ResolutionError: If the account currency cannot be resolved.
        AuditLookupError: If audit data for an event is missing.
    """
    return TransitionStreamBuilder(context, source).build(events)


def build_and_backfill_bundle(
    context: BundleContext,
    events: Sequence[RawEvent],
    source: SubscriptionSource,
) -> list[Transition]:
    """Build a bundle's transitions and backfill their end dates.

    Args:
        context: Account and bundle values for the transitions.
        events: Ordered raw events of the bundle.
        source: Collaborator used for record-id and audit lookups.

    Returns:
        Backfilled transitions in emission order.
    """
    builder = TransitionStreamBuilder(context, source)
    transitions = builder.build(events)
    backfill_end_dates(transitions, builder.buffers_by_service)
    _LOGGER.info(
        "bundle_transitions_built",
        account_id=context.account.account_id,
        bundle_id=context.bundle.bundle_id,
        event_count=len(events),
        transition_count=len(transitions),
        services=sorted(builder.buffers_by_service),
    )
    return transitions


def _resolve_account_currency(account: Account, converter: CurrencyConverter) -> str:
    """Return the account currency after checking the converter supports it."""
    if not account.currency:
        raise ResolutionError(
            f"Account {account.account_id} has no currency. "
            "Set the account currency before building transitions."
        )
    if not converter.supports(account.currency):
        raise ResolutionError(
            f"Account {account.account_id} currency {account.currency} has no rate into "
            f"{converter.reference_currency}. Add the rate to the currency table."
        )
    return account.currency
