"""In-memory subscription source and event builders for tests."""

from __future__ import annotations

from datetime import datetime, timezone

from core.currency import CurrencyConverter
from core.errors import AuditLookupError, NotFoundError
from core.types import (
    Account,
    AuditLog,
    Bundle,
    ObjectType,
    ProductCategory,
    RawEvent,
    ReportGroup,
    SubscriptionEventType,
)

CREATED_AT = datetime(2023, 12, 31, tzinfo=timezone.utc)


def at(month: int, day: int) -> datetime:
    """Return a UTC timestamp in 2024."""
    return datetime(2024, month, day, tzinfo=timezone.utc)


def make_event(
    event_id: str,
    effective_date: datetime,
    service_name: str,
    event_type: SubscriptionEventType = SubscriptionEventType.CHANGE,
    plan: str | None = "gold-monthly",
    phase: str | None = "gold-monthly-evergreen",
    state: str = "ACTIVE",
) -> RawEvent:
    return RawEvent(
        event_id=event_id,
        subscription_id="sub-1",
        event_type=event_type,
        product_category=ProductCategory.BASE,
        effective_date=effective_date,
        service_name=service_name,
        next_plan=plan,
        next_phase=phase,
        next_price_list="DEFAULT",
        service_state_name=state,
    )


class FakeSource:
    """Subscription source backed by in-memory accounts and bundles."""

    def __init__(
        self,
        account: Account,
        bundles: list[Bundle],
        converter: CurrencyConverter | None = None,
        report_group: ReportGroup | None = None,
        missing_audit: frozenset[str] = frozenset(),
    ) -> None:
        self.account = account
        self.bundles = bundles
        self.converter = converter or CurrencyConverter(reference_currency="USD")
        self.report_group = report_group
        self.missing_audit = missing_audit
        self.audit_lookups: list[tuple[str, ObjectType]] = []

    def resolve_account(self, account_id: str) -> Account:
        if account_id != self.account.account_id:
            raise NotFoundError(f"Account {account_id} not found")
        return self.account

    def resolve_report_group(self, account_id: str) -> ReportGroup | None:
        return self.report_group

    def resolve_currency_converter(self) -> CurrencyConverter:
        return self.converter

    def list_bundles(self, account_id: str) -> list[Bundle]:
        return self.bundles

    def resolve_event_record_id(
        self, account_id: str, event_id: str, object_type: ObjectType
    ) -> int:
        self._check(account_id, event_id)
        return 1000 + sum(ord(char) for char in event_id)

    def resolve_creation_audit_log(
        self, account_id: str, event_id: str, object_type: ObjectType
    ) -> AuditLog:
        self._check(account_id, event_id)
        self.audit_lookups.append((event_id, object_type))
        return AuditLog(
            changed_by="admin",
            reason_code=None,
            comments=f"created {event_id}",
            created_date=CREATED_AT,
        )

    def _check(self, account_id: str, event_id: str) -> None:
        if account_id != self.account.account_id or event_id in self.missing_audit:
            raise AuditLookupError(f"No audit data for {event_id}")


def usd_account(account_id: str = "acct-1", currency: str | None = "USD") -> Account:
    return Account(account_id=account_id, external_key=f"{account_id}-key", currency=currency)
