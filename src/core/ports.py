"""Port definitions for collaborator dependencies.

Responsibilities:
  - Define the lookups the transition builder needs from the outside.
Must not:
  - Implement logic; interfaces only.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from core.currency import CurrencyConverter
from core.types import Account, AuditLog, Bundle, ObjectType, ReportGroup


class SubscriptionSource(Protocol):
    def resolve_account(self, account_id: str) -> Account:
        ...

    def resolve_report_group(self, account_id: str) -> ReportGroup | None:
        ...

    def resolve_currency_converter(self) -> CurrencyConverter:
        ...

    def list_bundles(self, account_id: str) -> Sequence[Bundle]:
        ...

    def resolve_event_record_id(
        self, account_id: str, event_id: str, object_type: ObjectType
    ) -> int:
        ...

    def resolve_creation_audit_log(
        self, account_id: str, event_id: str, object_type: ObjectType
    ) -> AuditLog:
        ...
