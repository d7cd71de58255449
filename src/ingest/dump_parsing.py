"""Typed parsing for account dump payloads.

This module validates decoded YAML/JSON account dumps and converts them
into typed accounts, bundles, raw events, and audit entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Mapping, Sequence, TypeVar

from core.constants import DUMP_SCHEMA_VERSION
from core.errors import SubtrackInputError
from core.types import (
    Account,
    AuditLog,
    Bundle,
    ObjectType,
    ProductCategory,
    RawEvent,
    SubscriptionEventType,
)

_EnumT = TypeVar("_EnumT", bound=Enum)


@dataclass(frozen=True)
class AuditEntry:
    """Record id and creation audit log of one event.

    Attributes:
        record_id: Record id of the event under ``object_type``.
        object_type: Table the event is recorded in.
        audit_log: Creation audit log of the event.
    """

    record_id: int
    object_type: ObjectType
    audit_log: AuditLog


@dataclass(frozen=True)
class AccountDump:
    """Validated contents of one account dump file."""

    account: Account
    bundles: tuple[Bundle, ...]
    audit: Mapping[str, AuditEntry]


def parse_account_dump(payload: object, origin: str) -> AccountDump:
    """Validate a decoded dump payload.

    Args:
        payload: Decoded YAML or JSON document.
        origin: File path used in error messages.

    Returns:
        Parsed account dump.

    Raises:
        SubtrackInputError: If the payload does not match the dump schema.
    """
    root = expect_mapping(payload, f"account dump {origin}")
    _parse_version(root, origin)
    account = _parse_account(root.get("account"), origin)
    raw_bundles = root.get("bundles", [])
    bundles = tuple(
        _parse_bundle(bundle_value, f"{origin} bundle #{index + 1}")
        for index, bundle_value in enumerate(expect_sequence(raw_bundles, f"{origin} bundles"))
    )
    audit = _parse_audit(root.get("audit", {}), origin)
    return AccountDump(account=account, bundles=bundles, audit=audit)


def expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise SubtrackInputError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise SubtrackInputError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise SubtrackInputError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _parse_version(root: Mapping[str, object], origin: str) -> None:
    raw_version = root.get("version")
    if raw_version != DUMP_SCHEMA_VERSION:
        raise SubtrackInputError(
            f"Unsupported account dump version {raw_version!r} in {origin}. "
            f"Use version: {DUMP_SCHEMA_VERSION}."
        )


def _parse_account(value: object, origin: str) -> Account:
    context = f"{origin} account"
    mapping = expect_mapping(value, context)
    raw_tags = expect_sequence(mapping.get("tags", []), f"{context} tags")
    return Account(
        account_id=_required_string(mapping, "id", context),
        external_key=_optional_string(mapping, "external_key", context) or "",
        currency=_optional_string(mapping, "currency", context),
        tags=tuple(str(tag).upper() for tag in raw_tags),
    )


def _parse_bundle(value: object, context: str) -> Bundle:
    mapping = expect_mapping(value, context)
    raw_events = expect_sequence(mapping.get("events", []), f"{context} events")
    events = tuple(
        _parse_event(event_value, f"{context} event #{index + 1}")
        for index, event_value in enumerate(raw_events)
    )
    return Bundle(
        bundle_id=_required_string(mapping, "id", context),
        external_key=_optional_string(mapping, "external_key", context) or "",
        events=events,
    )


def _parse_event(value: object, context: str) -> RawEvent:
    mapping = expect_mapping(value, context)
    return RawEvent(
        event_id=_required_string(mapping, "id", context),
        subscription_id=_required_string(mapping, "subscription_id", context),
        event_type=_parse_enum(SubscriptionEventType, mapping, "type", context),
        product_category=_parse_enum(ProductCategory, mapping, "category", context),
        effective_date=_parse_datetime(mapping.get("effective_date"), f"{context} effective_date"),
        service_name=_required_string(mapping, "service", context),
        next_plan=_optional_string(mapping, "plan", context),
        next_phase=_optional_string(mapping, "phase", context),
        next_price_list=_optional_string(mapping, "price_list", context),
        service_state_name=_required_string(mapping, "state", context),
    )


def _parse_audit(value: object, origin: str) -> dict[str, AuditEntry]:
    audit_mapping = expect_mapping(value, f"{origin} audit")
    entries: dict[str, AuditEntry] = {}
    for event_id, entry_value in audit_mapping.items():
        context = f"{origin} audit entry {event_id}"
        mapping = expect_mapping(entry_value, context)
        record_id = mapping.get("record_id")
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            raise SubtrackInputError(f"Invalid {context}: field 'record_id' must be an integer.")
        entries[event_id] = AuditEntry(
            record_id=record_id,
            object_type=_parse_object_type(mapping, context),
            audit_log=AuditLog(
                changed_by=_required_string(mapping, "changed_by", context),
                reason_code=_optional_string(mapping, "reason_code", context),
                comments=_optional_string(mapping, "comments", context),
                created_date=_parse_datetime(
                    mapping.get("created_date"), f"{context} created_date"
                ),
            ),
        )
    return entries


def _parse_object_type(mapping: Mapping[str, object], context: str) -> ObjectType:
    if mapping.get("object_type") is None:
        return ObjectType.SUBSCRIPTION_EVENT
    return _parse_enum(ObjectType, mapping, "object_type", context)


def _parse_enum(
    enum_type: type[_EnumT],
    mapping: Mapping[str, object],
    key: str,
    context: str,
) -> _EnumT:
    raw_value = _required_string(mapping, key, context)
    try:
        return enum_type(raw_value.upper())
    except ValueError as error:
        supported_rows = ", ".join(member.value for member in enum_type)
        raise SubtrackInputError(
            f"Invalid {context}: unsupported {key} '{raw_value}'. Use one of: {supported_rows}."
        ) from error


def _parse_datetime(value: object, context: str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as error:
            raise SubtrackInputError(
                f"Invalid {context}: '{value}' is not an ISO-8601 timestamp."
            ) from error
    else:
        raise SubtrackInputError(f"Invalid {context}: expected ISO-8601 timestamp string.")
    if parsed.tzinfo is None:
        raise SubtrackInputError(
            f"Invalid {context}: timestamp must include a UTC offset, e.g. 2024-01-01T00:00:00Z."
        )
    return parsed


def _required_string(mapping: Mapping[str, object], key: str, context: str) -> str:
    value = mapping.get(key)
    if not isinstance(value, str) or not value.strip():
        raise SubtrackInputError(f"Invalid {context}: field '{key}' must be a non-empty string.")
    return value


def _optional_string(mapping: Mapping[str, object], key: str, context: str) -> str | None:
    value = mapping.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise SubtrackInputError(f"Invalid {context}: field '{key}' must be a string.")
    return value
