"""File-backed subscription source.

This module serves accounts, bundle timelines, and audit data from
YAML or JSON account dumps stored under ``<data_root>/accounts``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import cast

from core.config import SubtrackConfig, parse_currency_code
from core.constants import (
    ACCOUNTS_DIR_NAME,
    PARTNER_ACCOUNT_TAG,
    SUPPORTED_DUMP_EXTENSIONS,
    TEST_ACCOUNT_TAG,
)
from core.currency import CurrencyConverter
from core.errors import (
    AuditLookupError,
    NotFoundError,
    SubtrackConfigError,
    SubtrackDependencyError,
    SubtrackInputError,
)
from core.logging_config import get_logger
from core.types import Account, AuditLog, Bundle, ObjectType, ReportGroup
from ingest.dump_parsing import AccountDump, AuditEntry, expect_mapping, parse_account_dump

_LOGGER = get_logger(__name__)
CURRENCY_RATES_STEM = "currency_rates"


class AccountDumpSource:
    """Subscription source reading one dump file per account.

    Dumps are parsed once per source instance and cached.
    """

    def __init__(self, config: SubtrackConfig) -> None:
        self._config = config
        self._accounts_root = config.data_root / ACCOUNTS_DIR_NAME
        self._dumps: dict[str, AccountDump] = {}
        self._converter: CurrencyConverter | None = None

    def resolve_account(self, account_id: str) -> Account:
        return self._load_dump(account_id).account

    def resolve_report_group(self, account_id: str) -> ReportGroup | None:
        tags = self._load_dump(account_id).account.tags
        if TEST_ACCOUNT_TAG in tags:
            return ReportGroup.TEST
        if PARTNER_ACCOUNT_TAG in tags:
            return ReportGroup.PARTNER
        return None

    def resolve_currency_converter(self) -> CurrencyConverter:
        """Load the shared currency table, or an identity table when absent.

        Raises:
            SubtrackInputError: If the currency table is malformed.
        """
        if self._converter is None:
            self._converter = self._load_currency_converter()
        return self._converter

    def list_bundles(self, account_id: str) -> list[Bundle]:
        return list(self._load_dump(account_id).bundles)

    def resolve_event_record_id(
        self, account_id: str, event_id: str, object_type: ObjectType
    ) -> int:
        return self._audit_entry(account_id, event_id, object_type).record_id

    def resolve_creation_audit_log(
        self, account_id: str, event_id: str, object_type: ObjectType
    ) -> AuditLog:
        return self._audit_entry(account_id, event_id, object_type).audit_log

    def _audit_entry(
        self, account_id: str, event_id: str, object_type: ObjectType
    ) -> AuditEntry:
        """Find audit data in the dump of the account that owns the event."""
        entry = self._load_dump(account_id).audit.get(event_id)
        if entry is None or entry.object_type is not object_type:
            raise AuditLookupError(
                f"No audit data for {object_type.value} {event_id} in account {account_id}. "
                "Add a record_id and creation audit entry for this event to the account dump."
            )
        return entry

    def _load_dump(self, account_id: str) -> AccountDump:
        cached = self._dumps.get(account_id)
        if cached is not None:
            return cached
        dump_path = _find_data_file(self._accounts_root, account_id)
        if dump_path is None:
            raise NotFoundError(
                f"Account {account_id} not found under {self._accounts_root}. "
                f"Add {account_id}.yaml or {account_id}.json to the accounts directory."
            )
        dump = parse_account_dump(_read_payload(dump_path), str(dump_path))
        if dump.account.account_id != account_id:
            raise SubtrackInputError(
                f"Account dump {dump_path} describes account {dump.account.account_id}, "
                f"expected {account_id}. Rename the file or fix the account id."
            )
        self._dumps[account_id] = dump
        _LOGGER.info(
            "account_dump_loaded",
            account_id=account_id,
            path=str(dump_path),
            bundle_count=len(dump.bundles),
        )
        return dump

    def _load_currency_converter(self) -> CurrencyConverter:
        rates_path = _find_data_file(self._config.data_root, CURRENCY_RATES_STEM)
        if rates_path is None:
            return CurrencyConverter(reference_currency=self._config.reference_currency)
        context = f"currency table {rates_path}"
        mapping = expect_mapping(_read_payload(rates_path), context)
        reference_value = mapping.get("reference_currency", self._config.reference_currency)
        raw_rates = expect_mapping(mapping.get("rates", {}), f"{context} rates")
        try:
            reference_currency = parse_currency_code(str(reference_value))
            rates = {
                parse_currency_code(currency): _parse_rate(rate, f"{context} rate {currency}")
                for currency, rate in raw_rates.items()
            }
        except SubtrackConfigError as error:
            raise SubtrackInputError(f"Invalid {context}: {error}") from error
        return CurrencyConverter(reference_currency=reference_currency, rates=rates)


def _find_data_file(directory: Path, stem: str) -> Path | None:
    """Return the first existing ``<stem><ext>`` file for supported extensions."""
    for extension in SUPPORTED_DUMP_EXTENSIONS:
        candidate = directory / f"{stem}{extension}"
        if candidate.is_file():
            return candidate
    return None


def _read_payload(file_path: Path) -> object:
    """Decode a YAML or JSON file.

    Raises:
        SubtrackInputError: If the file cannot be read or decoded.
        SubtrackDependencyError: If PyYAML is unavailable for a YAML file.
    """
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as error:
        raise SubtrackInputError(
            f"Failed to read {file_path}: {error}. Check file permissions and retry."
        ) from error
    if file_path.suffix.lower() == ".json":
        try:
            return cast(object, json.loads(text))
        except json.JSONDecodeError as error:
            raise SubtrackInputError(
                f"Failed to parse JSON at {file_path}:{error.lineno}: {error.msg}. "
                "Fix the JSON syntax and retry."
            ) from error
    return _load_yaml_text(text, file_path)


def _load_yaml_text(text: str, file_path: Path) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise SubtrackDependencyError(
            "YAML account dumps require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    try:
        payload = cast(object, yaml.safe_load(text))
    except yaml.YAMLError as error:
        raise SubtrackInputError(
            f"Failed to parse YAML at {file_path}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise SubtrackInputError(f"Account data at {file_path} is empty.")
    return payload


def _parse_rate(value: object, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise SubtrackInputError(f"Invalid {context}: expected a positive number.")
    return float(value)
