"""Python SDK for transition analytics.

This module exposes high-level APIs for building account transitions
and inspecting bundle timelines backed by an account dump source.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from analytics.bundle_aggregator import build_account_transitions
from core.config import SubtrackConfig
from core.constants import DEFAULT_ACCOUNT_RECORD_ID, DEFAULT_TENANT_RECORD_ID
from core.logging_config import configure_logging
from core.ports import SubscriptionSource
from core.types import Bundle, Transition
from ingest.account_dump import AccountDumpSource


class SubtrackClient:
    """Primary SDK entry point."""

    def __init__(
        self,
        config: SubtrackConfig | None = None,
        source: SubscriptionSource | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            source: Optional subscription source; defaults to account dumps
                under the configured data root.
        """
        self._config = config or SubtrackConfig.from_env()
        configure_logging(self._config.log_level)
        self._source = source or AccountDumpSource(self._config)

    def transitions(
        self,
        account_id: str,
        account_record_id: int = DEFAULT_ACCOUNT_RECORD_ID,
        tenant_record_id: int = DEFAULT_TENANT_RECORD_ID,
    ) -> list[Transition]:
        """Build backfilled business subscription transitions for an account.

        Args:
            account_id: Account identifier.
            account_record_id: Account record id stamped on transitions.
            tenant_record_id: Tenant record id stamped on transitions.

        Returns:
            Transitions of all account bundles.

        Raises:
            NotFoundError: If the account is unknown.
            ResolutionError: If currency or audit data cannot be resolved.
        """
        return build_account_transitions(
            account_id,
            self._source,
            account_record_id=account_record_id,
            tenant_record_id=tenant_record_id,
        )

    def bundles(self, account_id: str) -> list[Bundle]:
        """List the account's bundles with their raw event timelines."""
        account = self._source.resolve_account(account_id)
        return list(self._source.list_bundles(account.account_id))

    def with_data_root(self, data_root: str) -> "SubtrackClient":
        """Clone the client with a different local data root.

        Args:
            data_root: New data root path.

        Returns:
            New SDK client reading dumps from the new root.
        """
        resolved_root = Path(data_root).expanduser().resolve()
        updated_config = replace(self._config, data_root=resolved_root)
        return SubtrackClient(updated_config)
