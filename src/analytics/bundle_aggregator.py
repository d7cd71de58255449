"""Account-level aggregation of bundle transition streams.

This module resolves account-scoped context once, then builds and
backfills the transitions of every bundle owned by the account.
"""

from __future__ import annotations

from core.constants import DEFAULT_ACCOUNT_RECORD_ID, DEFAULT_TENANT_RECORD_ID
from core.logging_config import get_logger
from core.ports import SubscriptionSource
from core.types import Transition
from transforms.transition_stream import BundleContext, build_and_backfill_bundle

_LOGGER = get_logger(__name__)


def build_account_transitions(
    account_id: str,
    source: SubscriptionSource,
    account_record_id: int = DEFAULT_ACCOUNT_RECORD_ID,
    tenant_record_id: int = DEFAULT_TENANT_RECORD_ID,
) -> list[Transition]:
    """Build backfilled transitions for all bundles of an account.

    Bundles are processed in source order and their streams concatenated.
    Order across bundles is not part of the contract. A failure on any
    bundle aborts the whole account.

    Args:
        account_id: Account identifier.
        source: Collaborator serving account, bundle, and audit data.
        account_record_id: Account record id stamped on transitions.
        tenant_record_id: Tenant record id stamped on transitions.

    Returns:
        Transitions of all bundles.

    Raises:
        NotFoundError: If the account is unknown.
        ResolutionError: If currency or audit data cannot be resolved.
    """
    account = source.resolve_account(account_id)
    report_group = source.resolve_report_group(account.account_id)
    currency_converter = source.resolve_currency_converter()
    bundles = source.list_bundles(account.account_id)

    transitions: list[Transition] = []
    for bundle in bundles:
        context = BundleContext(
            account=account,
            bundle=bundle,
            currency_converter=currency_converter,
            account_record_id=account_record_id,
            tenant_record_id=tenant_record_id,
            report_group=report_group,
        )
        transitions.extend(build_and_backfill_bundle(context, bundle.timeline(), source))

    _LOGGER.info(
        "account_transitions_built",
        account_id=account.account_id,
        bundle_count=len(bundles),
        transition_count=len(transitions),
    )
    return transitions
