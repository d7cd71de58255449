"""Subtrack CLI entry points.
This module exposes commands for building account transitions and
inspecting bundle timelines. It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from analytics.client import SubtrackClient
from analytics.transition_payload import transitions_to_json_lines
from core.config import SubtrackConfig
from core.constants import DEFAULT_ACCOUNT_RECORD_ID, DEFAULT_TENANT_RECORD_ID
from core.errors import SubtrackError


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="subtrack", description="Business subscription transition builder"
    )
    parser.add_argument("--data-root", help="Override SUBTRACK_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_transitions_command(subparsers)
    _add_timeline_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Subtrack CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.data_root)
        if args.command == "transitions":
            return _run_transitions_command(client, args)
        if args.command == "timeline":
            return _run_timeline_command(client, args)
    except SubtrackError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None) -> SubtrackClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = SubtrackConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return SubtrackClient(config)


def _run_transitions_command(client: SubtrackClient, args: argparse.Namespace) -> int:
    """Handle transitions command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    transitions = client.transitions(
        args.account,
        account_record_id=args.account_record_id,
        tenant_record_id=args.tenant_record_id,
    )
    for line in transitions_to_json_lines(transitions):
        print(line)
    return 0


def _run_timeline_command(client: SubtrackClient, args: argparse.Namespace) -> int:
    """Handle timeline command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    for bundle in client.bundles(args.account):
        for event in bundle.timeline():
            print(
                f"{bundle.bundle_id}\t"
                f"{event.effective_date.isoformat()}\t"
                f"{event.service_name}\t"
                f"{event.event_type.value}"
            )
    return 0


def _add_transitions_command(subparsers: Any) -> None:
    """Register transitions subcommand.

    Args:
        subparsers: Argparse subparsers object.
    """
    parser = subparsers.add_parser(
        "transitions", help="Build backfilled subscription transitions for an account"
    )
    parser.add_argument("--account", required=True, help="Account id")
    parser.add_argument(
        "--account-record-id",
        type=int,
        default=DEFAULT_ACCOUNT_RECORD_ID,
        help="Account record id stamped on each transition",
    )
    parser.add_argument(
        "--tenant-record-id",
        type=int,
        default=DEFAULT_TENANT_RECORD_ID,
        help="Tenant record id stamped on each transition",
    )


def _add_timeline_command(subparsers: Any) -> None:
    """Register timeline subcommand.

    Args:
        subparsers: Argparse subparsers object.
    """
    parser = subparsers.add_parser("timeline", help="List raw bundle events for an account")
    parser.add_argument("--account", required=True, help="Account id")
