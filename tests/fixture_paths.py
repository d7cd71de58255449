"""Shared fixture path helpers for tests."""

from __future__ import annotations

from pathlib import Path


def fixture_data_root() -> Path:
    """Return the data root holding fixture account dumps and the currency table.

    Returns:
        Absolute path of tests/fixtures.
    """
    tests_root = Path(__file__).resolve().parent
    return tests_root / "fixtures"
