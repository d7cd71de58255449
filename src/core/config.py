"""Runtime configuration model for Subtrack.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_REFERENCE_CURRENCY,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import SubtrackConfigError


@dataclass(frozen=True)
class SubtrackConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory holding account dumps.
        reference_currency: Currency that converted amounts are reported in.
        log_level: Minimum level of emitted structured log events.
    """

    data_root: Path
    reference_currency: str
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "SubtrackConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SubtrackConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("SUBTRACK_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        currency_value = os.getenv("SUBTRACK_REFERENCE_CURRENCY", DEFAULT_REFERENCE_CURRENCY)
        log_level_value = os.getenv("SUBTRACK_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            reference_currency=parse_currency_code(currency_value),
            log_level=_parse_log_level(log_level_value),
        )


def parse_currency_code(raw_value: str) -> str:
    """Parse and normalize an ISO-4217 style currency code.

    Args:
        raw_value: Raw currency string.

    Returns:
        Upper-cased three-letter currency code.

    Raises:
        SubtrackConfigError: If value is not a three-letter alphabetic code.
    """
    normalized = raw_value.strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise SubtrackConfigError(
            "Invalid SUBTRACK_REFERENCE_CURRENCY value: "
            f"expected a three-letter currency code, got '{raw_value}'. "
            "Set SUBTRACK_REFERENCE_CURRENCY to a code such as USD."
        )
    return normalized


def _parse_log_level(raw_value: str) -> str:
    """Parse the log level environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Upper-cased standard level name.

    Raises:
        SubtrackConfigError: If the level is not supported.
    """
    normalized = raw_value.strip().upper()
    if normalized not in SUPPORTED_LOG_LEVELS:
        supported_rows = ", ".join(SUPPORTED_LOG_LEVELS)
        raise SubtrackConfigError(
            f"Invalid SUBTRACK_LOG_LEVEL value '{raw_value}'. Use one of: {supported_rows}."
        )
    return normalized
