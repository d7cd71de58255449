"""Currency context shared by all transitions of one account.

This module models the conversion table handed over by the source.
It validates currencies; it does not convert amounts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from core.errors import ResolutionError


@dataclass(frozen=True)
class CurrencyConverter:
    """Rate table into one reference currency.

    Attributes:
        reference_currency: Currency converted amounts are reported in.
        rates: Multiplier per source currency into the reference currency.
    """

    reference_currency: str
    rates: Mapping[str, float] = field(default_factory=dict)

    def supports(self, currency: str) -> bool:
        """Return whether amounts in ``currency`` can be converted."""
        return currency == self.reference_currency or currency in self.rates

    def rate_for(self, currency: str) -> float:
        """Return the conversion rate for a source currency.

        Args:
            currency: Source currency code.

        Returns:
            Rate into the reference currency.

        Raises:
            ResolutionError: If no rate is known for the currency.
        """
        if currency == self.reference_currency:
            return 1.0
        if currency not in self.rates:
            known_rows = ", ".join(sorted(self.rates)) or "none"
            raise ResolutionError(
                f"No conversion rate from {currency} to {self.reference_currency}. "
                f"Known currencies: {known_rows}."
            )
        return self.rates[currency]
