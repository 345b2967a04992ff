"""
Catalog Money Primitive — Integer Minor-Unit Prices
=====================================================
Every catalog price (product base price, option surcharge, computed
configuration price) is a Money value.

RULES:
- Amounts are integer minor units (1050 = $10.50) — no floats
- Currency is explicit on every value (ISO 4217, 3 letters)
- Cross-currency arithmetic is an error, never an implicit conversion
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# ══════════════════════════════════════════════════════════════
# MONEY VALUE OBJECT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Money:
    """
    Monetary value in integer minor units (cents).

    Rules:
    - amount is in minor units (e.g. 1050 = $10.50)
    - currency is ISO 4217 (e.g. "USD", "EUR")
    - No floats ever. Integer arithmetic only.
    """
    amount: int
    currency: str

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(
                f"Money amount must be int (minor units), "
                f"got {type(self.amount).__name__}. "
                f"Use cents, not decimals."
            )
        if not self.currency or not isinstance(self.currency, str):
            raise ValueError("currency must be a non-empty ISO 4217 string.")
        if len(self.currency) != 3:
            raise ValueError(
                f"currency must be 3-letter ISO 4217 code, "
                f"got '{self.currency}'."
            )

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def plus_minor(self, amount: int) -> Money:
        """Add a bare minor-unit amount in this currency."""
        return Money(amount=self.amount + amount, currency=self.currency)

    def _assert_same_currency(self, other: Money) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot operate with {type(other).__name__}.")
        if self.currency != other.currency:
            raise ValueError(
                f"Currency mismatch: {self.currency} vs {other.currency}. "
                f"Cross-currency operations require explicit conversion."
            )

    def to_dict(self) -> dict:
        return {"amount": self.amount, "currency": self.currency}

    @classmethod
    def from_dict(cls, data: dict, default_currency: Optional[str] = None) -> Money:
        currency = data.get("currency") or default_currency
        if currency is None:
            raise ValueError("Money.from_dict requires a currency.")
        return cls(amount=data["amount"], currency=currency)
