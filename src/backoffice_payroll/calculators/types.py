"""Type definitions for line item calculation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

# Anything a caller may hand in as an amount; None means zero.
AmountLike = Union[Decimal, int, float, str, None]


@dataclass(frozen=True)
class ItemAmounts:
    """Derived amounts for one employee line."""

    tax: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class RunTotals:
    """The five run-level aggregates."""

    gross_pay: Decimal = Decimal("0")
    total_allowances: Decimal = Decimal("0")
    total_deductions: Decimal = Decimal("0")
    total_tax: Decimal = Decimal("0")
    net_pay: Decimal = Decimal("0")

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "gross_pay": self.gross_pay,
            "total_allowances": self.total_allowances,
            "total_deductions": self.total_deductions,
            "total_tax": self.total_tax,
            "net_pay": self.net_pay,
        }
