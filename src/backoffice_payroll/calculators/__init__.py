"""Payroll line item calculation."""

from backoffice_payroll.calculators.line_calculator import (
    DEFAULT_TAX_RATE,
    compute_item,
    round_to_cents,
    sum_items,
    to_money,
)
from backoffice_payroll.calculators.types import ItemAmounts, RunTotals

__all__ = [
    "DEFAULT_TAX_RATE",
    "ItemAmounts",
    "RunTotals",
    "compute_item",
    "round_to_cents",
    "sum_items",
    "to_money",
]
