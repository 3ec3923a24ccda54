"""Per-employee tax and net pay calculation."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from backoffice_payroll.calculators.types import AmountLike, ItemAmounts, RunTotals

DEFAULT_TAX_RATE = Decimal("0.16")
CENTS = Decimal("0.01")


def to_money(value: AmountLike) -> Decimal:
    """Coerce an amount to Decimal, treating None and blanks as zero.

    Floats go through ``str`` so 0.1 stays 0.1 rather than its binary expansion.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return Decimal("0")
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Not a monetary amount: {value!r}") from e


def round_to_cents(amount: AmountLike) -> Decimal:
    """Round amount to 2 decimal places, half away from zero."""
    rounded = to_money(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        # -0.00 -> 0.00
        return abs(rounded)
    return rounded


def compute_item(
    basic_pay: AmountLike,
    allowances: AmountLike = None,
    deductions: AmountLike = None,
    tax: AmountLike = None,
    *,
    tax_rate: AmountLike = DEFAULT_TAX_RATE,
) -> ItemAmounts:
    """Derive tax and net pay for one employee line.

    Without an explicit ``tax`` a flat withholding of ``tax_rate`` on
    basic pay plus allowances is applied and rounded to cents. Net pay is
    computed from the rounded tax and rounded again. Net is not floored at
    zero: over-deduction shows up as a negative amount.
    """
    basic = to_money(basic_pay)
    allow = to_money(allowances)
    deduct = to_money(deductions)

    if tax is None:
        item_tax = round_to_cents(to_money(tax_rate) * (basic + allow))
    else:
        item_tax = round_to_cents(tax)

    net = round_to_cents(basic + allow - deduct - item_tax)
    return ItemAmounts(tax=item_tax, net_pay=net)


def sum_items(items: Iterable[object]) -> RunTotals:
    """Sum stored item amounts into run totals.

    Items only need ``basic_pay``, ``allowances``, ``deductions``, ``tax``
    and ``net_pay`` attributes. Values are added as stored; the sum is not
    re-rounded.
    """
    gross = allow = deduct = tax = net = Decimal("0")
    for item in items:
        gross += to_money(getattr(item, "basic_pay"))
        allow += to_money(getattr(item, "allowances"))
        deduct += to_money(getattr(item, "deductions"))
        tax += to_money(getattr(item, "tax"))
        net += to_money(getattr(item, "net_pay"))

    return RunTotals(
        gross_pay=gross,
        total_allowances=allow,
        total_deductions=deduct,
        total_tax=tax,
        net_pay=net,
    )
