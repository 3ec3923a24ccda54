"""Tests for the per-employee line calculator."""

from decimal import ROUND_HALF_UP, Decimal
from types import SimpleNamespace

import pytest
from hypothesis import given, strategies as st

from backoffice_payroll.calculators import (
    ItemAmounts,
    compute_item,
    round_to_cents,
    sum_items,
    to_money,
)

money = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


class TestRounding:
    """Test cents rounding."""

    def test_round_to_cents(self):
        assert round_to_cents(Decimal("10.124")) == Decimal("10.12")
        assert round_to_cents(Decimal("10.126")) == Decimal("10.13")

    def test_half_rounds_up_not_to_even(self):
        assert round_to_cents(Decimal("10.125")) == Decimal("10.13")
        assert round_to_cents(Decimal("10.135")) == Decimal("10.14")
        assert round_to_cents(Decimal("0.005")) == Decimal("0.01")

    def test_negative_half_rounds_away_from_zero(self):
        assert round_to_cents(Decimal("-10.125")) == Decimal("-10.13")

    def test_negative_zero_normalized(self):
        result = round_to_cents(Decimal("-0.001"))
        assert result == Decimal("0.00")
        assert str(result) == "0.00"


class TestToMoney:
    """Test amount coercion."""

    def test_none_and_blank_are_zero(self):
        assert to_money(None) == Decimal("0")
        assert to_money("") == Decimal("0")
        assert to_money("   ") == Decimal("0")

    def test_float_uses_shortest_repr(self):
        assert to_money(0.1) == Decimal("0.1")

    def test_int_and_str(self):
        assert to_money(5000) == Decimal("5000")
        assert to_money("12.50") == Decimal("12.50")

    def test_garbage_raises_value_error(self):
        with pytest.raises(ValueError):
            to_money("twelve")


class TestComputeItem:
    """Test tax and net derivation."""

    def test_default_tax_example(self):
        result = compute_item(Decimal("50000"), Decimal("5000"), Decimal("2000"))

        assert result == ItemAmounts(tax=Decimal("8800.00"), net_pay=Decimal("44200.00"))

    def test_floats_and_ints_give_same_result(self):
        assert compute_item(50000.0, 5000.0, 2000.0) == compute_item(50000, 5000, 2000)

    def test_missing_amounts_are_zero(self):
        result = compute_item(Decimal("1000"))

        assert result.tax == Decimal("160.00")
        assert result.net_pay == Decimal("840.00")

    def test_all_missing(self):
        result = compute_item(None, None, None)

        assert result.tax == Decimal("0.00")
        assert result.net_pay == Decimal("0.00")

    def test_default_tax_rounds_half_up(self):
        # 0.16 * 0.03125 = 0.005 exactly
        result = compute_item(Decimal("0.03125"))

        assert result.tax == Decimal("0.01")
        # net from the rounded tax: 0.03125 - 0.01 = 0.02125 -> 0.02
        assert result.net_pay == Decimal("0.02")

    def test_explicit_tax_is_used(self):
        result = compute_item(Decimal("1000"), Decimal("0"), Decimal("0"), Decimal("50"))

        assert result.tax == Decimal("50.00")
        assert result.net_pay == Decimal("950.00")

    def test_explicit_zero_tax_is_not_replaced_by_default(self):
        result = compute_item(Decimal("1000"), tax=Decimal("0"))

        assert result.tax == Decimal("0.00")
        assert result.net_pay == Decimal("1000.00")

    def test_explicit_tax_rounded_before_net(self):
        result = compute_item(Decimal("100"), tax=Decimal("10.125"))

        assert result.tax == Decimal("10.13")
        assert result.net_pay == Decimal("89.87")

    def test_negative_net_is_preserved(self):
        result = compute_item(Decimal("1000"), Decimal("0"), Decimal("900"), Decimal("200"))

        assert result.net_pay == Decimal("-100.00")

    def test_negative_half_cent_net_rounds_away_from_zero(self):
        result = compute_item(Decimal("0"), Decimal("0"), Decimal("100.005"), Decimal("0"))

        assert result.net_pay == Decimal("-100.01")

    def test_custom_tax_rate(self):
        result = compute_item(Decimal("1000"), Decimal("500"), tax_rate=Decimal("0.10"))

        assert result.tax == Decimal("150.00")
        assert result.net_pay == Decimal("1350.00")

    @given(basic=money, allowances=money, deductions=money)
    def test_default_policy_property(self, basic, allowances, deductions):
        result = compute_item(basic, allowances, deductions)

        gross = basic + allowances
        exact_tax = Decimal("0.16") * gross
        assert result.tax == exact_tax.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        assert abs(result.tax - exact_tax) <= Decimal("0.005")
        # Two-place inputs: the net needs no further rounding
        assert result.net_pay == gross - deductions - result.tax
        assert result.net_pay.as_tuple().exponent == -2

    @given(basic=money, deductions=money, tax=money)
    def test_net_never_clamped(self, basic, deductions, tax):
        result = compute_item(basic, Decimal("0"), deductions, tax)

        assert result.net_pay == basic - deductions - tax


class TestSumItems:
    """Test summing stored item amounts."""

    def _item(self, basic, allowances, deductions, tax, net):
        return SimpleNamespace(
            basic_pay=Decimal(basic),
            allowances=Decimal(allowances),
            deductions=Decimal(deductions),
            tax=Decimal(tax),
            net_pay=Decimal(net),
        )

    def test_empty_is_zero(self):
        totals = sum_items([])

        assert all(value == 0 for value in totals.as_dict().values())

    def test_sums_each_field(self):
        totals = sum_items([
            self._item("50000.00", "5000.00", "2000.00", "8800.00", "44200.00"),
            self._item("1000.00", "0.00", "900.00", "200.00", "-100.00"),
        ])

        assert totals.gross_pay == Decimal("51000.00")
        assert totals.total_allowances == Decimal("5000.00")
        assert totals.total_deductions == Decimal("2900.00")
        assert totals.total_tax == Decimal("9000.00")
        assert totals.net_pay == Decimal("44100.00")

    @given(st.lists(st.tuples(money, money, money), max_size=30))
    def test_sum_matches_per_field_sum(self, rows):
        items = []
        for basic, allowances, deductions in rows:
            amounts = compute_item(basic, allowances, deductions)
            items.append(
                SimpleNamespace(
                    basic_pay=basic,
                    allowances=allowances,
                    deductions=deductions,
                    tax=amounts.tax,
                    net_pay=amounts.net_pay,
                )
            )

        totals = sum_items(items)

        assert totals.gross_pay == sum((i.basic_pay for i in items), Decimal("0"))
        assert totals.total_tax == sum((i.tax for i in items), Decimal("0"))
        assert totals.net_pay == sum((i.net_pay for i in items), Decimal("0"))
        # Per-item identity carries over to the totals
        assert totals.net_pay == (
            totals.gross_pay
            + totals.total_allowances
            - totals.total_deductions
            - totals.total_tax
        )
