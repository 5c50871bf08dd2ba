from decimal import Decimal

import pytest

from apps.common.money import line_total, sum_lines, to_money


def test_to_money_rounds_half_up():
    assert to_money("2.675") == Decimal("2.68")
    assert to_money(Decimal("0.005")) == Decimal("0.01")


def test_to_money_routes_floats_through_str():
    assert to_money(0.1) == Decimal("0.10")


@pytest.mark.parametrize("bad", ["abc", "", "NaN", "Infinity"])
def test_to_money_rejects_non_amounts(bad):
    with pytest.raises(ValueError):
        to_money(bad)


def test_line_total_and_sum():
    assert line_total("10.00", 2) == Decimal("20.00")
    assert sum_lines([("10.00", 2), ("5.00", 1)]) == Decimal("25.00")
    assert sum_lines([]) == Decimal("0.00")
