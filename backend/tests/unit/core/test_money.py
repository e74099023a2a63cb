from decimal import Decimal

import pytest

from tuitiontime.core.money import divide_evenly, percentage_of, split_share, to_money, to_paise


class TestToMoney:
    def test_rounds_half_up(self) -> None:
        assert to_money("10.005") == Decimal("10.01")
        assert to_money("10.004") == Decimal("10.00")

    def test_float_is_read_through_repr(self) -> None:
        assert to_money(0.1 + 0.2) == Decimal("0.30")


class TestToPaise:
    def test_converts_rupees(self) -> None:
        assert to_paise(Decimal("499.99")) == 49999

    def test_applies_gateway_minimum(self) -> None:
        assert to_paise(Decimal("0.10")) == 100


class TestSplitShare:
    @pytest.mark.parametrize(
        "amount,percent",
        [("1000.00", 20), ("333.33", 15), ("0.01", 50), ("99.99", "12.5")],
    )
    def test_parts_sum_to_total(self, amount: str, percent) -> None:
        share, remainder = split_share(amount, percent)
        assert share + remainder == Decimal(amount)

    def test_commission_share(self) -> None:
        assert split_share("1000", 20) == (Decimal("200.00"), Decimal("800.00"))

    def test_percentage_of(self) -> None:
        assert percentage_of("250", 10) == Decimal("25.00")


def test_divide_evenly_rejects_zero_parts() -> None:
    with pytest.raises(ValueError):
        divide_evenly("100", 0)


def test_divide_evenly_rounds_to_paise() -> None:
    assert divide_evenly("100", 3) == Decimal("33.33")
