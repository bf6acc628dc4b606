from decimal import Decimal

import pytest

from buytogether.pricing import CurrencyFormatter, CurrencyMismatch, Price


class TestPrice:

    def test_add_same_currency(self):
        total = Price("2.99", "USD").add(Price("1.01", "usd"))
        assert total == Price(Decimal("4.00"), "USD")

    def test_plus_operator(self):
        assert Price("1", "EUR") + Price("2", "EUR") == Price("3", "EUR")

    def test_add_other_currency_is_rejected(self):
        with pytest.raises(CurrencyMismatch):
            Price("1.00", "USD").add(Price("1.00", "EUR"))

    def test_zero(self):
        assert Price.zero("USD").number == Decimal("0.00")


class TestCurrencyFormatter:

    @pytest.mark.parametrize(
        "number, code, expected",
        [
            (Decimal("1234.5"), "USD", "$1,234.50"),
            (Decimal("7.455"), "EUR", "€7.46"),
            ("0", "GBP", "£0.00"),
            (Decimal("1234.6"), "JPY", "¥1,235"),
            (Decimal("-5"), "USD", "-$5.00"),
            (Decimal("12"), "XYZ", "12.00 XYZ"),
        ],
    )
    def test_format(self, number, code, expected):
        assert CurrencyFormatter().format(number, code) == expected

    def test_custom_symbols(self):
        fmt = CurrencyFormatter(symbols={"USD": "US$"})
        assert fmt.format(Decimal("3"), "USD") == "US$3.00"
        assert fmt.format(Decimal("3"), "EUR") == "3.00 EUR"
