from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

Q01 = Decimal("0.01")
HUP = ROUND_HALF_UP

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
    "CHF": "CHF ",
}

# Currencies without minor units.
ZERO_DECIMAL_CURRENCIES = {"JPY", "KRW"}


class CurrencyMismatch(ValueError):
    """Raised when two prices in different currencies are combined."""


class Price:
    """
    Immutable amount + ISO currency code.
    Addition is only defined between prices sharing the same currency.
    """

    __slots__ = ("number", "currency_code")

    def __init__(self, number, currency_code: str):
        self.number = Decimal(str(number))
        self.currency_code = str(currency_code).upper()

    @classmethod
    def zero(cls, currency_code: str) -> "Price":
        return cls(Decimal("0.00"), currency_code)

    def add(self, other: "Price") -> "Price":
        if other.currency_code != self.currency_code:
            raise CurrencyMismatch(
                f"Cannot add {other.currency_code} to {self.currency_code}."
            )
        return Price(self.number + other.number, self.currency_code)

    __add__ = add

    def __eq__(self, other):
        if not isinstance(other, Price):
            return NotImplemented
        return self.number == other.number and self.currency_code == other.currency_code

    def __hash__(self):
        return hash((self.number, self.currency_code))

    def __repr__(self):
        return f"Price({self.number!s}, {self.currency_code!r})"


class CurrencyFormatter:
    """
    Formats an amount with its currency symbol, e.g. 1234.5 USD -> "$1,234.50".
    Unknown currencies fall back to "<amount> <CODE>".
    """

    def __init__(self, symbols: Optional[Dict[str, str]] = None):
        self.symbols = dict(CURRENCY_SYMBOLS if symbols is None else symbols)

    def format(self, number, currency_code: str) -> str:
        code = str(currency_code).upper()
        amount = Decimal(str(number))
        if code in ZERO_DECIMAL_CURRENCIES:
            amount = amount.quantize(Decimal("1"), rounding=HUP)
            text = f"{amount:,}"
        else:
            amount = amount.quantize(Q01, rounding=HUP)
            text = f"{amount:,.2f}"

        sign = ""
        if text.startswith("-"):
            sign, text = "-", text[1:]

        symbol = self.symbols.get(code)
        if symbol is None:
            return f"{sign}{text} {code}"
        return f"{sign}{symbol}{text}"
