"""Currency value type and money formatting helpers.

Amounts are ``Decimal`` everywhere; exchange rates are relative to the store's
default currency, whose rate is always 1.
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "C$",
    "CHF": "CHF",
    "CNY": "¥",
    "SEK": "kr",
    "NZD": "NZ$",
}


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    # str() first so floats like 0.18 don't carry binary noise
    return Decimal(str(value))


def quantize_money(amount) -> Decimal:
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Convert a decimal amount to integer minor units (paise, cents), half-up."""
    return int((to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def currency_symbol(code: str) -> str:
    return CURRENCY_SYMBOLS.get((code or "").upper(), code)


def parse_amount(text: str) -> Decimal:
    """Parse a formatted amount such as ``"₹1,23,456.50"``; returns 0 on garbage."""
    cleaned = re.sub(r"[^\d.\-]", "", text or "")
    try:
        return Decimal(cleaned) if cleaned else Decimal("0")
    except InvalidOperation:
        return Decimal("0")


def discount_percent(original_price, sale_price) -> int:
    original = to_decimal(original_price)
    sale = to_decimal(sale_price)
    if original <= sale or original <= 0:
        return 0
    return int(((original - sale) / original * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _group_digits(digits: str, locale: str) -> str:
    if len(digits) <= 3:
        return digits
    if locale == "en-IN":
        # Indian grouping: last three digits, then pairs (lakh, crore)
        head, tail = digits[:-3], digits[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        return ",".join(pairs + [tail])
    return f"{int(digits):,}"


def format_number(amount, locale: str = "en-IN") -> str:
    value = quantize_money(amount)
    if value.is_nan() or value < 0:
        value = Decimal("0.00")
    whole, _, fraction = f"{value:.2f}".partition(".")
    return f"{_group_digits(whole, locale)}.{fraction}"


class Currency(BaseModel):
    code: str = Field(min_length=3, max_length=3)
    symbol: str
    name: str
    exchangeRate: Decimal = Field(gt=0)

    def format(self, amount, show_symbol: bool = True, locale: str = "en-IN") -> str:
        number = format_number(amount, locale)
        return f"{self.symbol}{number}" if show_symbol else number

    def convert(self, amount, to: "Currency") -> Decimal:
        if self.code == to.code:
            return to_decimal(amount)
        base_amount = to_decimal(amount) / self.exchangeRate
        return base_amount * to.exchangeRate

    def format_from(self, amount, source: "Currency", **kwargs) -> str:
        """Format an amount expressed in ``source`` currency in this currency."""
        return self.format(source.convert(amount, self), **kwargs)


class CurrencySet(BaseModel):
    currencies: List[Currency]
    defaultCode: str

    @model_validator(mode="after")
    def _check(self):
        codes = [c.code for c in self.currencies]
        if len(codes) != len(set(codes)):
            raise ValueError("Currency codes must be unique")
        default = next((c for c in self.currencies if c.code == self.defaultCode), None)
        if default is None:
            raise ValueError(f"Default currency {self.defaultCode} is not in the supported set")
        if default.exchangeRate != 1:
            raise ValueError("Default currency must have an exchange rate of 1")
        return self

    @property
    def default(self) -> Currency:
        return self.get(self.defaultCode)

    def get(self, code: Optional[str]) -> Optional[Currency]:
        code = (code or "").upper()
        for c in self.currencies:
            if c.code == code:
                return c
        return None

    def resolve(self, code: Optional[str]) -> Currency:
        """Return the requested currency if still supported, else the default."""
        return self.get(code) or self.default


DEFAULT_CURRENCIES = [
    {"code": "INR", "symbol": "₹", "name": "Indian Rupee", "exchangeRate": "1"},
    {"code": "USD", "symbol": "$", "name": "US Dollar", "exchangeRate": "0.012"},
    {"code": "EUR", "symbol": "€", "name": "Euro", "exchangeRate": "0.011"},
]
