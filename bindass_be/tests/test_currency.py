from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.services.currency import (
    DEFAULT_CURRENCIES,
    Currency,
    CurrencySet,
    currency_symbol,
    discount_percent,
    parse_amount,
    to_minor_units,
)

INR = Currency(code="INR", symbol="₹", name="Indian Rupee", exchangeRate=1)
USD = Currency(code="USD", symbol="$", name="US Dollar", exchangeRate=Decimal("0.012"))


def test_format_uses_indian_grouping():
    assert INR.format(123456.5) == "₹1,23,456.50"
    assert INR.format(10000000) == "₹1,00,00,000.00"
    assert INR.format(999) == "₹999.00"


def test_format_other_locale_and_without_symbol():
    assert USD.format(Decimal("1234567.891"), locale="en-US") == "$1,234,567.89"
    assert INR.format(2499, show_symbol=False) == "2,499.00"


def test_negative_amounts_format_as_zero():
    assert INR.format(-50) == "₹0.00"


def test_convert_between_currencies():
    assert INR.convert(1000, USD) == Decimal("12")
    assert USD.convert(12, INR) == Decimal("1000")
    assert INR.convert(Decimal("42.5"), INR) == Decimal("42.5")


def test_format_from_converts_first():
    assert USD.format_from(1000, INR, locale="en-US") == "$12.00"


def test_parse_amount():
    assert parse_amount("₹1,23,456.50") == Decimal("123456.50")
    assert parse_amount("") == 0
    assert parse_amount("free!") == 0
    assert parse_amount("1.2.3") == 0


def test_discount_percent():
    assert discount_percent(2999, 2499) == 17
    assert discount_percent(1000, 1000) == 0
    assert discount_percent(500, 800) == 0


def test_minor_units_round_half_up():
    assert to_minor_units(Decimal("5897.64")) == 589764
    assert to_minor_units(5897.64) == 589764
    assert to_minor_units(Decimal("0.005")) == 1


def test_unknown_symbol_falls_back_to_code():
    assert currency_symbol("usd") == "$"
    assert currency_symbol("XYZ") == "XYZ"


def test_currency_set_resolves_unsupported_to_default():
    currencies = CurrencySet(currencies=[Currency(**c) for c in DEFAULT_CURRENCIES], defaultCode="INR")
    assert currencies.default.code == "INR"
    assert currencies.resolve("usd").code == "USD"
    assert currencies.resolve("GBP").code == "INR"
    assert currencies.resolve(None).code == "INR"


def test_currency_set_rejects_duplicates():
    with pytest.raises(ValidationError):
        CurrencySet(currencies=[INR, INR], defaultCode="INR")


def test_currency_set_requires_default_present_with_unit_rate():
    with pytest.raises(ValidationError):
        CurrencySet(currencies=[INR], defaultCode="USD")
    with pytest.raises(ValidationError):
        CurrencySet(currencies=[INR, USD], defaultCode="USD")


def test_exchange_rate_must_be_positive():
    with pytest.raises(ValidationError):
        Currency(code="EUR", symbol="€", name="Euro", exchangeRate=0)
