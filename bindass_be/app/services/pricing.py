"""Cart pricing: shipping, tax and order totals.

Pure functions; the storefront calls them at display and submission time and the
orders router calls them again to re-validate what the client sent.
"""
from decimal import Decimal

from pydantic import BaseModel

from app.services.currency import to_decimal, quantize_money


def shipping_cost(subtotal, free_threshold, flat_rate) -> Decimal:
    """Free shipping strictly above the threshold, flat fee otherwise."""
    if to_decimal(subtotal) > to_decimal(free_threshold):
        return Decimal("0")
    return to_decimal(flat_rate)


def tax_amount(subtotal, tax_rate) -> Decimal:
    """Tax at minor-unit precision (rounded half-up to 0.01)."""
    return quantize_money(to_decimal(subtotal) * to_decimal(tax_rate))


def order_total(subtotal, shipping, tax) -> Decimal:
    return to_decimal(subtotal) + to_decimal(shipping) + to_decimal(tax)


class PricingRules(BaseModel):
    taxRate: Decimal = Decimal("0.18")
    shippingRate: Decimal = Decimal("99")
    freeShippingThreshold: Decimal = Decimal("2000")


class PriceBreakdown(BaseModel):
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    def as_payload(self) -> dict:
        return {k: float(v) for k, v in self.model_dump().items()}


def price_breakdown(subtotal, rules: PricingRules) -> PriceBreakdown:
    subtotal = to_decimal(subtotal)
    shipping = shipping_cost(subtotal, rules.freeShippingThreshold, rules.shippingRate)
    tax = tax_amount(subtotal, rules.taxRate)
    return PriceBreakdown(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=order_total(subtotal, shipping, tax),
    )
