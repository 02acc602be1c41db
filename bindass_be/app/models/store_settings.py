from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.user import Base
from app.models.product import JSONType
from app.services.currency import Currency, CurrencySet, DEFAULT_CURRENCIES, currency_symbol
from app.services.pricing import PricingRules


class StoreSettings(Base):
    __tablename__ = "store_settings"
    id = Column(Integer, primary_key=True, index=True)
    site_name = Column(String(100))
    default_currency = Column(String(3), default="INR")
    supported_currencies = Column(JSONType)  # [{code, symbol, name, exchangeRate}]
    tax_rate = Column(Numeric(5, 4), default=Decimal("0.18"))
    shipping_rate = Column(Numeric(10, 2), default=Decimal("99"))
    free_shipping_threshold = Column(Numeric(10, 2), default=Decimal("2000"))
    razorpay_enabled = Column(Boolean, default=True)
    cod_enabled = Column(Boolean, default=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def currency_set(self) -> CurrencySet:
        currencies = [Currency(**c) for c in (self.supported_currencies or [])]
        code = (self.default_currency or "INR").upper()
        if not any(c.code == code for c in currencies):
            currencies.insert(0, Currency(code=code, symbol=currency_symbol(code), name=code, exchangeRate=1))
        return CurrencySet(currencies=currencies, defaultCode=code)

    def pricing_rules(self) -> PricingRules:
        return PricingRules(
            taxRate=self.tax_rate,
            shippingRate=self.shipping_rate,
            freeShippingThreshold=self.free_shipping_threshold,
        )


def get_or_create_store_settings(db: Session) -> StoreSettings:
    cfg = db.query(StoreSettings).first()
    if not cfg:
        settings = get_settings()
        # Bundled rates are relative to INR; any other base starts on its own
        if settings.DEFAULT_CURRENCY == "INR":
            currencies = [dict(c) for c in DEFAULT_CURRENCIES]
        else:
            currencies = [{
                "code": settings.DEFAULT_CURRENCY,
                "symbol": currency_symbol(settings.DEFAULT_CURRENCY),
                "name": settings.DEFAULT_CURRENCY,
                "exchangeRate": "1",
            }]
        cfg = StoreSettings(
            site_name=settings.STORE_NAME,
            default_currency=settings.DEFAULT_CURRENCY,
            supported_currencies=currencies,
            tax_rate=Decimal(settings.TAX_RATE),
            shipping_rate=Decimal(settings.SHIPPING_RATE),
            free_shipping_threshold=Decimal(settings.FREE_SHIPPING_THRESHOLD),
        )
        db.add(cfg)
        db.commit()
        db.refresh(cfg)
    return cfg
