from pydantic import BaseModel, Field
from typing import List, Optional

from app.services.currency import Currency


class PaymentSettings(BaseModel):
    razorpayEnabled: bool
    codEnabled: bool
    razorpayKeyId: Optional[str] = None


class PublicSettings(BaseModel):
    siteName: str
    defaultCurrency: Currency
    supportedCurrencies: List[Currency]
    taxRate: float
    shippingRate: float
    freeShippingThreshold: float
    paymentSettings: PaymentSettings


class SettingsUpdate(BaseModel):
    siteName: Optional[str] = None
    defaultCurrency: Optional[str] = None
    supportedCurrencies: Optional[List[Currency]] = None
    taxRate: Optional[float] = Field(default=None, ge=0, le=1)
    shippingRate: Optional[float] = Field(default=None, ge=0)
    freeShippingThreshold: Optional[float] = Field(default=None, ge=0)
    razorpayEnabled: Optional[bool] = None
    codEnabled: Optional[bool] = None
