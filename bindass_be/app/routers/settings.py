from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from decimal import Decimal
from pydantic import ValidationError

from app.models.user import get_db
from app.models.store_settings import StoreSettings, get_or_create_store_settings
from app.schemas.settings import PaymentSettings, PublicSettings, SettingsUpdate
from app.services.currency import CurrencySet
from app.services.gateway import RazorpayGateway, get_payment_gateway
from app.utils.security import require_admin

router = APIRouter()


def to_public_settings(cfg: StoreSettings, gateway: RazorpayGateway) -> PublicSettings:
    currencies = cfg.currency_set()
    return PublicSettings(
        siteName=cfg.site_name or "",
        defaultCurrency=currencies.default,
        supportedCurrencies=currencies.currencies,
        taxRate=cfg.tax_rate,
        shippingRate=cfg.shipping_rate,
        freeShippingThreshold=cfg.free_shipping_threshold,
        paymentSettings=PaymentSettings(
            razorpayEnabled=bool(cfg.razorpay_enabled) and gateway.is_configured,
            codEnabled=bool(cfg.cod_enabled),
            razorpayKeyId=gateway.key_id if gateway.is_configured else None,
        ),
    )


@router.get("/settings", response_model=PublicSettings)
def public_settings(db: Session = Depends(get_db), gateway: RazorpayGateway = Depends(get_payment_gateway)):
    return to_public_settings(get_or_create_store_settings(db), gateway)


@router.get("/admin/settings", response_model=PublicSettings)
def admin_get_settings(
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
    admin_email: str = Depends(require_admin),
):
    return to_public_settings(get_or_create_store_settings(db), gateway)


@router.put("/admin/settings", response_model=PublicSettings)
def admin_update_settings(
    payload: SettingsUpdate,
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
    admin_email: str = Depends(require_admin),
):
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields provided")
    cfg = get_or_create_store_settings(db)

    if "supportedCurrencies" in updates or "defaultCurrency" in updates:
        currencies = payload.supportedCurrencies if payload.supportedCurrencies is not None else cfg.currency_set().currencies
        default_code = (payload.defaultCurrency or cfg.default_currency).upper()
        try:
            validated = CurrencySet(currencies=currencies, defaultCode=default_code)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.errors()[0]["msg"])
        cfg.supported_currencies = [c.model_dump(mode="json") for c in validated.currencies]
        cfg.default_currency = validated.defaultCode

    if payload.siteName is not None:
        cfg.site_name = payload.siteName.strip()
    if payload.taxRate is not None:
        cfg.tax_rate = Decimal(str(payload.taxRate))
    if payload.shippingRate is not None:
        cfg.shipping_rate = Decimal(str(payload.shippingRate))
    if payload.freeShippingThreshold is not None:
        cfg.free_shipping_threshold = Decimal(str(payload.freeShippingThreshold))
    if payload.razorpayEnabled is not None:
        cfg.razorpay_enabled = payload.razorpayEnabled
    if payload.codEnabled is not None:
        cfg.cod_enabled = payload.codEnabled
    db.commit()
    db.refresh(cfg)
    return to_public_settings(cfg, gateway)
