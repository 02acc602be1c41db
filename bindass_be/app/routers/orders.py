from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import logging
import time
import uuid

from app.config import get_settings
from app.models.user import User, get_db
from app.models.order import Order, OrderItem
from app.models.product import Product
from app.models.store_settings import get_or_create_store_settings
from app.routers.cart import clear_user_cart
from app.schemas.order import (
    OrderCreate,
    OrderOut,
    OrderItemOut,
    OrderStatusUpdate,
    OrderPaymentStatusUpdate,
)
from app.services.currency import to_decimal, to_minor_units, quantize_money
from app.services.gateway import RazorpayGateway, PaymentGatewayError, get_payment_gateway
from app.services.pricing import price_breakdown
from app.utils.email_templates import order_confirmation, order_status_update
from app.utils.mailer import send_email
from app.utils.security import get_current_user_record, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()

PRICE_TOLERANCE = Decimal("0.01")
# Orders past these states can no longer be cancelled by the customer
NON_CANCELLABLE = ("SHIPPED", "DELIVERED", "COMPLETED", "CANCELLED")


def suggest_cod_error(message: str) -> HTTPException:
    return HTTPException(status_code=503, detail={"message": message, "suggestCOD": True})


def generate_order_number() -> str:
    prefix = get_settings().ORDER_NUMBER_PREFIX
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9].upper()}"


def map_order_to_out(order: Order) -> OrderOut:
    shipping = {
        "firstName": order.shipping_first_name,
        "lastName": order.shipping_last_name,
        "email": order.shipping_email,
        "phone": order.shipping_phone,
        "address": order.shipping_address,
        "city": order.shipping_city,
        "state": order.shipping_state,
        "zipCode": order.shipping_zip_code,
        "country": order.shipping_country,
    }
    items = [
        OrderItemOut(
            id=i.id,
            productId=i.product_id,
            name=i.name,
            image=i.image,
            quantity=i.quantity,
            selectedSize=i.selected_size,
            selectedColor=i.selected_color,
            price=i.price,
            total=i.total,
        )
        for i in order.items
    ]
    return OrderOut(
        id=order.id,
        orderNumber=order.order_number,
        items=items,
        shippingAddress=shipping,  # type: ignore
        paymentMethod=order.payment_method,  # type: ignore
        paymentStatus=order.payment_status,  # type: ignore
        gatewayOrderId=order.gateway_order_id,
        gatewayPaymentId=order.gateway_payment_id,
        pricing={
            "subtotal": order.subtotal,
            "shipping": order.shipping_cost,
            "tax": order.tax,
            "total": order.total_amount,
        },  # type: ignore
        currency=order.currency,
        status=order.status,  # type: ignore
        createdAt=order.created_at.isoformat(),
        updatedAt=order.updated_at.isoformat(),
    )


# Create Order
@router.post("/", response_model=OrderOut)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Order must contain at least one item")

    store = get_or_create_store_settings(db)
    if payload.paymentMethod == "cashOnDelivery" and not store.cod_enabled:
        raise HTTPException(status_code=400, detail="Cash on Delivery is not available")
    if payload.paymentMethod == "online" and not store.razorpay_enabled:
        raise suggest_cod_error("Online payment is currently disabled. Please try Cash on Delivery.")

    # Validate products/stock and compute pricing from server-side prices
    lines = []
    requested = {}
    subtotal = Decimal("0")
    for item in payload.items:
        product = db.query(Product).filter(Product.id == item.productId).first()
        if not product:
            raise HTTPException(status_code=404, detail=f"Product {item.productId} not found")
        if product.status != "active":
            raise HTTPException(status_code=400, detail=f"Product {product.name} is not available")
        available = product.available_quantity(item.selectedSize, item.selectedColor)
        if available is None:
            raise HTTPException(status_code=400, detail=f"Selected variant for {product.name} not found")
        # Repeated lines for one variant draw on the same stock
        key = (product.id, item.selectedSize, item.selectedColor) if product.variants else (product.id,)
        requested[key] = requested.get(key, 0) + item.quantity
        if product.track_quantity and available < requested[key]:
            raise HTTPException(status_code=400, detail=f"Insufficient stock for {product.name}")
        unit_price = to_decimal(product.price)
        line_total = unit_price * item.quantity
        subtotal += line_total
        lines.append((item, product, unit_price, line_total))

    pricing = price_breakdown(subtotal, store.pricing_rules())
    # Client-computed pricing is untrusted; only accept it if it agrees with ours
    if abs(pricing.total - to_decimal(payload.pricing.total)) > PRICE_TOLERANCE:
        logger.warning(
            "Price mismatch for user %s: client total %s, computed %s",
            user.id, payload.pricing.total, pricing.total,
        )
        raise HTTPException(status_code=400, detail="Price mismatch detected")

    order_number = generate_order_number()
    currency = (store.default_currency or "INR").upper()

    gateway_order_id = None
    if payload.paymentMethod == "online":
        try:
            gateway_order_id = gateway.create_order(
                amount_minor=to_minor_units(pricing.total),
                currency=currency,
                receipt=order_number,
                notes={"orderNumber": order_number, "userId": str(user.id)},
            )
        except PaymentGatewayError as e:
            logger.error("Gateway order creation failed for %s: %s", order_number, e)
            raise suggest_cod_error("Online payment is currently unavailable. Please try Cash on Delivery.")

    address = payload.shippingAddress
    order = Order(
        order_number=order_number,
        user_id=user.id,
        shipping_first_name=address.firstName,
        shipping_last_name=address.lastName,
        shipping_email=address.email,
        shipping_phone=address.phone,
        shipping_address=address.address,
        shipping_city=address.city,
        shipping_state=address.state,
        shipping_zip_code=address.zipCode,
        shipping_country=address.country,
        payment_method=payload.paymentMethod,
        payment_status="PENDING",
        gateway_order_id=gateway_order_id,
        subtotal=quantize_money(pricing.subtotal),
        shipping_cost=quantize_money(pricing.shipping),
        tax=quantize_money(pricing.tax),
        total_amount=quantize_money(pricing.total),
        currency=currency,
        status="PENDING",
    )
    db.add(order)
    db.flush()  # get order.id

    for item, product, unit_price, line_total in lines:
        db.add(
            OrderItem(
                order_id=order.id,
                product_id=product.id,
                name=product.name,
                image=product.main_image,
                quantity=item.quantity,
                selected_size=item.selectedSize,
                selected_color=item.selectedColor,
                price=unit_price,
                total=line_total,
            )
        )
        # Reserve stock
        product.adjust_stock(-item.quantity, item.selectedSize, item.selectedColor)

    if payload.paymentMethod == "cashOnDelivery":
        # COD orders are confirmed as soon as they exist; online ones wait for payment
        clear_user_cart(db, user.id)

    db.commit()
    db.refresh(order)
    logger.info("Order %s created for user %s (%s)", order.order_number, user.id, order.payment_method)

    tpl = order_confirmation(
        order.order_number,
        store.currency_set().default.format(order.total_amount),
        sum(i.quantity for i in order.items),
        order.payment_method,
        customer_name=user.full_name,
    )
    send_email(order.shipping_email or user.email, tpl["subject"], tpl["body"])
    return map_order_to_out(order)


# Get User Orders
@router.get("/", response_model=List[OrderOut])
def get_user_orders(db: Session = Depends(get_db), user: User = Depends(get_current_user_record)):
    orders = db.query(Order).filter(Order.user_id == user.id).order_by(Order.created_at.desc(), Order.id.desc()).all()
    return [map_order_to_out(o) for o in orders]


# Get Order by ID
@router.get("/{id}", response_model=OrderOut)
def get_order_by_id(id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user_record)):
    order = db.query(Order).filter(Order.id == id, Order.user_id == user.id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return map_order_to_out(order)


# Cancel Order
@router.post("/{id}/cancel", response_model=OrderOut)
def cancel_order(id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user_record)):
    order = db.query(Order).filter(Order.id == id, Order.user_id == user.id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.status in NON_CANCELLABLE:
        raise HTTPException(status_code=400, detail="Order cannot be cancelled")
    order.status = "CANCELLED"
    order.updated_at = datetime.utcnow()

    # Restore reserved stock
    for item in order.items:
        product = db.query(Product).filter(Product.id == item.product_id).first()
        if product:
            product.adjust_stock(item.quantity, item.selected_size, item.selected_color)

    db.commit()
    db.refresh(order)
    return map_order_to_out(order)


# Admin: List Orders
@admin_router.get("/", response_model=List[OrderOut])
def get_admin_orders(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1),
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    admin_email: str = Depends(require_admin),
):
    query = db.query(Order)
    if status:
        query = query.filter(Order.status == status.upper())
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(page * size).limit(size).all()
    return [map_order_to_out(o) for o in orders]


# Admin: Update Order Status
@admin_router.put("/{id}/status", response_model=OrderOut)
def admin_update_order_status(
    id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    admin_email: str = Depends(require_admin),
):
    order = db.query(Order).filter(Order.id == id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    # Normalize to uppercase even if client sends lowercase
    order.status = str(payload.status).upper()
    order.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(order)
    logger.info("Admin %s set order %s status to %s", admin_email, order.order_number, order.status)

    tpl = order_status_update(order.order_number, order.status)
    send_email(order.shipping_email, tpl["subject"], tpl["body"])
    return map_order_to_out(order)


# Admin: Update Payment Status
@admin_router.put("/{id}/payment-status", response_model=OrderOut)
def admin_update_payment_status(
    id: int,
    payload: OrderPaymentStatusUpdate,
    db: Session = Depends(get_db),
    admin_email: str = Depends(require_admin),
):
    order = db.query(Order).filter(Order.id == id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    order.payment_status = str(payload.paymentStatus).upper()
    order.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(order)
    return map_order_to_out(order)
