from fastapi import APIRouter, Depends, HTTPException, Request, Header
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
import json
import logging

from app.models.user import User, get_db
from app.models.order import Order
from app.routers.cart import clear_user_cart
from app.schemas.payment import PaymentVerify, PaymentVerifyOut
from app.services.gateway import RazorpayGateway, get_payment_gateway
from app.utils.email_templates import payment_received
from app.utils.mailer import send_email
from app.utils.security import get_current_user_record

logger = logging.getLogger(__name__)

router = APIRouter()
webhook_router = APIRouter()


def mark_order_paid(db: Session, order: Order, payment_id: str, signature: Optional[str] = None) -> bool:
    """Record a captured payment; returns False if the order was already paid."""
    if order.payment_status == "PAID":
        return False
    order.payment_status = "PAID"
    order.gateway_payment_id = payment_id
    if signature:
        order.gateway_signature = signature
    if order.status == "PENDING":
        order.status = "CONFIRMED"
    order.updated_at = datetime.utcnow()
    clear_user_cart(db, order.user_id)
    return True


# Verify Payment (client callback after the hosted widget completes)
@router.post("/verify", response_model=PaymentVerifyOut)
def verify_payment(
    payload: PaymentVerify,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    order = db.query(Order).filter(Order.id == payload.orderId, Order.user_id == user.id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.payment_method != "online" or order.gateway_order_id != payload.gatewayOrderId:
        raise HTTPException(status_code=400, detail="Payment does not belong to this order")

    if not gateway.verify_payment_signature(payload.gatewayOrderId, payload.paymentId, payload.signature):
        logger.warning("Invalid payment signature for order %s", order.order_number)
        if order.payment_status != "PAID":
            order.payment_status = "FAILED"
            order.updated_at = datetime.utcnow()
            db.commit()
        raise HTTPException(status_code=400, detail="Invalid payment signature")

    newly_paid = mark_order_paid(db, order, payload.paymentId, payload.signature)
    db.commit()
    db.refresh(order)
    if newly_paid:
        logger.info("Payment %s verified for order %s", payload.paymentId, order.order_number)
        tpl = payment_received(order.order_number, payload.paymentId)
        send_email(order.shipping_email or user.email, tpl["subject"], tpl["body"])

    return PaymentVerifyOut(
        message="Payment verified successfully",
        orderId=order.id,
        orderNumber=order.order_number,
        paymentId=payload.paymentId,
        status="completed",
        paymentStatus=order.payment_status,
    )


# Gateway webhook (server-to-server payment events)
@webhook_router.post("/razorpay")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    body = await request.body()
    if not gateway.verify_webhook_signature(body, x_razorpay_signature or ""):
        raise HTTPException(status_code=400, detail="Invalid webhook signature")
    try:
        event = json.loads(body)
        entity = event["payload"]["payment"]["entity"]
    except (ValueError, KeyError, TypeError):
        raise HTTPException(status_code=400, detail="Malformed webhook payload")

    event_type = event.get("event")
    if event_type not in ("payment.captured", "payment.failed"):
        return {"status": "ignored"}

    order = db.query(Order).filter(Order.gateway_order_id == entity.get("order_id")).first()
    if not order:
        logger.warning("Webhook %s for unknown gateway order %s", event_type, entity.get("order_id"))
        raise HTTPException(status_code=404, detail="Order not found")

    if event_type == "payment.captured":
        mark_order_paid(db, order, entity.get("id"))
    elif order.payment_status != "PAID":
        order.payment_status = "FAILED"
        order.updated_at = datetime.utcnow()
    db.commit()
    logger.info("Webhook %s processed for order %s", event_type, order.order_number)
    return {"status": "ok", "paymentStatus": order.payment_status}
