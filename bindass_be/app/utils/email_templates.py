from typing import Dict

from app.config import get_settings


def _app_name() -> str:
    return get_settings().STORE_NAME


def order_confirmation(order_number: str, total: str, item_count: int, payment_method: str, customer_name: str = "") -> Dict[str, str]:
    subject = f"Order {order_number} Confirmation"
    if payment_method == "cashOnDelivery":
        payment_note = "You can pay in cash when the order is delivered."
    else:
        payment_note = "We'll confirm once your online payment is received."
    body = (
        f"Hi {customer_name or 'there'},\n\nThank you for your order!\n\n"
        f"Order: {order_number}\n"
        f"Items: {item_count}\nTotal: {total}\n\n"
        f"{payment_note}\n"
        f"-- The {_app_name()} Team"
    )
    return {"subject": subject, "body": body}


def order_status_update(order_number: str, new_status: str) -> Dict[str, str]:
    subject = f"Order {order_number} Status Updated"
    body = (
        f"Your order {order_number} status is now: {new_status}.\n"
        "Thank you for shopping with us."
    )
    return {"subject": subject, "body": body}


def payment_received(order_number: str, payment_id: str) -> Dict[str, str]:
    subject = f"Payment received for order {order_number}"
    body = (
        f"We've received your payment for order {order_number}.\n"
        f"Payment reference: {payment_id}\n\n"
        f"-- The {_app_name()} Team"
    )
    return {"subject": subject, "body": body}


def review_received(title: str) -> Dict[str, str]:
    subject = "Thanks for your review"
    body = (
        f'Your review "{title}" was submitted and will appear once a moderator approves it.\n'
        f"-- The {_app_name()} Team"
    )
    return {"subject": subject, "body": body}
