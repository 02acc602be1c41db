"""Razorpay payment gateway adapter.

Order creation goes through the official SDK; signature checks are plain
HMAC-SHA256 as documented by Razorpay, so they never touch the network.
"""
import hashlib
import hmac
import logging
from typing import Optional

from app.config import get_settings

logger = logging.getLogger(__name__)

# Values shipped in sample .env files; treated as "not configured"
PLACEHOLDER_KEYS = {"", "rzp_test_1234567890", "your-razorpay-key-secret"}


class PaymentGatewayError(Exception):
    pass


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


class RazorpayGateway:
    def __init__(self, key_id: str, key_secret: str, webhook_secret: str = ""):
        self.key_id = key_id or ""
        self.key_secret = key_secret or ""
        self.webhook_secret = webhook_secret or ""
        self._client = None

    @property
    def is_configured(self) -> bool:
        return self.key_id not in PLACEHOLDER_KEYS and self.key_secret not in PLACEHOLDER_KEYS

    def _get_client(self):
        if self._client is None:
            import razorpay

            self._client = razorpay.Client(auth=(self.key_id, self.key_secret))
        return self._client

    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: Optional[dict] = None) -> str:
        """Create a gateway order for ``amount_minor`` and return its reference."""
        if not self.is_configured:
            raise PaymentGatewayError("Razorpay keys not properly configured")
        try:
            order = self._get_client().order.create(data={
                "amount": amount_minor,
                "currency": currency,
                "receipt": receipt,
                "notes": notes or {},
                "payment_capture": 1,
            })
        except Exception as e:
            # SDK raises its own error classes plus requests' transport errors
            raise PaymentGatewayError(str(e)) from e
        return order["id"]

    def sign_payment(self, gateway_order_id: str, payment_id: str) -> str:
        return _hmac_hex(self.key_secret, f"{gateway_order_id}|{payment_id}".encode("utf-8"))

    def verify_payment_signature(self, gateway_order_id: str, payment_id: str, signature: str) -> bool:
        if not self.key_secret:
            return False
        expected = self.sign_payment(gateway_order_id, payment_id)
        return hmac.compare_digest(expected, signature or "")

    def verify_webhook_signature(self, body: bytes, signature: str) -> bool:
        if not self.webhook_secret:
            return False
        return hmac.compare_digest(_hmac_hex(self.webhook_secret, body), signature or "")


def get_payment_gateway() -> RazorpayGateway:
    settings = get_settings()
    return RazorpayGateway(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET,
        webhook_secret=settings.RAZORPAY_WEBHOOK_SECRET,
    )
