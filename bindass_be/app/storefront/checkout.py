"""Multi-step checkout: shipping info, payment method, review, submission.

Each state is a typed step carrying only the data validated so far. The cart
is cleared only after the server confirms the order (cash on delivery) or the
payment (online).
"""
import logging
from dataclasses import dataclass, field
from typing import Annotated, Dict, List, Literal, Optional, Protocol, Union

from pydantic import BaseModel, Field, ValidationError

from app.schemas.order import PaymentMethod, ShippingAddress
from app.services.currency import Currency, to_decimal, to_minor_units
from app.services.pricing import PriceBreakdown, PricingRules, price_breakdown
from app.storefront.cart import CartStore
from app.storefront.client import ApiError, StorefrontClient

logger = logging.getLogger(__name__)

REQUIRED_SHIPPING_FIELDS = ("firstName", "lastName", "email", "phone", "address", "city", "state", "zipCode")
PAYMENT_METHODS = ("online", "cashOnDelivery")


class CheckoutError(Exception):
    """Raised when the flow is driven out of order (e.g. submitting twice)."""


class ShippingStep(BaseModel):
    kind: Literal["shippingInfo"] = "shippingInfo"
    draft: Dict[str, str] = Field(default_factory=lambda: {"country": "India"})


class PaymentStep(BaseModel):
    kind: Literal["paymentMethod"] = "paymentMethod"
    shipping: ShippingAddress
    method: Optional[PaymentMethod] = None


class ReviewStep(BaseModel):
    kind: Literal["reviewOrder"] = "reviewOrder"
    shipping: ShippingAddress
    method: PaymentMethod


class SubmittingStep(BaseModel):
    kind: Literal["submitting"] = "submitting"
    shipping: ShippingAddress
    method: PaymentMethod


class SuccessStep(BaseModel):
    kind: Literal["success"] = "success"
    orderId: int
    orderNumber: str
    paymentMethod: PaymentMethod


class FailedStep(BaseModel):
    kind: Literal["failed"] = "failed"
    message: str
    shipping: ShippingAddress
    method: PaymentMethod


CheckoutState = Annotated[
    Union[ShippingStep, PaymentStep, ReviewStep, SubmittingStep, SuccessStep, FailedStep],
    Field(discriminator="kind"),
]


@dataclass
class Notice:
    level: str  # success, error, info
    message: str


@dataclass
class PaymentRequest:
    key_id: str
    amount: int  # minor units
    currency: str
    gateway_order_id: str
    order_number: str
    name: str
    description: str = "Order payment"
    prefill: Dict[str, str] = field(default_factory=dict)


@dataclass
class PaymentResult:
    gateway_order_id: str
    payment_id: str
    signature: str


class PaymentWidget(Protocol):
    def open(self, request: PaymentRequest) -> Optional[PaymentResult]:
        """Run the hosted payment UI; return None if the customer dismissed it."""


class CheckoutFlow:
    def __init__(
        self,
        cart: CartStore,
        client: StorefrontClient,
        widget: PaymentWidget,
        rules: Optional[PricingRules] = None,
        currency: Optional[Currency] = None,
        gateway_key_id: Optional[str] = None,
        store_name: str = "Bindass",
        on_cart_cleared=None,
    ):
        self.cart = cart
        self.client = client
        self.widget = widget
        self.rules = rules or PricingRules()
        self.currency = currency or Currency(code="INR", symbol="₹", name="Indian Rupee", exchangeRate=1)
        self.gateway_key_id = gateway_key_id
        self.store_name = store_name
        self.on_cart_cleared = on_cart_cleared
        self.state: CheckoutState = ShippingStep()
        self.errors: Dict[str, str] = {}
        self.notices: List[Notice] = []
        self._last_method: Optional[str] = None

    @classmethod
    def from_settings(cls, cart: CartStore, client: StorefrontClient, widget: PaymentWidget, **kwargs) -> "CheckoutFlow":
        settings = client.get_settings()
        payment = settings.get("paymentSettings") or {}
        return cls(
            cart,
            client,
            widget,
            rules=PricingRules(
                taxRate=to_decimal(settings["taxRate"]),
                shippingRate=to_decimal(settings["shippingRate"]),
                freeShippingThreshold=to_decimal(settings["freeShippingThreshold"]),
            ),
            currency=Currency(**settings["defaultCurrency"]),
            gateway_key_id=payment.get("razorpayKeyId") if payment.get("razorpayEnabled") else None,
            store_name=settings.get("siteName") or "Bindass",
            **kwargs,
        )

    @property
    def step(self) -> str:
        return self.state.kind

    @property
    def is_submitting(self) -> bool:
        return self.state.kind == "submitting"

    def pricing(self) -> PriceBreakdown:
        return price_breakdown(self.cart.total_amount, self.rules)

    def _notify(self, level: str, message: str) -> None:
        self.notices.append(Notice(level, message))

    def _require(self, kind: str) -> None:
        if self.state.kind == "submitting":
            raise CheckoutError("Order submission already in progress")
        if self.state.kind != kind:
            raise CheckoutError(f"Expected step {kind}, flow is at {self.state.kind}")

    # Step 1: shipping information

    def submit_shipping(self, **fields) -> bool:
        self._require("shippingInfo")
        draft = dict(self.state.draft)
        draft.update({k: "" if v is None else str(v) for k, v in fields.items()})
        self.state = ShippingStep(draft=draft)

        missing = [f for f in REQUIRED_SHIPPING_FIELDS if not draft.get(f, "").strip()]
        if missing:
            self.errors = {f: "This field is required" for f in missing}
            self._notify("error", "Please fill in all required fields")
            return False
        try:
            shipping = ShippingAddress(**draft)
        except ValidationError as e:
            self.errors = {str(err["loc"][0]): err["msg"] for err in e.errors()}
            self._notify("error", "Please correct the highlighted fields")
            return False

        self.errors = {}
        self.state = PaymentStep(shipping=shipping, method=self._last_method)
        return True

    # Step 2: payment method

    def choose_payment(self, method: str) -> None:
        self._require("paymentMethod")
        if method not in PAYMENT_METHODS:
            raise CheckoutError(f"Unknown payment method: {method}")
        self._last_method = method
        self.state = ReviewStep(shipping=self.state.shipping, method=method)

    def back(self) -> None:
        """Go one step back, keeping what was already entered."""
        state = self.state
        if state.kind == "submitting":
            raise CheckoutError("Cannot go back while the order is being submitted")
        if state.kind == "paymentMethod":
            self.state = ShippingStep(draft=state.shipping.model_dump(mode="json"))
        elif state.kind == "reviewOrder":
            self.state = PaymentStep(shipping=state.shipping, method=state.method)
        elif state.kind == "failed":
            self.state = ReviewStep(shipping=state.shipping, method=state.method)

    # Step 3: review and submit

    def place_order(self):
        self._require("reviewOrder")
        if self.cart.is_empty:
            self._notify("error", "Your cart is empty")
            return self.state

        shipping, method = self.state.shipping, self.state.method
        self.state = SubmittingStep(shipping=shipping, method=method)
        payload = self._order_payload(shipping, method, self.pricing())

        try:
            order = self.client.create_order(payload)
        except ApiError as e:
            logger.warning("Order creation failed (%s): %s", method, e)
            if e.status_code is None:
                # No response: the order may already exist on the server
                return self._fail(shipping, method, "Could not reach the store. Check your orders before trying again.")
            return self._fallback_to_cod(shipping, method, payload)

        if method == "cashOnDelivery":
            return self._succeed(order, "Order placed successfully! You can pay when the order is delivered.")
        return self._collect_payment(shipping, order)

    def _order_payload(self, shipping: ShippingAddress, method: str, pricing: PriceBreakdown) -> dict:
        return {
            "items": [
                {
                    "productId": line.productId,
                    "quantity": line.quantity,
                    "selectedSize": line.selectedSize,
                    "selectedColor": line.selectedColor,
                    "unitPrice": float(line.unitPrice),
                    "name": line.name,
                    "image": line.image,
                }
                for line in self.cart.items
            ],
            "shippingAddress": shipping.model_dump(mode="json"),
            "paymentMethod": method,
            "pricing": pricing.as_payload(),
        }

    def _fallback_to_cod(self, shipping: ShippingAddress, method: str, payload: dict):
        logger.info("Retrying order as cash on delivery")
        try:
            order = self.client.create_order({**payload, "paymentMethod": "cashOnDelivery"})
        except ApiError as e:
            logger.error("Cash on delivery fallback failed: %s", e)
            if method == "online":
                return self._fail(shipping, method, "Payment failed. Please try Cash on Delivery or contact support.")
            return self._fail(shipping, method, e.message or "Failed to create order")
        self._last_method = "cashOnDelivery"
        return self._succeed(order, "Order placed with Cash on Delivery!")

    def _collect_payment(self, shipping: ShippingAddress, order: dict):
        gateway_order_id = order.get("gatewayOrderId")
        if not self.gateway_key_id or not gateway_order_id:
            self._notify("error", "Online payment is not configured. Please try Cash on Delivery.")
            self.state = PaymentStep(shipping=shipping, method="online")
            return self.state

        request = PaymentRequest(
            key_id=self.gateway_key_id,
            amount=to_minor_units(order["pricing"]["total"]),
            currency=order.get("currency") or self.currency.code,
            gateway_order_id=gateway_order_id,
            order_number=order["orderNumber"],
            name=self.store_name,
            prefill={
                "name": f"{shipping.firstName} {shipping.lastName}",
                "email": shipping.email,
                "contact": shipping.phone,
            },
        )
        result = self.widget.open(request)
        if result is None:
            self._notify("info", "Payment cancelled")
            self.state = ReviewStep(shipping=shipping, method="online")
            return self.state

        try:
            self.client.verify_payment(order["id"], result.gateway_order_id, result.payment_id, result.signature)
        except ApiError as e:
            logger.warning("Payment verification failed for %s: %s", order["orderNumber"], e)
            self._notify("error", "Payment verification failed")
            self.state = PaymentStep(shipping=shipping, method="online")
            return self.state
        return self._succeed(order, "Payment successful!")

    def _succeed(self, order: dict, message: str):
        self.cart.clear()
        if self.on_cart_cleared:
            self.on_cart_cleared(self.cart)
        self.state = SuccessStep(
            orderId=order["id"],
            orderNumber=order["orderNumber"],
            paymentMethod=order["paymentMethod"],
        )
        self._notify("success", message)
        return self.state

    def _fail(self, shipping: ShippingAddress, method: str, message: str):
        self.state = FailedStep(message=message, shipping=shipping, method=method)
        self._notify("error", message)
        return self.state
