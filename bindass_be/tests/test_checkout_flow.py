from decimal import Decimal

import httpx
import pytest

from app.storefront.cart import CartLine, CartStore
from app.storefront.checkout import CheckoutError, CheckoutFlow, PaymentResult, SubmittingStep
from app.storefront.client import StorefrontClient
from app.storefront.storage import SnapshotStorage


class RecordingClient(StorefrontClient):
    def __init__(self, http):
        super().__init__(http)
        self.submitted = []

    def create_order(self, payload):
        self.submitted.append(payload["paymentMethod"])
        return super().create_order(payload)


class DroppedResponse:
    """Delivers the first order submission to the server, then times out."""

    def __init__(self, http):
        self.http = http
        self.dropped = False

    def request(self, method, url, **kwargs):
        response = self.http.request(method, url, **kwargs)
        if method == "POST" and url == "/api/orders/" and not self.dropped:
            self.dropped = True
            raise httpx.ReadTimeout("timed out", request=response.request)
        return response


class FakeWidget:
    """Stands in for the hosted payment UI."""

    def __init__(self, gateway, outcome="pay"):
        self.gateway = gateway
        self.outcome = outcome
        self.requests = []
        self.on_open = None

    def open(self, request):
        self.requests.append(request)
        if self.on_open:
            self.on_open()
        if self.outcome == "dismiss":
            return None
        payment_id = "pay_Nx81"
        signature = self.gateway.sign_payment(request.gateway_order_id, payment_id)
        if self.outcome == "forge":
            signature = "0" * 64
        return PaymentResult(request.gateway_order_id, payment_id, signature)


@pytest.fixture
def cart(products):
    store = CartStore()
    store.add_item(
        CartLine(
            productId=products["hoodie"],
            name="Akatsuki Cloud Hoodie",
            unitPrice=Decimal("2499"),
            image="/img/akatsuki-front.jpg",
            selectedSize="M",
            selectedColor="Black",
        ),
        quantity=2,
        max_quantity=5,
    )
    return store


@pytest.fixture
def api(customer_client):
    return RecordingClient(customer_client)


@pytest.fixture
def widget(gateway):
    return FakeWidget(gateway)


@pytest.fixture
def flow(cart, api, widget):
    return CheckoutFlow.from_settings(cart, api, widget)


@pytest.fixture
def advance_to_review(shipping):
    def _advance(flow, method):
        assert flow.submit_shipping(**shipping)
        flow.choose_payment(method)
        assert flow.step == "reviewOrder"

    return _advance


def test_settings_drive_pricing(flow):
    assert flow.gateway_key_id == "rzp_test_fake"
    assert flow.currency.code == "INR"
    pricing = flow.pricing()
    assert pricing.subtotal == Decimal("4998")
    assert pricing.shipping == 0
    assert pricing.tax == Decimal("899.64")
    assert pricing.total == Decimal("5897.64")


def test_empty_required_field_blocks_shipping_step(flow, shipping):
    incomplete = dict(shipping, phone="")
    assert flow.submit_shipping(**incomplete) is False
    assert flow.step == "shippingInfo"
    assert flow.errors == {"phone": "This field is required"}
    assert flow.notices[-1].level == "error"

    # previously entered fields are kept in the draft
    assert flow.submit_shipping(phone="9876543210") is True
    assert flow.step == "paymentMethod"
    assert flow.errors == {}


def test_malformed_email_blocks_shipping_step(flow, shipping):
    assert flow.submit_shipping(**dict(shipping, email="asuka-at-nerv")) is False
    assert "email" in flow.errors


def test_back_navigation_preserves_entries(flow, advance_to_review):
    advance_to_review(flow, "online")
    flow.back()
    assert flow.step == "paymentMethod"
    assert flow.state.method == "online"
    flow.back()
    assert flow.step == "shippingInfo"
    assert flow.state.draft["city"] == "Mumbai"

    assert flow.submit_shipping() is True
    assert flow.state.method == "online"


def test_steps_must_be_taken_in_order(flow, shipping):
    with pytest.raises(CheckoutError):
        flow.choose_payment("online")
    with pytest.raises(CheckoutError):
        flow.place_order()
    flow.submit_shipping(**shipping)
    with pytest.raises(CheckoutError):
        flow.choose_payment("upi")


def test_cash_on_delivery_clears_cart_without_gateway(flow, cart, api, gateway, widget, advance_to_review):
    advance_to_review(flow, "cashOnDelivery")
    state = flow.place_order()

    assert state.kind == "success"
    assert state.paymentMethod == "cashOnDelivery"
    assert cart.is_empty
    assert gateway.created == []
    assert widget.requests == []
    order = api.get_order(state.orderId)
    assert order["pricing"]["total"] == 5897.64
    assert order["orderNumber"] == state.orderNumber


def test_online_payment_success(flow, cart, api, widget, advance_to_review):
    advance_to_review(flow, "online")
    state = flow.place_order()

    assert state.kind == "success"
    assert state.paymentMethod == "online"
    assert cart.is_empty
    request = widget.requests[0]
    assert request.amount == 589764
    assert request.currency == "INR"
    assert request.key_id == "rzp_test_fake"
    assert request.gateway_order_id == "order_fake1"
    assert request.prefill == {"name": "Asuka Langley", "email": "asuka@nerv.jp", "contact": "9876543210"}
    order = api.get_order(state.orderId)
    assert order["paymentStatus"] == "PAID"
    assert order["status"] == "CONFIRMED"


def test_failed_verification_returns_to_payment_method(flow, cart, widget, advance_to_review):
    widget.outcome = "forge"
    advance_to_review(flow, "online")
    state = flow.place_order()

    assert state.kind == "paymentMethod"
    assert state.method == "online"
    assert cart.total_items == 2
    assert flow.notices[-1].message == "Payment verification failed"


def test_dismissed_widget_returns_to_review(flow, cart, widget, advance_to_review):
    widget.outcome = "dismiss"
    advance_to_review(flow, "online")
    state = flow.place_order()

    assert state.kind == "reviewOrder"
    assert not flow.is_submitting
    assert cart.total_items == 2
    assert flow.notices[-1].message == "Payment cancelled"


def test_online_creation_failure_falls_back_to_cod(flow, cart, api, gateway, widget, advance_to_review):
    gateway.fail = True
    advance_to_review(flow, "online")
    state = flow.place_order()

    assert state.kind == "success"
    assert state.paymentMethod == "cashOnDelivery"
    assert cart.is_empty
    assert widget.requests == []
    assert api.get_order(state.orderId)["paymentMethod"] == "cashOnDelivery"
    assert api.submitted == ["online", "cashOnDelivery"]


def test_fallback_failure_reports_error(flow, cart, api, gateway, admin_client, advance_to_review):
    admin_client.put("/api/admin/settings", json={"codEnabled": False})
    gateway.fail = True
    advance_to_review(flow, "online")
    state = flow.place_order()

    assert state.kind == "failed"
    assert "Cash on Delivery" in state.message
    assert api.submitted == ["online", "cashOnDelivery"]
    assert cart.total_items == 2
    flow.back()
    assert flow.step == "reviewOrder"


def test_cod_failure_is_retried_once(cart, api, widget, customer_client, advance_to_review):
    stale = CartStore()
    stale.add_item(cart.items[0].model_copy(update={"unitPrice": Decimal("1999")}), quantity=2)
    flow = CheckoutFlow.from_settings(stale, api, widget)
    advance_to_review(flow, "cashOnDelivery")
    state = flow.place_order()

    assert state.kind == "failed"
    assert state.message == "Price mismatch detected"
    assert api.submitted == ["cashOnDelivery", "cashOnDelivery"]
    assert stale.total_items == 2
    assert customer_client.get("/api/orders/").json() == []


def test_lost_response_is_not_resubmitted(cart, widget, gateway, customer_client, advance_to_review):
    api = RecordingClient(DroppedResponse(customer_client))
    flow = CheckoutFlow.from_settings(cart, api, widget)
    advance_to_review(flow, "online")
    state = flow.place_order()

    assert state.kind == "failed"
    assert api.submitted == ["online"]
    assert cart.total_items == 2
    assert widget.requests == []
    orders = customer_client.get("/api/orders/").json()
    assert [o["paymentMethod"] for o in orders] == ["online"]
    assert len(gateway.created) == 1


def test_empty_cart_cannot_be_submitted(api, widget, products, advance_to_review):
    flow = CheckoutFlow.from_settings(CartStore(), api, widget)
    advance_to_review(flow, "cashOnDelivery")
    assert flow.place_order().kind == "reviewOrder"
    assert flow.notices[-1].message == "Your cart is empty"


def test_no_reentry_while_submitting(flow, widget, advance_to_review):
    seen = []

    def reenter():
        assert isinstance(flow.state, SubmittingStep)
        for action in (flow.place_order, flow.back):
            with pytest.raises(CheckoutError):
                action()
            seen.append(action.__name__)

    widget.on_open = reenter
    advance_to_review(flow, "online")
    assert flow.place_order().kind == "success"
    assert seen == ["place_order", "back"]


def test_cleared_cart_is_persisted(cart, api, widget, tmp_path, advance_to_review):
    storage = SnapshotStorage(tmp_path / "state.json")
    storage.save(cart=cart)
    flow = CheckoutFlow.from_settings(cart, api, widget, on_cart_cleared=lambda c: storage.save(cart=c))
    advance_to_review(flow, "cashOnDelivery")
    flow.place_order()

    restored, _, _ = storage.rehydrate()
    assert restored.is_empty
