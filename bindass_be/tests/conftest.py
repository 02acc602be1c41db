import os

# Must be set before any app module reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_BACKEND"] = "console"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.main import app as fastapi_app
from app.models.product import Product
from app.models.user import Base, SessionLocal, User, engine
from app.services.gateway import PaymentGatewayError, RazorpayGateway, get_payment_gateway
from app.services.pricing import PricingRules, price_breakdown

SHIPPING = {
    "firstName": "Asuka",
    "lastName": "Langley",
    "email": "asuka@nerv.jp",
    "phone": "9876543210",
    "address": "2-1 Misato Apartments",
    "city": "Mumbai",
    "state": "Maharashtra",
    "zipCode": "400001",
    "country": "India",
}


class FakeGateway(RazorpayGateway):
    """Real signature checks, canned order creation."""

    def __init__(self):
        super().__init__("rzp_test_fake", "test_secret", "whsec_test")
        self.fail = False
        self.created = []

    def create_order(self, amount_minor, currency, receipt, notes=None):
        if self.fail:
            raise PaymentGatewayError("Gateway unreachable")
        self.created.append({"amount": amount_minor, "currency": currency, "receipt": receipt})
        return f"order_fake{len(self.created)}"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def gateway():
    fake = FakeGateway()
    fastapi_app.dependency_overrides[get_payment_gateway] = lambda: fake
    yield fake
    fastapi_app.dependency_overrides.pop(get_payment_gateway, None)


@pytest.fixture
def users(db):
    customer = User(first_name="Asuka", last_name="Langley", email="asuka@nerv.jp", password="eva-02")
    other = User(first_name="Shinji", last_name="Ikari", email="shinji@nerv.jp", password="eva-01")
    admin = User(first_name="Misato", last_name="Katsuragi", email="misato@admin", password="penpen", role="ADMIN")
    db.add_all([customer, other, admin])
    db.commit()
    return {"customer": customer.id, "other": other.id, "admin": admin.id}


def _client(email, password):
    client = TestClient(fastapi_app)
    client.auth = (email, password)
    return client


@pytest.fixture
def customer_client(users):
    return _client("asuka@nerv.jp", "eva-02")


@pytest.fixture
def other_client(users):
    return _client("shinji@nerv.jp", "eva-01")


@pytest.fixture
def admin_client(users):
    return _client("misato@admin", "penpen")


@pytest.fixture
def anon_client():
    return TestClient(fastapi_app)


@pytest.fixture
def products(db):
    hoodie = Product(
        name="Akatsuki Cloud Hoodie",
        description="Heavyweight fleece with embroidered red clouds",
        price=Decimal("2499"),
        compare_price=Decimal("2999"),
        category="apparel",
        sub_category="hoodies",
        images=["/img/akatsuki-front.jpg", "/img/akatsuki-back.jpg"],
        sizes=["M", "L"],
        colors=["Black"],
        variants=[
            {"size": "M", "color": "Black", "stock": 5},
            {"size": "L", "color": "Black", "stock": 1},
        ],
        stock=6,
        featured=True,
    )
    figure = Product(
        name="Gojo Satoru Figure",
        price=Decimal("1500"),
        category="figures",
        images=["/img/gojo.jpg"],
        stock=3,
    )
    poster = Product(
        name="Spirited Away Poster",
        price=Decimal("499"),
        category="posters",
        images=["/img/spirited-away.jpg"],
        stock=0,
        track_quantity=False,
    )
    plush = Product(name="Totoro Plush", price=Decimal("899"), category="plush", stock=0)
    draft = Product(name="Unreleased Mecha Kit", price=Decimal("3999"), category="figures", stock=10, status="draft")
    db.add_all([hoodie, figure, poster, plush, draft])
    db.commit()
    return {
        "hoodie": hoodie.id,
        "figure": figure.id,
        "poster": poster.id,
        "plush": plush.id,
        "draft": draft.id,
    }


@pytest.fixture
def shipping():
    return dict(SHIPPING)


@pytest.fixture
def place_order(customer_client, shipping):
    """Submit an order the way the checkout flow does, pricing computed client-side."""

    def _place(lines, method="cashOnDelivery", client=None, total=None):
        subtotal = sum(Decimal(str(line["unitPrice"])) * line["quantity"] for line in lines)
        pricing = price_breakdown(subtotal, PricingRules()).as_payload()
        if total is not None:
            pricing["total"] = total
        return (client or customer_client).post("/api/orders/", json={
            "items": lines,
            "shippingAddress": shipping,
            "paymentMethod": method,
            "pricing": pricing,
        })

    return _place


@pytest.fixture
def hoodie_line(products):
    return {
        "productId": products["hoodie"],
        "quantity": 2,
        "unitPrice": 2499,
        "selectedSize": "M",
        "selectedColor": "Black",
    }


@pytest.fixture
def set_status(admin_client):
    def _set(order_id, status):
        response = admin_client.put(f"/api/admin/orders/{order_id}/status", json={"status": status})
        assert response.status_code == 200, response.text
        return response.json()

    return _set
