from app.main import app as fastapi_app
from app.services.gateway import RazorpayGateway, get_payment_gateway


def test_public_settings_seeded_from_config(anon_client):
    body = anon_client.get("/api/settings").json()
    assert body["siteName"] == "Bindass"
    assert body["defaultCurrency"]["code"] == "INR"
    assert [c["code"] for c in body["supportedCurrencies"]] == ["INR", "USD", "EUR"]
    assert body["taxRate"] == 0.18
    assert body["shippingRate"] == 99
    assert body["freeShippingThreshold"] == 2000
    assert body["paymentSettings"] == {"razorpayEnabled": True, "codEnabled": True, "razorpayKeyId": "rzp_test_fake"}


def test_unconfigured_gateway_disables_online_payment(anon_client):
    fastapi_app.dependency_overrides[get_payment_gateway] = lambda: RazorpayGateway("rzp_test_1234567890", "")
    payment = anon_client.get("/api/settings").json()["paymentSettings"]
    assert payment["razorpayEnabled"] is False
    assert payment["razorpayKeyId"] is None


def test_admin_settings_require_admin(customer_client, admin_client):
    assert customer_client.get("/api/admin/settings").status_code == 403
    assert customer_client.put("/api/admin/settings", json={"taxRate": 0.05}).status_code == 403
    assert admin_client.get("/api/admin/settings").status_code == 200


def test_admin_updates_pricing_rules(admin_client, anon_client, place_order, products):
    body = admin_client.put("/api/admin/settings", json={"taxRate": 0.05, "shippingRate": 49, "siteName": " Bindass Otaku "}).json()
    assert body["taxRate"] == 0.05
    assert body["siteName"] == "Bindass Otaku"
    assert anon_client.get("/api/settings").json()["shippingRate"] == 49

    # client still using the old 18% rules
    line = {"productId": products["figure"], "quantity": 1, "unitPrice": 1500}
    assert place_order([line]).status_code == 400


def test_currency_changes_are_validated(admin_client):
    bad_default = admin_client.put("/api/admin/settings", json={"defaultCurrency": "USD"})
    assert bad_default.status_code == 400

    missing = admin_client.put("/api/admin/settings", json={"defaultCurrency": "GBP"})
    assert missing.status_code == 400

    usd_only = [{"code": "USD", "symbol": "$", "name": "US Dollar", "exchangeRate": 1}]
    body = admin_client.put("/api/admin/settings", json={"defaultCurrency": "usd", "supportedCurrencies": usd_only}).json()
    assert body["defaultCurrency"]["code"] == "USD"
    assert len(body["supportedCurrencies"]) == 1


def test_empty_update_rejected(admin_client):
    assert admin_client.put("/api/admin/settings", json={}).status_code == 400
