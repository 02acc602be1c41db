def add(client, product_id, quantity=1, size=None, color=None):
    return client.post("/api/cart/", json={
        "productId": product_id,
        "quantity": quantity,
        "selectedSize": size,
        "selectedColor": color,
    })


def test_cart_requires_credentials(anon_client, users):
    assert anon_client.get("/api/cart/").status_code == 401

    anon_client.auth = ("asuka@nerv.jp", "wrong")
    assert anon_client.get("/api/cart/").status_code == 401


def test_new_cart_is_empty(customer_client):
    body = customer_client.get("/api/cart/").json()
    assert body == {"items": [], "totalItems": 0, "totalAmount": 0, "isOpen": False}


def test_add_captures_product_snapshot(customer_client, products):
    response = add(customer_client, products["hoodie"], 2, "M", "Black")
    assert response.status_code == 200
    body = response.json()
    assert body["totalItems"] == 2
    assert body["totalAmount"] == 4998
    line = body["items"][0]
    assert line["unitPrice"] == 2499
    assert line["image"] == "/img/akatsuki-front.jpg"
    assert line["maxQuantity"] == 5


def test_add_merges_and_clamps_to_stock(customer_client, products):
    add(customer_client, products["hoodie"], 2, "M", "Black")
    body = add(customer_client, products["hoodie"], 10, " M ", "Black").json()
    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 5


def test_variants_are_separate_lines(customer_client, products):
    add(customer_client, products["hoodie"], 1, "M", "Black")
    body = add(customer_client, products["hoodie"], 1, "L", "Black").json()
    assert [i["selectedSize"] for i in body["items"]] == ["M", "L"]
    assert body["items"][1]["maxQuantity"] == 1


def test_add_rejects_bad_selections(customer_client, products):
    assert add(customer_client, products["hoodie"], 1, "XL", "Black").status_code == 400
    assert add(customer_client, products["plush"]).status_code == 400
    assert add(customer_client, products["draft"]).status_code == 404
    assert add(customer_client, 9999).status_code == 404
    assert add(customer_client, products["figure"], 0).status_code == 422


def test_untracked_stock_allows_default_maximum(customer_client, products):
    body = add(customer_client, products["poster"], 3).json()
    assert body["items"][0]["maxQuantity"] == 99


def test_update_quantity_is_clamped(customer_client, products):
    add(customer_client, products["figure"], 2)
    update = {"productId": products["figure"], "quantity": 0}
    assert customer_client.put("/api/cart/", json=update).json()["items"][0]["quantity"] == 1

    update["quantity"] = 50
    body = customer_client.put("/api/cart/", json=update).json()
    assert body["items"][0]["quantity"] == 3
    assert body["totalAmount"] == 4500


def test_remove_and_clear(customer_client, products):
    add(customer_client, products["figure"])
    add(customer_client, products["hoodie"], 1, "M", "Black")

    params = {"productId": products["hoodie"], "selectedSize": "L", "selectedColor": "Black"}
    assert customer_client.delete("/api/cart/", params=params).status_code == 404

    params["selectedSize"] = "M"
    body = customer_client.delete("/api/cart/", params=params).json()
    assert [i["productId"] for i in body["items"]] == [products["figure"]]

    body = customer_client.delete("/api/cart/clear").json()
    assert body["items"] == []
    assert body["totalAmount"] == 0


def test_carts_are_per_user(customer_client, other_client, products):
    add(customer_client, products["figure"])
    assert other_client.get("/api/cart/").json()["items"] == []
