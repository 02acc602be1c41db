def test_list_hides_inactive_products(anon_client, products):
    response = anon_client.get("/api/products/")
    assert response.status_code == 200
    names = {p["name"] for p in response.json()}
    assert "Unreleased Mecha Kit" not in names
    assert len(names) == 4


def test_filters(anon_client, products):
    figures = anon_client.get("/api/products/", params={"category": "figures"}).json()
    assert [p["name"] for p in figures] == ["Gojo Satoru Figure"]

    found = anon_client.get("/api/products/", params={"search": "totoro"}).json()
    assert [p["id"] for p in found] == [products["plush"]]

    featured = anon_client.get("/api/products/", params={"featured": True}).json()
    assert [p["id"] for p in featured] == [products["hoodie"]]


def test_product_detail(anon_client, products):
    hoodie = anon_client.get(f"/api/products/{products['hoodie']}").json()
    assert hoodie["price"] == 2499
    assert hoodie["comparePrice"] == 2999
    assert hoodie["discountPercent"] == 17
    assert hoodie["variants"][0] == {"size": "M", "color": "Black", "stock": 5}
    assert hoodie["inStock"] is True

    plush = anon_client.get(f"/api/products/{products['plush']}").json()
    assert plush["inStock"] is False

    poster = anon_client.get(f"/api/products/{products['poster']}").json()
    assert poster["inStock"] is True


def test_unknown_product_404(anon_client, products):
    assert anon_client.get("/api/products/9999").status_code == 404
