import re


def test_public_catalog_listing(client):
    assert len(client.get("/api/categories").get_json()["categories"]) == 4
    assert len(client.get("/api/areas").get_json()["areas"]) == 5
    products = client.get("/api/products").get_json()["products"]
    assert {p["slug"] for p in products} >= {"catering-gen-z", "nasi-box-ekonomis"}


def test_product_detail_has_customization_groups(client):
    products = client.get("/api/products").get_json()["products"]
    genz = next(p for p in products if p["slug"] == "catering-gen-z")
    detail = client.get(f"/api/products/{genz['id']}").get_json()["product"]
    groups = {g["type"]: g for g in detail["customizationOptions"]}
    assert groups["Nasi"]["selectionMode"] == "single"
    assert groups["Nasi"]["required"] is True
    assert groups["Ekstra"]["selectionMode"] == "multi"
    assert groups["Ekstra"]["required"] is False
    assert detail["price"] == "25000.00"


def test_product_filters(client):
    categories = {c["slug"]: c["id"] for c in client.get("/api/categories").get_json()["categories"]}
    areas = {a["slug"]: a["id"] for a in client.get("/api/areas").get_json()["areas"]}

    by_category = client.get(f"/api/products?category={categories['nasi-kotak']}").get_json()["products"]
    assert [p["slug"] for p in by_category] == ["nasi-box-ekonomis"]
    by_area = client.get(f"/api/products?areaId={areas['bogor']}").get_json()["products"]
    assert [p["slug"] for p in by_area] == ["paket-keluarga-besar"]
    featured = client.get("/api/products?featured=true").get_json()["products"]
    assert [p["slug"] for p in featured] == ["catering-gen-z"]


def test_missing_and_non_numeric_ids(client):
    assert client.get("/api/products/9999").status_code == 404
    assert client.get("/api/products/abc").status_code == 404
    assert client.get("/api/categories/abc").status_code == 404


def test_catalog_mutations_require_admin(client, customer_client):
    payload = {"name": "Snack Box"}
    assert client.post("/api/categories", json=payload).status_code == 401
    assert customer_client.post("/api/categories", json=payload).status_code == 403
    assert customer_client.post("/api/areas", json={"name": "Cibubur"}).status_code == 403
    assert customer_client.delete("/api/products/1").status_code == 403


def test_category_slug_must_be_unique(admin_client):
    resp = admin_client.post("/api/categories", json={"name": "Snack Box!"})
    assert resp.status_code == 201
    assert resp.get_json()["category"]["slug"] == "snack-box"

    dup = admin_client.post("/api/categories", json={"name": "Another", "slug": "snack-box"})
    assert dup.status_code == 409
    assert dup.get_json()["message"] == "Slug must be unique."


def test_category_with_products_cannot_be_deleted(admin_client):
    categories = {c["slug"]: c["id"] for c in admin_client.get("/api/categories").get_json()["categories"]}
    assert admin_client.delete(f"/api/categories/{categories['nasi-kotak']}").status_code == 409

    created = admin_client.post("/api/categories", json={"name": "Kosong"}).get_json()["category"]
    assert admin_client.delete(f"/api/categories/{created['id']}").status_code == 200
    assert admin_client.get(f"/api/categories/{created['id']}").status_code == 404


def test_colliding_product_slug_gets_suffix(admin_client):
    category_id = admin_client.get("/api/categories").get_json()["categories"][0]["id"]
    resp = admin_client.post(
        "/api/products",
        json={"name": "Catering Gen-Z", "slug": "catering-gen-z", "price": 27000, "categoryId": category_id},
    )
    assert resp.status_code == 201
    slug = resp.get_json()["product"]["slug"]
    assert slug.startswith("catering-gen-z-")
    assert slug != "catering-gen-z"


def test_product_create_and_update(admin_client):
    category_id = admin_client.get("/api/categories").get_json()["categories"][0]["id"]
    resp = admin_client.post(
        "/api/products",
        json={
            "name": "Tumpeng Mini",
            "price": "45000",
            "categoryId": category_id,
            "minOrderQty": 5,
            "customizationOptions": [
                {"type": "Sambal", "selectionMode": "multi", "options": [{"name": "Matah", "harga": ""}]}
            ],
        },
    )
    assert resp.status_code == 201
    product = resp.get_json()["product"]
    assert product["slug"] == "tumpeng-mini"
    assert product["minOrderQty"] == 5
    assert product["customizationOptions"][0]["options"][0]["harga"] == "0"

    updated = admin_client.put(f"/api/products/{product['id']}", json={"price": 47000, "isFeatured": True})
    assert updated.status_code == 200
    assert updated.get_json()["product"]["price"] == "47000.00"
    assert updated.get_json()["product"]["isFeatured"] is True


def test_product_rejects_bad_references_and_groups(admin_client):
    bad_category = admin_client.post("/api/products", json={"name": "X", "price": 1, "categoryId": 999})
    assert bad_category.status_code == 400

    category_id = admin_client.get("/api/categories").get_json()["categories"][0]["id"]
    bad_group = admin_client.post(
        "/api/products",
        json={"name": "Y", "price": 1, "categoryId": category_id, "customizationOptions": [{"type": "Nasi", "selectionMode": "many"}]},
    )
    assert bad_group.status_code == 400


def test_area_crud(admin_client):
    resp = admin_client.post("/api/areas", json={"name": "Jakarta Selatan", "deliveryFee": 8000})
    assert resp.status_code == 201
    area = resp.get_json()["area"]
    assert area["slug"] == "jakarta-selatan"
    assert area["deliveryFee"] == "8000.00"
    assert area["serviceFee"] == "0.00"

    assert admin_client.post("/api/areas", json={"name": "jakarta selatan"}).status_code == 409

    updated = admin_client.put(f"/api/areas/{area['id']}", json={"serviceFee": "1500"}).get_json()["area"]
    assert updated["serviceFee"] == "1500.00"
    assert admin_client.delete(f"/api/areas/{area['id']}").status_code == 200


def test_supplied_category_slug_is_made_url_safe(admin_client):
    resp = admin_client.post("/api/categories", json={"name": "Nasi Box", "slug": "Nasi Box/../é?x"})
    assert resp.status_code == 201
    category = resp.get_json()["category"]
    assert category["slug"] == "nasi-boxx"

    renamed = admin_client.put(f"/api/categories/{category['id']}", json={"slug": "Lunch Box 2"})
    assert renamed.get_json()["category"]["slug"] == "lunch-box-2"

    assert admin_client.post("/api/categories", json={"name": "Other", "slug": "LUNCH box 2"}).status_code == 409
    assert admin_client.post("/api/categories", json={"name": "Other", "slug": "?/?"}).status_code == 400


def test_supplied_product_slug_is_made_url_safe(admin_client):
    category_id = admin_client.get("/api/categories").get_json()["categories"][0]["id"]
    resp = admin_client.post(
        "/api/products", json={"name": "Nasi Liwet", "slug": "A B?c", "price": 20000, "categoryId": category_id}
    )
    assert resp.status_code == 201
    product = resp.get_json()["product"]
    assert product["slug"] == "a-bc"

    updated = admin_client.put(f"/api/products/{product['id']}", json={"slug": "Catering Gen-Z"}).get_json()["product"]
    assert re.fullmatch(r"catering-gen-z-\d+-[a-z0-9]{5}", updated["slug"])
