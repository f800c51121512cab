import re
from datetime import date, timedelta

import pytest


TOMORROW = date.today() + timedelta(days=1)
DAY_AFTER = TOMORROW + timedelta(days=1)


@pytest.fixture
def products(client):
    return {p["slug"]: p for p in client.get("/api/products").get_json()["products"]}


def item(product, quantity, day, price=None, customization=None, time_slot="11:00-13:00"):
    unit = int(float(price if price is not None else product["price"]))
    return {
        "productId": product["id"],
        "productName": product["name"],
        "quantity": quantity,
        "price": unit,
        "total": unit * quantity,
        "customization": customization or {},
        "deliveryDate": day.isoformat(),
        "deliveryTime": time_slot,
    }


def order(items, day, *, area_slug="jakarta", promo_code=None, **totals):
    payload = {
        "customerName": "Siti",
        "customerPhone": "0813",
        "customerAddress": "Jl. Kenanga 5",
        "paymentMethod": "cod",
        "deliveryDate": day.isoformat(),
        "areaSlug": area_slug,
        "promoCode": promo_code,
        "items": items,
    }
    payload.update(totals)
    return payload


def spesial_order(products, day=TOMORROW, quantity=2):
    # 35000 x 2 + jakarta fees 10000 / 2000
    return order(
        [item(products["menu-spesial-tradisional"], quantity, day)],
        day,
        subtotal=35000 * quantity,
        deliveryFee=10000,
        serviceFee=2000,
        discount=0,
        total=35000 * quantity + 12000,
    )


def order_count(admin_client):
    return len(admin_client.get("/api/orders").get_json()["orders"])


def test_batch_creates_one_order_per_date(customer_client, admin_client, products):
    batch = [spesial_order(products, TOMORROW), spesial_order(products, DAY_AFTER, quantity=1)]
    resp = customer_client.post("/api/orders/batch", json={"orders": batch})
    assert resp.status_code == 201
    created = resp.get_json()["orders"]
    assert len(created) == 2
    assert all(re.fullmatch(r"ORD-\d+-[A-Z0-9]{9}", o["code"]) for o in created)
    assert created[0]["code"] != created[1]["code"]
    assert created[0]["total"] == "82000.00"
    assert created[0]["status"] == "pending"
    assert created[0]["items"][0]["deliveryTime"] == "11:00-13:00"

    mine = customer_client.get("/api/orders/my-orders").get_json()["orders"]
    assert len(mine) == 2
    assert order_count(admin_client) == 2


def test_guest_checkout_has_no_owner(client, products):
    resp = client.post("/api/orders/batch", json={"orders": [spesial_order(products)]})
    assert resp.status_code == 201
    assert resp.get_json()["orders"][0]["userId"] is None


def test_missing_delivery_time_rejects_whole_batch(customer_client, admin_client, products):
    broken = spesial_order(products, DAY_AFTER)
    broken["items"][0]["deliveryTime"] = ""
    resp = customer_client.post("/api/orders/batch", json={"orders": [spesial_order(products), broken]})
    assert resp.status_code == 400
    assert order_count(admin_client) == 0


def test_failure_in_later_order_rolls_back_earlier_ones(customer_client, admin_client, products):
    broken = spesial_order(products, DAY_AFTER)
    broken["items"][0]["productId"] = 9999
    resp = customer_client.post("/api/orders/batch", json={"orders": [spesial_order(products), broken]})
    assert resp.status_code == 400
    assert order_count(admin_client) == 0


def test_tampered_unit_price_is_rejected(client, products):
    payload = spesial_order(products)
    payload["items"][0]["price"] = 1000
    payload["items"][0]["total"] = 2000
    resp = client.post("/api/orders/batch", json={"orders": [payload]})
    assert resp.status_code == 400
    assert "Price mismatch" in resp.get_json()["message"]


def test_tampered_totals_are_rejected(client, products):
    payload = spesial_order(products)
    payload["total"] = 1
    resp = client.post("/api/orders/batch", json={"orders": [payload]})
    assert resp.status_code == 400
    assert "total" in resp.get_json()["message"]


def test_customization_surcharge_is_priced_on_the_server(client, products):
    genz = products["catering-gen-z"]
    choice = {"Nasi": "Nasi Merah", "Lauk Utama": "Rendang", "Ekstra": ["Kerupuk", "Telur"]}
    # 25000 + 3000 + 5000 + 2000 + 4000
    line = item(genz, 1, TOMORROW, price=39000, customization=choice)
    payload = order([line], TOMORROW, area_slug=None, subtotal=39000, total=39000)
    resp = client.post("/api/orders/batch", json={"orders": [payload]})
    assert resp.status_code == 201, resp.get_json()
    assert resp.get_json()["orders"][0]["items"][0]["price"] == "39000.00"

    missing_required = item(genz, 1, TOMORROW, price=25000, customization={"Ekstra": ["Kerupuk"]})
    resp = client.post("/api/orders/batch", json={"orders": [order([missing_required], TOMORROW, area_slug=None)]})
    assert resp.status_code == 400


def test_valid_promo_is_applied(client, products):
    payload = spesial_order(products)
    payload.update(promoCode="flash15", discount=10500, total=70000 + 12000 - 10500)
    resp = client.post("/api/orders/batch", json={"orders": [payload]})
    assert resp.status_code == 201, resp.get_json()
    created = resp.get_json()["orders"][0]
    assert created["promoCode"] == "FLASH15"
    assert created["discount"] == "10500.00"


def test_future_promo_is_rejected(client, products):
    payload = spesial_order(products)
    payload["promoCode"] = "AKHIRBULAN"
    resp = client.post("/api/orders/batch", json={"orders": [payload]})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Kode promo tidak valid atau sudah tidak berlaku."


def test_minimum_order_quantity(client, products):
    nasi_box = products["nasi-box-ekonomis"]
    line = item(nasi_box, 5, TOMORROW, customization={"Nasi": "Nasi Putih"})
    resp = client.post("/api/orders/batch", json={"orders": [order([line], TOMORROW, area_slug=None)]})
    assert resp.status_code == 400
    assert "Minimum order" in resp.get_json()["message"]


def test_items_must_share_the_order_date(client, products):
    payload = spesial_order(products)
    payload["items"].append(item(products["menu-spesial-tradisional"], 1, DAY_AFTER))
    payload.pop("subtotal")
    payload.pop("total")
    resp = client.post("/api/orders/batch", json={"orders": [payload]})
    assert resp.status_code == 400


def test_empty_batch_is_invalid(client):
    assert client.post("/api/orders/batch", json={"orders": []}).status_code == 400


def test_single_order_endpoint(customer_client, products):
    payload = spesial_order(products)
    items = payload.pop("items")
    resp = customer_client.post("/api/orders", json={"order": payload, "items": items})
    assert resp.status_code == 201
    assert resp.get_json()["order"]["total"] == "82000.00"


def test_order_visibility(customer_client, admin_client, client, app, products):
    created = customer_client.post("/api/orders/batch", json={"orders": [spesial_order(products)]}).get_json()["orders"][0]
    order_id = created["id"]

    assert customer_client.get(f"/api/orders/{order_id}").status_code == 200
    assert admin_client.get(f"/api/orders/{order_id}").status_code == 200
    assert client.get(f"/api/orders/{order_id}").status_code == 401

    other = app.test_client()
    other.post("/api/auth/register", json={"username": "tono", "password": "pw", "name": "Tono"})
    other.post("/api/auth/login", json={"username": "tono", "password": "pw"})
    assert other.get(f"/api/orders/{order_id}").status_code == 404

    items = customer_client.get(f"/api/orders/{order_id}/items").get_json()
    assert [i["productName"] for i in items] == ["Menu Spesial Tradisional"]
    assert customer_client.get("/api/orders").status_code == 403


def test_status_update_is_admin_only(customer_client, admin_client, products):
    order_id = customer_client.post("/api/orders/batch", json={"orders": [spesial_order(products)]}).get_json()["orders"][0]["id"]

    assert customer_client.put(f"/api/orders/{order_id}/status", json={"status": "completed"}).status_code == 403
    resp = admin_client.put(f"/api/orders/{order_id}/status", json={"status": " Processing "})
    assert resp.status_code == 200
    assert resp.get_json()["order"]["status"] == "processing"
    assert admin_client.put(f"/api/orders/{order_id}/status", json={"status": "   "}).status_code == 400
    assert admin_client.put("/api/orders/9999/status", json={"status": "shipped"}).status_code == 404


def test_anonymous_caller_gets_401_for_any_order_id(client, customer_client, products):
    order_id = customer_client.post("/api/orders/batch", json={"orders": [spesial_order(products)]}).get_json()["orders"][0]["id"]

    assert client.get(f"/api/orders/{order_id}").status_code == 401
    assert client.get("/api/orders/9999").status_code == 401
    assert client.get("/api/orders/9999/items").status_code == 401
