import json
from datetime import date
from decimal import Decimal

import pytest

from catering_aja.storefront import CartStore, JsonFileStorage, MemoryStorage
from catering_aja.storefront.cart_store import CART_STORAGE_KEY


def add_nasi_box(cart, quantity=2, **overrides):
    values = dict(
        product_id=1,
        name="Catering Gen-Z",
        price=Decimal("28000"),
        quantity=quantity,
        customization={"Nasi": "Nasi Merah", "Lauk Utama": "Ayam Bakar"},
        delivery_date=date(2024, 7, 1),
        delivery_time="11:00-13:00",
    )
    values.update(overrides)
    return cart.add_item(**values)


def test_same_configuration_merges_quantity():
    cart = CartStore(MemoryStorage())
    first = add_nasi_box(cart, 2)
    # key order inside the customization does not matter
    second = add_nasi_box(cart, 3, customization={"Lauk Utama": "Ayam Bakar", "Nasi": "Nasi Merah"})

    assert second.id == first.id
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 5
    assert cart.items[0].total == Decimal("140000")


def test_different_slot_is_a_new_line():
    cart = CartStore(MemoryStorage())
    add_nasi_box(cart)
    add_nasi_box(cart, delivery_time="17:00-19:00")
    add_nasi_box(cart, delivery_date=date(2024, 7, 2))
    add_nasi_box(cart, customization={"Nasi": "Nasi Putih", "Lauk Utama": "Ayam Bakar"})

    assert len(cart.items) == 4
    assert cart.get_item_count() == 8
    assert cart.get_total_price() == Decimal("224000")


def test_update_quantity_to_zero_removes_line():
    cart = CartStore(MemoryStorage())
    line = add_nasi_box(cart)
    cart.update_quantity(line.id, 4)
    assert cart.items[0].total == Decimal("112000")

    cart.update_quantity(line.id, 0)
    assert cart.is_empty()


def test_add_rejects_non_positive_quantity():
    cart = CartStore(MemoryStorage())
    with pytest.raises(ValueError):
        add_nasi_box(cart, 0)


def test_state_survives_reload():
    storage = MemoryStorage()
    cart = CartStore(storage)
    line = add_nasi_box(cart)

    reloaded = CartStore(storage)
    assert [l.id for l in reloaded.items] == [line.id]
    assert reloaded.items[0].delivery_date == date(2024, 7, 1)
    assert reloaded.items[0].price == Decimal("28000")

    stored = json.loads(storage.get_item(CART_STORAGE_KEY))
    assert stored[0]["deliveryDate"] == "2024-07-01"


def test_remove_and_clear_are_persisted():
    storage = MemoryStorage()
    cart = CartStore(storage)
    line = add_nasi_box(cart)
    add_nasi_box(cart, delivery_time="17:00-19:00")

    cart.remove_item(line.id)
    assert len(CartStore(storage).items) == 1
    cart.clear_cart()
    assert CartStore(storage).items == []


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        '{"id": "1"}',
        '[{"id": "1", "productId": 1, "name": "x", "price": "1e30", "quantity": 1}]',
        '[{"id": "1", "productId": 1, "name": "x", "price": "Infinity", "quantity": 1}]',
        '[{"id": "1", "productId": 1, "name": "x", "price": "abc", "quantity": 1}]',
    ],
)
def test_corrupt_state_is_discarded(raw):
    storage = MemoryStorage({CART_STORAGE_KEY: raw})
    cart = CartStore(storage)
    assert cart.items == []
    assert storage.get_item(CART_STORAGE_KEY) is None


def test_missing_slot_stays_missing_after_reload():
    storage = MemoryStorage()
    cart = CartStore(storage)
    add_nasi_box(cart, delivery_date=None, delivery_time=None)

    line = CartStore(storage).items[0]
    assert line.delivery_date is None
    assert line.delivery_time is None


def test_json_file_storage(tmp_path):
    storage = JsonFileStorage(tmp_path / "state" / "storefront.json")
    cart = CartStore(storage)
    add_nasi_box(cart)

    assert len(CartStore(JsonFileStorage(tmp_path / "state" / "storefront.json")).items) == 1


def test_json_file_storage_ignores_unreadable_file(tmp_path):
    path = tmp_path / "storefront.json"
    path.write_text("garbage", encoding="utf-8")
    storage = JsonFileStorage(path)
    assert storage.get_item(CART_STORAGE_KEY) is None
    storage.set_item("selectedArea", "depok")
    assert JsonFileStorage(path).get_item("selectedArea") == "depok"
