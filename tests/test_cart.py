# tests/test_cart.py
from decimal import Decimal

import pytest

from sdk.cart import Cart
from sdk.storage import LocalStorage

SNEAKER = {"id": 1, "name": "Sneaker", "price": 49.99, "categoryId": 1, "imageUrl": "/uploads/1.png"}
SOCKS = {"id": 2, "name": "Socks", "price": 0.1, "categoryId": 1, "imageUrl": None}


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


def test_adding_same_product_twice_increments(storage):
    cart = Cart(storage)
    cart.add(SNEAKER)
    cart.add(SNEAKER)
    assert len(cart) == 1
    assert cart.lines[0].quantity == 2
    assert cart.count() == 2


def test_insertion_order_kept(storage):
    cart = Cart(storage)
    cart.add(SOCKS)
    cart.add(SNEAKER)
    cart.add(SOCKS)
    assert [line.product_id for line in cart] == [2, 1]


def test_total_rounds_to_cents(storage):
    cart = Cart(storage)
    cart.add(SNEAKER)
    cart.add(SOCKS)
    cart.set_quantity(2, 3)
    assert cart.total() == Decimal("50.29")


def test_total_survives_reload(storage):
    cart = Cart(storage)
    cart.add(SNEAKER)
    cart.add(SOCKS)
    cart.set_quantity(1, 3)
    before = cart.total()

    reloaded = Cart(storage)
    assert reloaded.total() == before
    assert [(l.product_id, l.quantity) for l in reloaded] == [(1, 3), (2, 1)]


def test_set_quantity_never_removes(storage):
    cart = Cart(storage)
    cart.add(SNEAKER)
    with pytest.raises(ValueError):
        cart.set_quantity(1, 0)
    assert cart.lines[0].quantity == 1
    with pytest.raises(KeyError):
        cart.set_quantity(99, 2)


def test_remove_and_clear(storage):
    cart = Cart(storage)
    cart.add(SNEAKER)
    cart.add(SOCKS)
    cart.remove(1)
    assert [line.product_id for line in cart] == [2]
    cart.clear()
    assert len(Cart(storage)) == 0
    assert storage.get_item("cart") == []


def test_corrupt_storage_is_ignored(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    assert len(Cart(LocalStorage(path))) == 0

    storage = LocalStorage(path)
    storage.set_item("cart", [{"product": SNEAKER, "quantity": 2}, {"bogus": True}])
    cart = Cart(storage)
    assert [(l.product_id, l.quantity) for l in cart] == [(1, 2)]
