# tests/test_receipt.py
from decimal import Decimal

import pytest

from sdk.cart import Cart, CartLine
from sdk.receipt import checkout, paginate, receipt_rows, render_receipt, rows_per_page
from sdk.storage import LocalStorage


def _lines(n):
    return [CartLine({"id": i, "name": f"Shirt {i}", "price": 10.5}, quantity=2) for i in range(n)]


def test_rows_list_items_and_total():
    rows = receipt_rows(_lines(2), Decimal("42.00"))
    texts = [r.left for r in rows]
    assert texts[0] == "Clothify - Order Receipt"
    assert "Shirt 0 (x2)" in texts
    assert "Total: $42.00" in texts
    items = [r for r in rows if r.kind == "item"]
    assert [r.right for r in items] == ["$21.00", "$21.00"]


def test_paginate_splits_rows():
    rows = receipt_rows(_lines(30), Decimal("630.00"))
    pages = paginate(rows, 10)
    assert sum(len(p) for p in pages) == len(rows)
    assert all(len(p) <= 10 for p in pages)
    assert len(pages) == -(-len(rows) // 10)
    with pytest.raises(ValueError):
        paginate(rows, 0)


def test_render_writes_pdf_with_closing_page(tmp_path):
    path = tmp_path / "out" / "receipt.pdf"
    pages = render_receipt(_lines(3), Decimal("63.00"), path)
    assert pages == 2
    assert path.read_bytes().startswith(b"%PDF")


def test_long_receipt_spills_onto_more_pages(tmp_path):
    per_page = rows_per_page()
    pages = render_receipt(_lines(per_page + 5), Decimal("1.00"), tmp_path / "long.pdf")
    assert pages == 3


def test_checkout_clears_cart(tmp_path):
    storage = LocalStorage(tmp_path / "storage.json")
    cart = Cart(storage)
    cart.add({"id": 1, "name": "Sneaker", "price": 49.99})
    path = checkout(cart, tmp_path / "receipt.pdf")
    assert path.exists()
    assert len(cart) == 0
    assert storage.get_item("cart") == []


def test_checkout_empty_cart(tmp_path):
    cart = Cart(LocalStorage(tmp_path / "storage.json"))
    with pytest.raises(ValueError):
        checkout(cart, tmp_path / "receipt.pdf")
    assert not (tmp_path / "receipt.pdf").exists()
