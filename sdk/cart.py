# sdk/cart.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from sdk.storage import LocalStorage

CENTS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class CartLine:
    product: Dict[str, Any]
    quantity: int = 1

    @property
    def product_id(self):
        return self.product.get("id")

    @property
    def line_total(self) -> Decimal:
        return to_money(Decimal(str(self.product.get("price", 0))) * self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {"product": self.product, "quantity": self.quantity}


class Cart:
    """
    Client-only shopping cart, keyed by product id.
    Rehydrated from storage on construction and written back after every change.
    """

    def __init__(self, storage: Optional[LocalStorage] = None, key: str = "cart"):
        self.storage = storage if storage is not None else LocalStorage()
        self.key = key
        self.lines: List[CartLine] = []
        for raw in self.storage.get_item(self.key) or []:
            try:
                self.lines.append(CartLine(product=dict(raw["product"]), quantity=int(raw["quantity"])))
            except (KeyError, TypeError, ValueError):
                continue

    def _save(self):
        self.storage.set_item(self.key, [line.to_dict() for line in self.lines])

    def _find(self, product_id) -> Optional[CartLine]:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def __iter__(self):
        return iter(self.lines)

    def __len__(self):
        return len(self.lines)

    def add(self, product: Dict[str, Any]) -> CartLine:
        line = self._find(product.get("id"))
        if line is not None:
            line.quantity += 1
        else:
            line = CartLine(product=dict(product), quantity=1)
            self.lines.append(line)
        self._save()
        return line

    def set_quantity(self, product_id, quantity: int) -> CartLine:
        # a line is never dropped here; callers use remove()
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        line = self._find(product_id)
        if line is None:
            raise KeyError(product_id)
        line.quantity = int(quantity)
        self._save()
        return line

    def remove(self, product_id):
        self.lines = [line for line in self.lines if line.product_id != product_id]
        self._save()

    def clear(self):
        self.lines = []
        self._save()

    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def total(self) -> Decimal:
        total = sum((Decimal(str(line.product.get("price", 0))) * line.quantity for line in self.lines), Decimal("0"))
        return to_money(total)
