from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from vendix.services.catalog import Product
from vendix.services.pricing import convert


@dataclass
class CartItem(Product):
    quantity: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        p = Product.from_dict(data)
        return cls(**p.to_dict(), quantity=int(data.get("quantity", 1)))

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartItem":
        return cls(**product.to_dict(), quantity=int(quantity))

    @property
    def line_total_base(self) -> float:
        return self.price * self.quantity


@dataclass
class Cart:
    """
    Ephemeral basket held in the page session. Lines are snapshots of the
    product at the time it was first added.
    """

    items: list[CartItem] = field(default_factory=list)

    def _find(self, product_id: str) -> Optional[CartItem]:
        return next((i for i in self.items if i.id == str(product_id)), None)

    def add(self, product: Product) -> bool:
        # Out-of-stock products are ignored silently.
        if int(product.stock) <= 0:
            return False
        existing = self._find(product.id)
        if existing is None:
            self.items.append(CartItem.from_product(product, 1))
            return True
        if existing.quantity + 1 > int(product.stock):
            return False
        existing.quantity += 1
        return True

    def update_quantity(self, product_id: str, delta: int, products: list[Product]) -> None:
        item = self._find(product_id)
        if item is None:
            return
        new_qty = max(0, item.quantity + int(delta))
        current = next((p for p in products if p.id == item.id), None)
        if current is not None and new_qty > int(current.stock):
            return
        item.quantity = new_qty
        self.items = [i for i in self.items if i.quantity > 0]

    def remove(self, product_id: str) -> None:
        self.items = [i for i in self.items if i.id != str(product_id)]

    def clear(self) -> None:
        self.items = []

    def is_empty(self) -> bool:
        return not self.items

    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def subtotal_base(self) -> float:
        return sum(i.line_total_base for i in self.items)

    def subtotal(self, currency, settings) -> float:
        # Summed in the base currency, converted once.
        return convert(self.subtotal_base(), currency, settings)

    def snapshot(self) -> list[CartItem]:
        return [CartItem.from_dict(i.to_dict()) for i in self.items]
