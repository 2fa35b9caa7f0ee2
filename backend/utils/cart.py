# backend/utils/cart.py
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class CartLine:
    product: Any  # anything with id, name, price and stock
    quantity: int

    @property
    def line_total(self) -> float:
        return round(self.product.price * self.quantity, 2)


class Cart:
    """In-memory shopping cart that never holds more than the last known stock.

    The cart is advisory: checkout re-validates every line against the store.
    """

    def __init__(self):
        self.lines: List[CartLine] = []

    def _find(self, product_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    def held(self, product_id: str) -> int:
        line = self._find(product_id)
        return line.quantity if line else 0

    def add(self, product, quantity: int) -> int:
        """Add up to ``quantity`` units, returns how many were actually added."""
        stock = product.stock or 0
        if quantity <= 0 or stock <= 0:
            return 0

        line = self._find(product.id)
        current = line.quantity if line else 0
        to_add = min(quantity, max(0, stock - current))
        if to_add <= 0:
            return 0

        if line:
            line.quantity += to_add
        else:
            self.lines.append(CartLine(product=product, quantity=to_add))
        return to_add

    def update_quantity(self, product_id: str, delta: int) -> None:
        line = self._find(product_id)
        if not line:
            return
        clamped = min(line.quantity + delta, line.product.stock or 0)
        if clamped > 0:
            line.quantity = clamped

    def set_quantity(self, product_id: str, quantity: int) -> None:
        """Set an exact quantity; anything that clamps below 1 removes the line."""
        line = self._find(product_id)
        if not line:
            return
        clamped = min(quantity, line.product.stock or 0)
        if clamped <= 0:
            self.remove(product_id)
        else:
            line.quantity = clamped

    def remove(self, product_id: str) -> None:
        self.lines = [line for line in self.lines if line.product.id != product_id]

    def clear(self) -> None:
        self.lines = []

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> float:
        return round(sum(line.product.price * line.quantity for line in self.lines), 2)

    def to_order_items(self) -> List[Dict[str, Any]]:
        return [{"productId": line.product.id, "quantity": line.quantity} for line in self.lines]
