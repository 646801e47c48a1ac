from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterator, List

from db.models import CartLine, Medicine, OrderItem


class Cart:
    """
    Lines keyed by medicine id, in the order they were first added.

    Invariant: every line has quantity >= 1. A line that would drop to zero
    is removed instead.
    """

    def __init__(self) -> None:
        self._lines: Dict[int, CartLine] = {}

    def add(self, medicine: Medicine) -> CartLine:
        """Add one unit; an item already in the cart gets its quantity bumped."""
        line = self._lines.get(medicine.id)
        if line is None:
            line = CartLine(medicine=medicine, quantity=1)
        else:
            line = replace(line, quantity=line.quantity + 1)
        self._lines[medicine.id] = line
        return line

    def remove(self, medicine_id: int) -> None:
        self._lines.pop(medicine_id, None)

    def adjust_quantity(self, medicine_id: int, delta: int) -> None:
        line = self._lines.get(medicine_id)
        if line is None:
            return
        qty = line.quantity + delta
        if qty <= 0:
            del self._lines[medicine_id]
        else:
            self._lines[medicine_id] = replace(line, quantity=qty)

    def clear(self) -> None:
        self._lines.clear()

    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines.values()), Decimal("0.00"))

    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def get(self, medicine_id: int) -> CartLine | None:
        return self._lines.get(medicine_id)

    def quantity_of(self, medicine_id: int) -> int:
        line = self._lines.get(medicine_id)
        return line.quantity if line else 0

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def order_items(self) -> List[OrderItem]:
        return [
            OrderItem(id=line.id, quantity=line.quantity, price=line.medicine.price)
            for line in self._lines.values()
        ]

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, medicine_id: object) -> bool:
        return medicine_id in self._lines

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines())
