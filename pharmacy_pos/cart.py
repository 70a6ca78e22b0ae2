"""In-memory cart for the sale in progress."""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Iterable

from pharmacy_pos.errors import ValidationError
from pharmacy_pos.models import CartLine, Medicine
from pharmacy_pos.state import Observable

Notify = Callable[[str, str, str], None]


def lines_total(lines: Iterable[CartLine]) -> Decimal:
    return sum((line.subtotal for line in lines), Decimal("0"))


class CartStore:
    """Ordered cart lines, at most one per medicine.

    Quantities are always positive and never above the stock of the most
    recently loaded catalog record. Every mutation replaces the ``lines``
    tuple, so observers always see a consistent snapshot.
    """

    def __init__(self, notify: Notify) -> None:
        self._notify = notify
        self.lines: Observable[tuple[CartLine, ...]] = Observable(())
        self.total_amount: Observable[Decimal] = Observable(Decimal("0"))
        self.lines.subscribe(lambda lines: self.total_amount.set(lines_total(lines)))

    def __len__(self) -> int:
        return len(self.lines.get())

    def is_empty(self) -> bool:
        return not self.lines.get()

    def get(self, medicine_id: str) -> CartLine | None:
        for line in self.lines.get():
            if line.medicine_id == medicine_id:
                return line
        return None

    def total(self) -> Decimal:
        return lines_total(self.lines.get())

    def add(self, medicine: Medicine) -> CartLine | None:
        existing = self.get(medicine.medicine_id)
        if existing is not None:
            self.set_quantity(medicine.medicine_id, existing.quantity + 1)
            return self.get(medicine.medicine_id)

        if medicine.stock <= 0:
            self._notify("error", "Out of stock", f"{medicine.name} is not available in stock.")
            return None

        line = CartLine(medicine=medicine, quantity=1)
        self.lines.set(self.lines.get() + (line,))
        return line

    def set_quantity(self, medicine_id: str, quantity: int) -> int:
        """Set a line's quantity and return what the cart now holds for it.

        Non-positive quantities remove the line; quantities above stock are
        clamped to stock with a warning.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(f"Quantity must be a whole number, got {quantity!r}", {"quantity": "invalid"})

        line = self.get(medicine_id)
        if line is None:
            return 0
        if quantity <= 0:
            self.remove(medicine_id)
            return 0

        stock = line.medicine.stock
        if quantity > stock:
            self._notify(
                "warning",
                "Insufficient stock",
                f"Only {stock} units of {line.medicine.name} available.",
            )
            quantity = stock
        if quantity <= 0:
            self.remove(medicine_id)
            return 0
        self._replace(line.with_quantity(quantity))
        return quantity

    def remove(self, medicine_id: str) -> None:
        self.lines.set(tuple(line for line in self.lines.get() if line.medicine_id != medicine_id))

    def clear(self) -> None:
        self.lines.set(())

    def refresh_stock(self, records: Iterable[Medicine]) -> None:
        """Re-base each line on the latest catalog record for its medicine."""
        by_id = {record.medicine_id: record for record in records}
        refreshed: list[CartLine] = []
        for line in self.lines.get():
            record = by_id.get(line.medicine_id)
            if record is None:
                self._notify("warning", "Unavailable", f"{line.medicine.name} is no longer for sale and was removed.")
                continue
            if record.stock <= 0:
                self._notify("warning", "Out of stock", f"{record.name} was removed from the cart.")
                continue
            quantity = line.quantity
            if quantity > record.stock:
                self._notify(
                    "warning",
                    "Insufficient stock",
                    f"Only {record.stock} units of {record.name} available.",
                )
                quantity = record.stock
            refreshed.append(CartLine(medicine=record, quantity=quantity))
        self.lines.set(tuple(refreshed))

    def _replace(self, new_line: CartLine) -> None:
        self.lines.set(
            tuple(new_line if line.medicine_id == new_line.medicine_id else line for line in self.lines.get())
        )
