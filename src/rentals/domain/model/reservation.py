"""Reservation — a quantity of one product locked for a window by one order."""

from __future__ import annotations

from dataclasses import dataclass

from rentals.domain.model.value_objects import Quantity, RentalWindow


@dataclass(frozen=True)
class Reservation:

    id: int | None
    order_id: int
    product_id: str
    quantity: Quantity
    window: RentalWindow

    def overlaps(self, window: RentalWindow) -> bool:
        return self.window.overlaps(window)
