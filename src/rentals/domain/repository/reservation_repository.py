"""Abstract repository for Reservation records.

Only the ReservationManager domain service writes through this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.reservation import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def list_for_product(self, product_id: str) -> list[Reservation]:
        """Return every reservation held on a product."""

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[Reservation]:
        """Return every reservation owned by an order."""

    @abstractmethod
    def add(self, reservation: Reservation) -> Reservation:
        """Persist a new reservation and return it with its ID assigned."""

    @abstractmethod
    def delete_for_order(self, order_id: int) -> int:
        """Delete an order's reservations and return how many were removed."""
