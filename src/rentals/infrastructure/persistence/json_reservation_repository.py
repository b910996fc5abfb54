"""Document-store implementation of ReservationRepository."""

from __future__ import annotations

from dataclasses import replace

from rentals.domain.model.reservation import Reservation
from rentals.domain.model.value_objects import Quantity
from rentals.domain.repository.reservation_repository import ReservationRepository
from rentals.infrastructure.persistence.document_store import StagedCollection
from rentals.infrastructure.persistence.serialization import window_from_raw, window_to_raw


class JsonReservationRepository(StagedCollection, ReservationRepository):

    collection = "reservations"

    # --- ReservationRepository interface --------------------------------------

    def list_for_product(self, product_id: str) -> list[Reservation]:
        return [
            self._to_domain(raw)
            for raw in self._scan_raw()
            if raw["product_id"] == product_id
        ]

    def list_for_order(self, order_id: int) -> list[Reservation]:
        return [
            self._to_domain(raw)
            for raw in self._scan_raw()
            if raw["order_id"] == order_id
        ]

    def add(self, reservation: Reservation) -> Reservation:
        stored = replace(reservation, id=self._store.next_sequence(self.collection))
        self._put_raw(str(stored.id), self._to_raw(stored))
        return stored

    def delete_for_order(self, order_id: int) -> int:
        owned = self.list_for_order(order_id)
        for reservation in owned:
            self._delete_raw(str(reservation.id))
        return len(owned)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(reservation: Reservation) -> dict:
        return {
            "id": reservation.id,
            "order_id": reservation.order_id,
            "product_id": reservation.product_id,
            "quantity": reservation.quantity.value,
            "window": window_to_raw(reservation.window),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Reservation:
        return Reservation(
            id=raw["id"],
            order_id=raw["order_id"],
            product_id=raw["product_id"],
            quantity=Quantity(raw["quantity"]),
            window=window_from_raw(raw["window"]),
        )
