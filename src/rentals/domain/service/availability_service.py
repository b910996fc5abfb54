"""Domain service: Availability Checker.

Answers "how many units of this product are free for this window?" using
reservations as the only source of truth.  Purely read-only, so it is safe
to call repeatedly and from concurrent request handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rentals.domain.exceptions import ValidationError
from rentals.domain.model.order import AVAILABILITY_COUNTED_STATUSES, OrderStatus
from rentals.domain.model.product import Product
from rentals.domain.model.value_objects import RentalWindow
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.reservation_repository import ReservationRepository


class AvailabilityStatus(Enum):
    NONE = "NONE"
    PARTIAL = "PARTIAL"
    FULL = "FULL"


@dataclass(frozen=True)
class AvailabilityResult:

    product_id: str
    status: AvailabilityStatus
    available_qty: int
    total_stock: int
    booked_qty: int

    @property
    def is_full(self) -> bool:
        return self.status is AvailabilityStatus.FULL


def classify(available_qty: int, requested_qty: int) -> AvailabilityStatus:
    if available_qty == 0:
        return AvailabilityStatus.NONE
    if available_qty < requested_qty:
        return AvailabilityStatus.PARTIAL
    return AvailabilityStatus.FULL


class AvailabilityChecker:

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        order_repo: OrderRepository,
    ) -> None:
        self._reservation_repo = reservation_repo
        self._order_repo = order_repo

    def check(
        self,
        product: Product,
        window: RentalWindow,
        requested_qty: int,
    ) -> AvailabilityResult:
        """Compute free capacity of *product* over *window*.

        ``available_qty`` is clamped at zero, so an over-committed product
        (stock lowered after booking) reports NONE rather than a negative.
        """
        if isinstance(requested_qty, bool) or not isinstance(requested_qty, int):
            raise ValidationError("Requested quantity must be an integer")
        if requested_qty < 0:
            raise ValidationError("Requested quantity cannot be negative")

        booked = self.booked_quantity(product.id, window)
        available = max(0, product.total_stock - booked)
        return AvailabilityResult(
            product_id=product.id,
            status=classify(available, requested_qty),
            available_qty=available,
            total_stock=product.total_stock,
            booked_qty=booked,
        )

    def booked_quantity(self, product_id: str, window: RentalWindow) -> int:
        """Sum reservations on *product_id* overlapping *window*.

        Only reservations whose owning order is in a counted status
        contribute; a reservation left behind by a finished order does not.
        """
        statuses: dict[int, OrderStatus | None] = {}
        booked = 0
        for reservation in self._reservation_repo.list_for_product(product_id):
            if not reservation.overlaps(window):
                continue
            if reservation.order_id not in statuses:
                order = self._order_repo.get_by_id(reservation.order_id)
                statuses[reservation.order_id] = order.status if order else None
            if statuses[reservation.order_id] in AVAILABILITY_COUNTED_STATUSES:
                booked += reservation.quantity.value
        return booked
