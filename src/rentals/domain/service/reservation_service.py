"""Domain service: Reservation Manager.

The only writer of reservation records.  Reservations are created when an
order is confirmed and removed when it is returned or cancelled.

``reserve_for_order`` uses a two-phase approach (validate-then-mutate) so a
failure on any line leaves no reservation behind.  It does not lock
anything itself: the caller must hold the product locks for the order's
lines and run it inside the same unit of work as the status change.
"""

from __future__ import annotations

import logging

from rentals.domain.exceptions import (
    EntityNotFoundError,
    InsufficientAvailabilityError,
    LineShortfall,
)
from rentals.domain.model.order import Order
from rentals.domain.model.product import Product
from rentals.domain.model.reservation import Reservation
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.repository.reservation_repository import ReservationRepository
from rentals.domain.service.availability_service import AvailabilityChecker

logger = logging.getLogger(__name__)


class ReservationManager:

    def __init__(
        self,
        product_repo: ProductRepository,
        reservation_repo: ReservationRepository,
        checker: AvailabilityChecker,
    ) -> None:
        self._product_repo = product_repo
        self._reservation_repo = reservation_repo
        self._checker = checker

    def reserve_for_order(self, order: Order) -> list[Reservation]:
        """Re-check availability for every line, then reserve them all.

        Phase 1 - load and validate: every line must be FULL for the
                  order's window.  All shortfalls are collected so the
                  caller sees every line that failed, not just the first.
        Phase 2 - mutate: one reservation per line.
        """
        shortfalls: list[LineShortfall] = []
        for line in order.lines:
            product = self._load_product(line.product_id)
            result = self._checker.check(product, order.window, line.quantity.value)
            if not result.is_full:
                shortfalls.append(
                    LineShortfall(
                        product_id=product.id,
                        product_name=product.name,
                        requested=line.quantity.value,
                        available=result.available_qty,
                    )
                )
        if shortfalls:
            logger.warning(
                "Availability re-check failed for order %s: %s",
                order.id,
                "; ".join(str(s) for s in shortfalls),
                extra={"event_type": "reservation.rejected"},
            )
            raise InsufficientAvailabilityError(shortfalls)

        return self.commit(order)

    def commit(self, order: Order) -> list[Reservation]:
        """Create one reservation per order line for the order's window."""
        created = [
            self._reservation_repo.add(
                Reservation(
                    id=None,
                    order_id=order.id,  # type: ignore[arg-type]
                    product_id=line.product_id,
                    quantity=line.quantity,
                    window=order.window,
                )
            )
            for line in order.lines
        ]
        logger.info("Reserved %d line(s) for order %s over %s", len(created), order.id, order.window)
        return created

    def release(self, order_id: int) -> int:
        """Delete all reservations owned by an order.

        Idempotent: releasing an order with no reservations removes nothing.
        """
        removed = self._reservation_repo.delete_for_order(order_id)
        logger.info("Released %d reservation(s) for order %s", removed, order_id)
        return removed

    def _load_product(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return product
