"""Application service: Cancel Order use case.

If the order holds reservations (CONFIRMED, INVOICED or PICKED_UP) they are
released in the same unit of work, so reservations keep existing only for
orders that are actively booked.  Quotations are cancelled without any
inventory change.

Customers may withdraw their own order while it is still a quotation
(QUOTATION or SENT); anything later needs the vendor.
"""

from __future__ import annotations

import logging

from rentals.application.dto import OrderDTO
from rentals.application.locking import BookingLocks, order_key
from rentals.application.support import Clock, UnitOfWorkFactory, load_order, utc_now
from rentals.domain.model.audit import ORDER, AuditAction, AuditEntry
from rentals.domain.exceptions import UnauthorizedError
from rentals.domain.model.order import Order, OrderStatus
from rentals.domain.model.principal import Principal
from rentals.domain.service.availability_service import AvailabilityChecker
from rentals.domain.service.reservation_service import ReservationManager

logger = logging.getLogger(__name__)

CUSTOMER_CANCELLABLE = frozenset({OrderStatus.QUOTATION, OrderStatus.SENT})


class CancelOrderHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: BookingLocks,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks
        self._clock = clock

    def handle(self, principal: Principal, order_id: int, timeout: float | None = None) -> OrderDTO:
        with self._locks.hold([order_key(order_id)], timeout), self._uow_factory() as uow:
            order = load_order(uow, order_id)
            self._authorize(principal, order)

            released = 0
            if order.holds_reservations:
                manager = ReservationManager(
                    uow.products,
                    uow.reservations,
                    AvailabilityChecker(uow.reservations, uow.orders),
                )
                released = manager.release(order_id)

            previous_status = order.status
            order.cancel()
            uow.orders.save(order)
            uow.audit.add(
                AuditEntry.record(
                    principal,
                    AuditAction.ORDER_CANCELLED,
                    ORDER,
                    order_id,
                    self._clock(),
                    previous_status=previous_status.value,
                    released=released,
                )
            )
            uow.commit()

        logger.info("Order %s cancelled by %s (%d reservation(s) released)",
                    order_id, principal, released, extra={"event_type": "order.cancelled"})
        return OrderDTO.from_domain(order)

    @staticmethod
    def _authorize(principal: Principal, order: Order) -> None:
        if principal.owns_as_vendor(order.vendor_id):
            return
        if principal.owns_as_customer(order.customer_id):
            if order.status in CUSTOMER_CANCELLABLE:
                return
            raise UnauthorizedError(
                f"{order} is {order.status.value}; only the vendor can cancel it now"
            )
        raise UnauthorizedError(f"Not authorized to manage {order}")
