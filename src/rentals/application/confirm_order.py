"""Application service: Confirm Order use case.

Orchestrates the availability re-check, the reservation commit and the
Order state transition (SENT -> CONFIRMED).  This is the only place
inventory becomes locked.

The check and the write run under the locks of the order and of every
product on it, inside one unit of work.  A concurrent confirmation for the
same product waits, then re-checks against the reservations this one
committed, so two orders can never both take the last units.
"""

from __future__ import annotations

import logging

from rentals.application.dto import OrderDTO
from rentals.application.locking import BookingLocks, order_key, product_key
from rentals.application.support import Clock, UnitOfWorkFactory, load_order, utc_now
from rentals.domain.model.audit import ORDER, AuditAction, AuditEntry
from rentals.domain.model.order import OrderAction
from rentals.domain.model.principal import Principal
from rentals.domain.service.availability_service import AvailabilityChecker
from rentals.domain.service.reservation_service import ReservationManager

logger = logging.getLogger(__name__)


class ConfirmOrderHandler:

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
        # Fail fast without taking product locks: existence, ownership, state.
        with self._uow_factory() as uow:
            order = load_order(uow, order_id)
            principal.require_vendor_of(order.vendor_id, str(order))
            order.ensure_can(OrderAction.CONFIRM)
            keys = [order_key(order_id), *(product_key(pid) for pid in order.product_ids)]

        with self._locks.hold(keys, timeout), self._uow_factory() as uow:
            # Re-read under the locks; another request may have moved it on.
            order = load_order(uow, order_id)
            order.ensure_can(OrderAction.CONFIRM)

            checker = AvailabilityChecker(uow.reservations, uow.orders)
            manager = ReservationManager(uow.products, uow.reservations, checker)
            reservations = manager.reserve_for_order(order)

            order.confirm()
            uow.orders.save(order)
            uow.audit.add(
                AuditEntry.record(
                    principal,
                    AuditAction.ORDER_CONFIRMED,
                    ORDER,
                    order_id,
                    self._clock(),
                    reservations=len(reservations),
                )
            )
            uow.commit()

        logger.info("Order %s confirmed, inventory reserved", order_id,
                    extra={"event_type": "order.confirmed"})
        return OrderDTO.from_domain(order)
