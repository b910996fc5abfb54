"""Application service: Pickup use case (INVOICED -> PICKED_UP).

Records the hand-over of the goods.  Reservations are untouched; they stay
in force until the order is returned.
"""

from __future__ import annotations

import logging

from rentals.application.dto import OrderDTO
from rentals.application.locking import BookingLocks, order_key
from rentals.application.support import Clock, UnitOfWorkFactory, load_order, utc_now
from rentals.domain.model.audit import ORDER, AuditAction, AuditEntry
from rentals.domain.model.principal import Principal

logger = logging.getLogger(__name__)


class PickupOrderHandler:

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
            principal.require_vendor_of(order.vendor_id, str(order))

            order.pick_up()
            uow.orders.save(order)
            uow.audit.add(
                AuditEntry.record(
                    principal,
                    AuditAction.ORDER_PICKED_UP,
                    ORDER,
                    order_id,
                    self._clock(),
                    item_count=sum(line.quantity.value for line in order.lines),
                )
            )
            uow.commit()

        logger.info("Order %s picked up", order_id, extra={"event_type": "order.picked_up"})
        return OrderDTO.from_domain(order)
