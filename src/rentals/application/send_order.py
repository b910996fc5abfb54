"""Application service: Send Quotation use case.

QUOTATION -> SENT is a status-only change.  A sent quotation still holds no
inventory; nothing is locked until the order is confirmed.
"""

from __future__ import annotations

import logging

from rentals.application.dto import OrderDTO
from rentals.application.locking import BookingLocks, order_key
from rentals.application.support import Clock, UnitOfWorkFactory, load_order, utc_now
from rentals.domain.model.audit import ORDER, AuditAction, AuditEntry
from rentals.domain.model.principal import Principal

logger = logging.getLogger(__name__)


class SendOrderHandler:

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

            order.send()
            uow.orders.save(order)
            uow.audit.add(
                AuditEntry.record(principal, AuditAction.ORDER_SENT, ORDER, order_id, self._clock())
            )
            uow.commit()

        logger.info("Order %s sent to customer %s", order_id, order.customer_id,
                    extra={"event_type": "order.sent"})
        return OrderDTO.from_domain(order)
