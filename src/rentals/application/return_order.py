"""Application service: Return Order use case (PICKED_UP -> RETURNED).

Workflow, all in one unit of work:
1. Compute the late fee if the goods come back after the planned end.
2. Release the order's reservations (units are free again).
3. Mark the order RETURNED with the return time and late fee.
4. If there is a late fee and the order's invoice is already POSTED, raise
   a separate ADJUSTMENT invoice for it; the posted one is never edited.
"""

from __future__ import annotations

import logging
from datetime import datetime

from rentals.application.dto import InvoiceDTO, OrderDTO, ReturnResultDTO
from rentals.application.locking import BookingLocks, order_key
from rentals.application.support import Clock, UnitOfWorkFactory, load_order, utc_now
from rentals.domain.model.audit import INVOICE, ORDER, AuditAction, AuditEntry
from rentals.domain.model.invoice import Invoice, InvoiceKind
from rentals.domain.model.order import Order, OrderAction
from rentals.domain.model.principal import Principal
from rentals.domain.model.value_objects import Money, as_utc
from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.service.availability_service import AvailabilityChecker
from rentals.domain.service.billing_service import build_late_fee_invoice, late_fee
from rentals.domain.service.reservation_service import ReservationManager
from rentals.domain.settings import RentalSettings, SettingsProvider

logger = logging.getLogger(__name__)


class ReturnOrderHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: BookingLocks,
        settings_provider: SettingsProvider,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks
        self._settings_provider = settings_provider
        self._clock = clock

    def handle(
        self,
        principal: Principal,
        order_id: int,
        returned_at: datetime | None = None,
        timeout: float | None = None,
    ) -> ReturnResultDTO:
        """Process the return of a rented order.

        Args:
            order_id: The order being returned.
            returned_at: When the goods came back; defaults to now.
        """
        returned_at = as_utc(returned_at) if returned_at is not None else self._clock()

        with self._locks.hold([order_key(order_id)], timeout), self._uow_factory() as uow:
            order = load_order(uow, order_id)
            principal.require_vendor_of(order.vendor_id, str(order))
            order.ensure_can(OrderAction.RETURN)

            settings = self._settings_provider.get_settings()
            fee = self._late_fee(order, returned_at, settings)

            manager = ReservationManager(
                uow.products,
                uow.reservations,
                AvailabilityChecker(uow.reservations, uow.orders),
            )
            order.mark_returned(returned_at, fee)
            manager.release(order.id)  # type: ignore[arg-type]
            uow.orders.save(order)

            uow.audit.add(
                AuditEntry.record(
                    principal,
                    AuditAction.ORDER_RETURNED,
                    ORDER,
                    order_id,
                    self._clock(),
                    returned_at=returned_at.isoformat(),
                    late_fee=str(fee),
                    was_late=not fee.is_zero,
                )
            )

            adjustment = None
            if not fee.is_zero:
                adjustment = self._raise_late_fee_invoice(uow, order, fee, settings)
            if adjustment is not None:
                uow.audit.add(
                    AuditEntry.record(
                        principal,
                        AuditAction.INVOICE_CREATED,
                        INVOICE,
                        adjustment.id,  # type: ignore[arg-type]
                        self._clock(),
                        order_id=order_id,
                        number=adjustment.number,
                        total_amount=str(adjustment.total_amount),
                    )
                )
            uow.commit()

        logger.info(
            "Order %s returned at %s (late fee %s)",
            order_id,
            returned_at.isoformat(),
            fee,
            extra={"event_type": "order.returned"},
        )
        return ReturnResultDTO(
            order=OrderDTO.from_domain(order),
            late_fee=str(fee),
            was_late=not fee.is_zero,
            late_fee_invoice=InvoiceDTO.from_domain(adjustment) if adjustment else None,
        )

    @staticmethod
    def _late_fee(order: Order, returned_at: datetime, settings: RentalSettings) -> Money:
        if returned_at <= order.window.end:
            return Money.zero(order.currency)
        return late_fee(
            order_amount=order.total_amount,
            planned_end=order.window.end,
            actual_return=returned_at,
            late_fee_rate=settings.late_fee_rate,
            grace_period_hours=settings.grace_period_hours,
        )

    def _raise_late_fee_invoice(
        self,
        uow: UnitOfWork,
        order: Order,
        fee: Money,
        settings: RentalSettings,
    ) -> Invoice | None:
        posted = [
            inv
            for inv in uow.invoices.list_for_order(order.id)  # type: ignore[arg-type]
            if inv.kind is InvoiceKind.PRIMARY and inv.is_posted
        ]
        if not posted:
            logger.info("Order %s has no posted invoice; late fee kept on the order only", order.id)
            return None

        invoice = build_late_fee_invoice(order, fee, uow.invoices.next_id(), settings, self._clock())
        uow.invoices.save(invoice)
        logger.info(
            "Late fee invoice %s raised for order %s",
            invoice.number,
            order.id,
            extra={"event_type": "invoice.late_fee"},
        )
        return invoice
