"""Application service: Post Invoice use case (DRAFT -> POSTED)."""

from __future__ import annotations

import logging

from rentals.application.dto import InvoiceDTO
from rentals.application.locking import BookingLocks, order_key
from rentals.application.support import Clock, UnitOfWorkFactory, load_order, utc_now
from rentals.domain.exceptions import EntityNotFoundError
from rentals.domain.model.audit import INVOICE, AuditAction, AuditEntry
from rentals.domain.model.principal import Principal

logger = logging.getLogger(__name__)


class PostInvoiceHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: BookingLocks,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks
        self._clock = clock

    def handle(self, principal: Principal, invoice_id: int, timeout: float | None = None) -> InvoiceDTO:
        with self._uow_factory() as uow:
            invoice = uow.invoices.get_by_id(invoice_id)
            if invoice is None:
                raise EntityNotFoundError(f"Invoice #{invoice_id} not found")
            order_id = invoice.order_id

        # Invoices are scoped to their order, so the order lock covers them.
        with self._locks.hold([order_key(order_id)], timeout), self._uow_factory() as uow:
            invoice = uow.invoices.get_by_id(invoice_id)
            if invoice is None:
                raise EntityNotFoundError(f"Invoice #{invoice_id} not found")
            order = load_order(uow, order_id)
            principal.require_vendor_of(order.vendor_id, f"invoice {invoice.number}")

            invoice.post()
            uow.invoices.save(invoice)
            uow.audit.add(
                AuditEntry.record(
                    principal,
                    AuditAction.INVOICE_POSTED,
                    INVOICE,
                    invoice_id,
                    self._clock(),
                    order_id=order_id,
                    number=invoice.number,
                )
            )
            uow.commit()

        logger.info("Invoice %s posted", invoice.number, extra={"event_type": "invoice.posted"})
        return InvoiceDTO.from_domain(invoice)
