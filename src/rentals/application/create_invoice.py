"""Application service: Invoice Order use case (CONFIRMED -> INVOICED).

Creates the order's PRIMARY invoice in DRAFT status.  The order total is
tax-inclusive; subtotal and tax are derived from it with the GST rate in
force at invoicing time.
"""

from __future__ import annotations

import logging

from rentals.application.dto import InvoiceDTO
from rentals.application.locking import BookingLocks, order_key
from rentals.application.support import Clock, UnitOfWorkFactory, load_order, utc_now
from rentals.domain.model.audit import INVOICE, AuditAction, AuditEntry
from rentals.domain.model.order import OrderAction
from rentals.domain.model.principal import Principal
from rentals.domain.service.billing_service import build_order_invoice
from rentals.domain.settings import SettingsProvider

logger = logging.getLogger(__name__)


class CreateInvoiceHandler:

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

    def handle(self, principal: Principal, order_id: int, timeout: float | None = None) -> InvoiceDTO:
        with self._locks.hold([order_key(order_id)], timeout), self._uow_factory() as uow:
            order = load_order(uow, order_id)
            principal.require_vendor_of(order.vendor_id, str(order))
            order.ensure_can(OrderAction.INVOICE)

            settings = self._settings_provider.get_settings()
            invoice = build_order_invoice(order, uow.invoices.next_id(), settings, self._clock())
            order.mark_invoiced()

            uow.invoices.save(invoice)
            uow.orders.save(order)
            uow.audit.add(
                AuditEntry.record(
                    principal,
                    AuditAction.INVOICE_CREATED,
                    INVOICE,
                    invoice.id,  # type: ignore[arg-type]
                    self._clock(),
                    order_id=order_id,
                    number=invoice.number,
                    total_amount=str(invoice.total_amount),
                )
            )
            uow.commit()

        logger.info(
            "Invoice %s created for order %s (total %s, tax %s)",
            invoice.number,
            order_id,
            invoice.total_amount,
            invoice.tax_amount,
            extra={"event_type": "invoice.created"},
        )
        return InvoiceDTO.from_domain(invoice)
