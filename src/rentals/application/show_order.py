"""Application service: Show Order use case (query)."""

from __future__ import annotations

from rentals.application.dto import OrderDTO
from rentals.application.support import UnitOfWorkFactory, load_order
from rentals.domain.model.audit import INVOICE, ORDER
from rentals.domain.model.principal import Principal


class ShowOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, principal: Principal, order_id: int) -> OrderDTO:
        with self._uow_factory() as uow:
            order = load_order(uow, order_id)
            principal.require_party_of(order.vendor_id, order.customer_id, str(order))
            invoices = uow.invoices.list_for_order(order_id)

            history = uow.audit.list_for_entity(ORDER, order_id)
            for invoice in invoices:
                history += uow.audit.list_for_entity(INVOICE, invoice.id)  # type: ignore[arg-type]
            history.sort(key=lambda entry: entry.id or 0)
        return OrderDTO.from_domain(order, invoices, history)
