"""Document-store implementation of InvoiceRepository."""

from __future__ import annotations

from rentals.domain.model.invoice import Invoice, InvoiceKind, InvoiceLine, InvoiceStatus
from rentals.domain.repository.invoice_repository import InvoiceRepository
from rentals.infrastructure.persistence.document_store import StagedCollection
from rentals.infrastructure.persistence.serialization import (
    datetime_from_raw,
    datetime_to_raw,
    money_from_raw,
    money_to_raw,
)


class JsonInvoiceRepository(StagedCollection, InvoiceRepository):

    collection = "invoices"

    # --- InvoiceRepository interface ------------------------------------------

    def next_id(self) -> int:
        return self._store.next_sequence(self.collection)

    def get_by_id(self, invoice_id: int) -> Invoice | None:
        raw = self._get_raw(str(invoice_id))
        return self._to_domain(raw) if raw is not None else None

    def list_for_order(self, order_id: int) -> list[Invoice]:
        return [
            self._to_domain(raw)
            for raw in self._scan_raw()
            if raw["order_id"] == order_id
        ]

    def save(self, invoice: Invoice) -> None:
        if invoice.id is None:
            invoice.id = self.next_id()
        self._put_raw(str(invoice.id), self._to_raw(invoice))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(invoice: Invoice) -> dict:
        return {
            "id": invoice.id,
            "number": invoice.number,
            "order_id": invoice.order_id,
            "kind": invoice.kind.value,
            "status": invoice.status.value,
            "total_amount": money_to_raw(invoice.total_amount),
            "subtotal": money_to_raw(invoice.subtotal),
            "tax_amount": money_to_raw(invoice.tax_amount),
            "issued_at": datetime_to_raw(invoice.issued_at),
            "due_date": datetime_to_raw(invoice.due_date),
            "lines": [
                {
                    "product_id": line.product_id,
                    "description": line.description,
                    "quantity": line.quantity,
                    "unit_price": money_to_raw(line.unit_price),
                }
                for line in invoice.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Invoice:
        return Invoice(
            id=raw["id"],
            number=raw["number"],
            order_id=raw["order_id"],
            kind=InvoiceKind(raw["kind"]),
            status=InvoiceStatus(raw["status"]),
            lines=[
                InvoiceLine(
                    product_id=line.get("product_id"),
                    description=line["description"],
                    quantity=line["quantity"],
                    unit_price=money_from_raw(line["unit_price"]),
                )
                for line in raw["lines"]
            ],
            total_amount=money_from_raw(raw["total_amount"]),
            subtotal=money_from_raw(raw["subtotal"]),
            tax_amount=money_from_raw(raw["tax_amount"]),
            issued_at=datetime_from_raw(raw["issued_at"]),
            due_date=datetime_from_raw(raw["due_date"]),
        )
