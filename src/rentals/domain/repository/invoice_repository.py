"""Abstract repository for Invoice aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.invoice import Invoice


class InvoiceRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Reserve the next unique invoice ID."""

    @abstractmethod
    def get_by_id(self, invoice_id: int) -> Invoice | None:
        """Return an invoice by its ID, or None if not found."""

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[Invoice]:
        """Return every invoice raised against an order, oldest first."""

    @abstractmethod
    def save(self, invoice: Invoice) -> None:
        """Persist a new or updated invoice."""
