"""Document-store implementation of UnitOfWork."""

from __future__ import annotations

import logging
from contextlib import ExitStack

from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.infrastructure.persistence.document_store import DocumentStore, StagedChanges
from rentals.infrastructure.persistence.json_audit_repository import JsonAuditRepository
from rentals.infrastructure.persistence.json_coupon_repository import JsonCouponRepository
from rentals.infrastructure.persistence.json_invoice_repository import JsonInvoiceRepository
from rentals.infrastructure.persistence.json_order_repository import JsonOrderRepository
from rentals.infrastructure.persistence.json_product_repository import JsonProductRepository
from rentals.infrastructure.persistence.json_reservation_repository import (
    JsonReservationRepository,
)

logger = logging.getLogger(__name__)


class DocumentUnitOfWork(UnitOfWork):
    """Stages repository writes and applies them to the store on commit.

    Reads see the store's committed state overlaid with this unit of work's
    own staged writes.  The ``with`` block runs inside the store's session,
    so a file-backed store is locked and reloaded for its whole duration.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._changes = StagedChanges()
        self._session = ExitStack()
        self.products = JsonProductRepository(store, self._changes)
        self.orders = JsonOrderRepository(store, self._changes)
        self.reservations = JsonReservationRepository(store, self._changes)
        self.coupons = JsonCouponRepository(store, self._changes)
        self.invoices = JsonInvoiceRepository(store, self._changes)
        self.audit = JsonAuditRepository(store, self._changes)

    def __enter__(self) -> DocumentUnitOfWork:
        self._session.enter_context(self._store.session())
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._session.close()

    def commit(self) -> None:
        self._store.apply(self._changes)
        self._changes.clear()

    def rollback(self) -> None:
        if self._changes:
            logger.debug("Discarding uncommitted changes")
        self._changes.clear()
