"""Abstract unit of work.

A unit of work groups the repositories touched by one use case and makes
their writes all-or-nothing: nothing is visible to other units of work
until ``commit()``, and leaving the ``with`` block without committing
(including on an exception) discards every staged write.

Usage::

    with uow_factory() as uow:
        order = uow.orders.get_by_id(order_id)
        ...
        uow.commit()
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.repository.audit_repository import AuditRepository
from rentals.domain.repository.coupon_repository import CouponRepository
from rentals.domain.repository.invoice_repository import InvoiceRepository
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.repository.reservation_repository import ReservationRepository


class UnitOfWork(ABC):

    products: ProductRepository
    orders: OrderRepository
    reservations: ReservationRepository
    coupons: CouponRepository
    invoices: InvoiceRepository
    audit: AuditRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Committing is always explicit; anything left staged is discarded.
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Apply every staged write atomically."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every staged write.  Safe to call after commit."""
