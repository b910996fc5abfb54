"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict. No file I/O, no side effects.
"""

from __future__ import annotations

import copy
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from rentals.domain.model.audit import AuditEntry
from rentals.domain.model.coupon import Coupon, DiscountType
from rentals.domain.model.invoice import Invoice
from rentals.domain.model.order import Order
from rentals.domain.model.product import PeriodUnit, Product, RentalPeriodTier
from rentals.domain.model.reservation import Reservation
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.audit_repository import AuditRepository
from rentals.domain.repository.coupon_repository import CouponRepository
from rentals.domain.repository.invoice_repository import InvoiceRepository
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.repository.reservation_repository import ReservationRepository
from rentals.domain.repository.unit_of_work import UnitOfWork


def at(day: int, hour: int = 0, month: int = 1, year: int = 2025) -> datetime:
    """Shorthand for a UTC timestamp."""
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def make_product(
    product_id: str = "P1",
    name: str = "Camera",
    vendor_id: str = "V1",
    stock: int = 5,
    day_price: str | None = "500.00",
    hour_price: str | None = None,
    week_price: str | None = None,
) -> Product:
    pricing = []
    if hour_price is not None:
        pricing.append(RentalPeriodTier(PeriodUnit.HOUR, Money.of(hour_price)))
    if day_price is not None:
        pricing.append(RentalPeriodTier(PeriodUnit.DAY, Money.of(day_price)))
    if week_price is not None:
        pricing.append(RentalPeriodTier(PeriodUnit.WEEK, Money.of(week_price)))
    return Product(id=product_id, name=name, vendor_id=vendor_id, total_stock=stock, pricing=pricing)


def make_coupon(
    code: str = "SAVE10",
    discount_type: DiscountType = DiscountType.PERCENTAGE,
    value: str = "10",
    valid_from: datetime | None = None,
    valid_to: datetime | None = None,
    **kwargs,
) -> Coupon:
    return Coupon(
        code=code,
        discount_type=discount_type,
        value=Decimal(value),
        valid_from=valid_from or at(1),
        valid_to=valid_to or at(31, month=12),
        **kwargs,
    )


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        for p in products or []:
            self._store[p.id] = p

    def get_by_id(self, product_id: str) -> Product | None:
        return self._store.get(product_id)

    def list_all(self) -> list[Product]:
        return list(self._store.values())

    def save(self, product: Product) -> None:
        self._store[product.id] = product


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1

    def get_by_id(self, order_id: int) -> Order | None:
        return self._store.get(order_id)

    def list_all(self) -> list[Order]:
        return list(self._store.values())

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self._next_id
            self._next_id += 1
        self._store[order.id] = order


class FakeReservationRepository(ReservationRepository):

    def __init__(self, reservations: list[Reservation] | None = None) -> None:
        self._store: dict[int, Reservation] = {}
        self._next_id = 1
        for r in reservations or []:
            self.add(r)

    def list_for_product(self, product_id: str) -> list[Reservation]:
        return [r for r in self._store.values() if r.product_id == product_id]

    def list_for_order(self, order_id: int) -> list[Reservation]:
        return [r for r in self._store.values() if r.order_id == order_id]

    def add(self, reservation: Reservation) -> Reservation:
        stored = replace(reservation, id=self._next_id)
        self._next_id += 1
        self._store[stored.id] = stored
        return stored

    def delete_for_order(self, order_id: int) -> int:
        owned = [r.id for r in self.list_for_order(order_id)]
        for rid in owned:
            del self._store[rid]
        return len(owned)


class FakeCouponRepository(CouponRepository):

    def __init__(self, coupons: list[Coupon] | None = None) -> None:
        self._store: dict[str, Coupon] = {}
        for c in coupons or []:
            self.save(c)

    def get_by_code(self, code: str) -> Coupon | None:
        return self._store.get(code.strip().upper())

    def save(self, coupon: Coupon) -> None:
        self._store[coupon.code.strip().upper()] = coupon


class FakeInvoiceRepository(InvoiceRepository):

    def __init__(self) -> None:
        self._store: dict[int, Invoice] = {}
        self._next_id = 1

    def next_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def get_by_id(self, invoice_id: int) -> Invoice | None:
        return self._store.get(invoice_id)

    def list_for_order(self, order_id: int) -> list[Invoice]:
        return [i for i in self._store.values() if i.order_id == order_id]

    def save(self, invoice: Invoice) -> None:
        if invoice.id is None:
            invoice.id = self.next_id()
        self._store[invoice.id] = invoice


class FakeAuditRepository(AuditRepository):

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    def add(self, entry: AuditEntry) -> AuditEntry:
        stored = replace(entry, id=len(self.entries) + 1)
        self.entries.append(stored)
        return stored

    def list_for_entity(self, entity: str, entity_id: int) -> list[AuditEntry]:
        return [e for e in self.entries if e.entity == entity and e.entity_id == entity_id]

    def actions(self) -> list[str]:
        return [e.action.value for e in self.entries]


class FakeUnitOfWork(UnitOfWork):
    """One shared set of fake repositories.

    Calling the instance returns itself, so it doubles as the factory the
    handlers expect.  ``rollback`` restores the state of the last commit.
    """

    def __init__(
        self,
        products: list[Product] | None = None,
        coupons: list[Coupon] | None = None,
    ) -> None:
        self.products = FakeProductRepository(products)
        self.orders = FakeOrderRepository()
        self.reservations = FakeReservationRepository()
        self.coupons = FakeCouponRepository(coupons)
        self.invoices = FakeInvoiceRepository()
        self.audit = FakeAuditRepository()
        self.commits = 0
        self._snapshot = self._take_snapshot()

    def __call__(self) -> FakeUnitOfWork:
        return self

    def commit(self) -> None:
        self.commits += 1
        self._snapshot = self._take_snapshot()

    def rollback(self) -> None:
        for repo, state in zip(self._repos(), copy.deepcopy(self._snapshot)):
            repo.__dict__.update(state)

    def _repos(self) -> list:
        return [
            self.products,
            self.orders,
            self.reservations,
            self.coupons,
            self.invoices,
            self.audit,
        ]

    def _take_snapshot(self) -> list[dict]:
        return [copy.deepcopy(repo.__dict__) for repo in self._repos()]
