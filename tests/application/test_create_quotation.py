"""Integration tests for the CreateQuotation use case."""

from decimal import Decimal

import pytest

from rentals.application.create_quotation import CreateQuotationHandler
from rentals.application.dto import CreateQuotationRequest, OrderLineSpec
from rentals.application.locking import BookingLocks
from rentals.domain.exceptions import (
    EntityNotFoundError,
    NoPricingAvailableError,
    UnauthorizedError,
    ValidationError,
)
from rentals.domain.model.audit import AuditAction
from rentals.domain.model.coupon import DiscountType
from rentals.domain.model.order import OrderStatus
from rentals.domain.model.principal import Principal
from rentals.domain.model.product import PeriodUnit, RentalPeriodTier
from rentals.domain.model.value_objects import Money
from rentals.domain.settings import RentalSettings, StaticSettingsProvider
from tests.fakes import FakeUnitOfWork, at, make_coupon, make_product

CUSTOMER = Principal.customer("C1")


def _setup(*coupons):
    uow = FakeUnitOfWork(
        products=[
            make_product("P1", name="Camera", stock=5, day_price="500"),
            make_product("P2", name="Tripod", stock=2, day_price="100"),
            make_product("P3", name="Drone", vendor_id="V2", stock=1, day_price="900"),
            make_product("P4", name="Lens", stock=1, day_price=None),
        ],
        coupons=list(coupons),
    )
    handler = CreateQuotationHandler(uow, BookingLocks(), clock=lambda: at(5))
    return uow, handler


def _request(lines=(("P1", 2),), coupon=None, vendor="V1", customer=None):
    return CreateQuotationRequest(
        vendor_id=vendor,
        start_date=at(10),
        end_date=at(15),
        lines=[OrderLineSpec(pid, qty) for pid, qty in lines],
        coupon_code=coupon,
        customer_id=customer,
    )


class TestCreateQuotationHappyPath:

    def test_prices_lines_for_window(self):
        uow, handler = _setup()

        dto = handler.handle(CUSTOMER, _request([("P1", 2), ("P2", 1)]))

        assert dto.status == "QUOTATION"
        assert dto.customer_id == "C1"
        assert dto.subtotal == "INR 5500.00"  # 5 days * (2*500 + 100)
        assert uow.orders.get_by_id(dto.id).status == OrderStatus.QUOTATION
        assert uow.commits == 1

    def test_quotation_reserves_nothing(self):
        uow, handler = _setup()
        dto = handler.handle(CUSTOMER, _request())
        assert uow.reservations.list_for_order(dto.id) == []

    def test_admin_quotes_on_behalf_of_customer(self):
        _, handler = _setup()
        dto = handler.handle(Principal.admin(), _request(customer="C9"))
        assert dto.customer_id == "C9"

    def test_coupon_is_applied_and_redeemed(self):
        uow, handler = _setup(make_coupon("SAVE10", value="10", max_uses=5))

        dto = handler.handle(CUSTOMER, _request(coupon="save10"))

        assert dto.coupon_code == "SAVE10"
        assert dto.discount == "INR 500.00"
        assert dto.total == "INR 4500.00"
        assert uow.coupons.get_by_code("SAVE10").used_count == 1

    def test_fixed_coupon_never_makes_total_negative(self):
        _, handler = _setup(make_coupon("BIG", DiscountType.FIXED, value="99999"))
        dto = handler.handle(CUSTOMER, _request(coupon="BIG"))
        assert dto.total == "INR 0.00"


class TestCreateQuotationValidation:

    def test_vendor_cannot_request_quotation(self):
        _, handler = _setup()
        with pytest.raises(UnauthorizedError, match="Only customers"):
            handler.handle(Principal.vendor("V1"), _request())

    def test_admin_must_name_customer(self):
        _, handler = _setup()
        with pytest.raises(ValidationError, match="Customer ID is required"):
            handler.handle(Principal.admin(), _request())

    def test_unknown_product(self):
        _, handler = _setup()
        with pytest.raises(EntityNotFoundError, match="P9"):
            handler.handle(CUSTOMER, _request([("P9", 1)]))

    def test_product_of_other_vendor(self):
        uow, handler = _setup()
        with pytest.raises(ValidationError, match="not offered by vendor"):
            handler.handle(CUSTOMER, _request([("P1", 1), ("P3", 1)]))
        assert uow.orders.list_all() == []

    def test_product_without_pricing(self):
        _, handler = _setup()
        with pytest.raises(NoPricingAvailableError):
            handler.handle(CUSTOMER, _request([("P4", 1)]))

    def test_unknown_coupon(self):
        _, handler = _setup()
        with pytest.raises(EntityNotFoundError, match="Coupon 'NOPE' not found"):
            handler.handle(CUSTOMER, _request(coupon="NOPE"))

    def test_expired_coupon_quotes_without_discount(self):
        uow, handler = _setup(make_coupon("OLD", valid_from=at(1), valid_to=at(2)))

        dto = handler.handle(CUSTOMER, _request(coupon="OLD"))

        assert dto.status == "QUOTATION"
        assert dto.discount == "INR 0.00"
        assert dto.total == dto.subtotal
        assert dto.coupon_code is None
        assert "expired" in dto.coupon_rejection
        assert uow.coupons.get_by_code("OLD").used_count == 0

    def test_used_up_coupon_quotes_without_discount(self):
        uow, handler = _setup(make_coupon("ONCE", max_uses=1))
        first = handler.handle(CUSTOMER, _request(coupon="ONCE"))
        second = handler.handle(CUSTOMER, _request(coupon="ONCE"))

        assert first.coupon_rejection is None
        assert second.discount == "INR 0.00"
        assert "usage limit" in second.coupon_rejection
        assert uow.coupons.get_by_code("ONCE").used_count == 1

    def test_other_vendors_coupon_quotes_without_discount(self):
        _, handler = _setup(make_coupon("V2ONLY", vendor_id="V2"))
        dto = handler.handle(CUSTOMER, _request(coupon="V2ONLY"))
        assert dto.discount == "INR 0.00"
        assert dto.coupon_rejection is not None

    def test_inverted_window(self):
        _, handler = _setup()
        request = CreateQuotationRequest("V1", at(15), at(10), [OrderLineSpec("P1", 1)])
        with pytest.raises(ValidationError, match="must be before"):
            handler.handle(CUSTOMER, request)

    def test_line_quantity_must_be_positive(self):
        with pytest.raises(ValidationError, match="must be positive"):
            OrderLineSpec("P1", 0)

    def test_request_needs_lines(self):
        with pytest.raises(ValidationError, match="at least one line"):
            CreateQuotationRequest("V1", at(10), at(15), [])


def test_discount_is_snapshotted_as_decimal():
    uow, handler = _setup(make_coupon("SAVE10", value="10"))
    dto = handler.handle(CUSTOMER, _request(coupon="SAVE10"))
    assert uow.orders.get_by_id(dto.id).discount == Money(Decimal("500.00"))


class TestCreateQuotationCurrency:

    def test_uses_configured_currency(self):
        uow = FakeUnitOfWork(products=[make_product("P1", day_price=None)])
        uow.products.get_by_id("P1").pricing.append(
            RentalPeriodTier(PeriodUnit.DAY, Money.of("20", "USD"))
        )
        handler = CreateQuotationHandler(
            uow,
            BookingLocks(),
            StaticSettingsProvider(RentalSettings(currency="USD")),
            clock=lambda: at(5),
        )

        dto = handler.handle(CUSTOMER, _request([("P1", 1)]))

        assert dto.total == "USD 100.00"
        assert dto.discount == "USD 0.00"

    def test_price_in_other_currency_rejected(self):
        uow = FakeUnitOfWork(products=[make_product("P1")])
        handler = CreateQuotationHandler(
            uow,
            BookingLocks(),
            StaticSettingsProvider(RentalSettings(currency="USD")),
            clock=lambda: at(5),
        )

        with pytest.raises(ValidationError, match="priced in INR, expected USD"):
            handler.handle(CUSTOMER, _request([("P1", 1)]))
        assert uow.orders.list_all() == []


def test_quotation_is_recorded_in_audit_trail():
    uow, handler = _setup(make_coupon("SAVE10", value="10"))

    dto = handler.handle(CUSTOMER, _request(coupon="SAVE10"))

    (entry,) = uow.audit.list_for_entity("Order", dto.id)
    assert entry.action is AuditAction.ORDER_CREATED
    assert entry.actor == str(CUSTOMER)
    assert entry.metadata == {"total": "INR 4500.00", "coupon_code": "SAVE10"}
