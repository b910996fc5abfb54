"""Tests for the read-only use cases: availability and coupon preview."""

from decimal import Decimal

import pytest

from rentals.application.check_availability import READ_ATTEMPTS, CheckAvailabilityHandler
from rentals.application.dto import AvailabilityRequest
from rentals.application.validate_coupon import ValidateCouponHandler
from rentals.domain.exceptions import EntityNotFoundError, StorageError, ValidationError
from rentals.domain.model.coupon import DiscountType
from rentals.domain.settings import RentalSettings, StaticSettingsProvider
from tests.fakes import FakeUnitOfWork, at, make_coupon, make_product


class TestCheckAvailability:

    def test_free_product(self):
        uow = FakeUnitOfWork(products=[make_product("P1", stock=5)])
        dto = CheckAvailabilityHandler(uow).handle(AvailabilityRequest("P1", at(10), at(12), 2))
        assert dto.status == "FULL"
        assert dto.available_qty == 5
        assert dto.total_stock == 5

    def test_unknown_product(self):
        uow = FakeUnitOfWork()
        with pytest.raises(EntityNotFoundError, match="P9"):
            CheckAvailabilityHandler(uow).handle(AvailabilityRequest("P9", at(10), at(12)))

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            AvailabilityRequest("P1", at(10), at(12), -1)

    def test_transient_storage_error_is_retried(self):
        uow = FakeUnitOfWork(products=[make_product("P1", stock=5)])
        calls: list[int] = []

        def flaky():
            calls.append(1)
            if len(calls) < READ_ATTEMPTS:
                raise StorageError("store busy")
            return uow

        dto = CheckAvailabilityHandler(flaky).handle(AvailabilityRequest("P1", at(10), at(12)))

        assert dto.available_qty == 5
        assert len(calls) == READ_ATTEMPTS

    def test_persistent_storage_error_surfaces(self):
        calls: list[int] = []

        def broken():
            calls.append(1)
            raise StorageError("store down")

        with pytest.raises(StorageError, match="store down"):
            CheckAvailabilityHandler(broken).handle(AvailabilityRequest("P1", at(10), at(12)))
        assert len(calls) == READ_ATTEMPTS

    def test_domain_errors_are_not_retried(self):
        calls: list[int] = []
        uow = FakeUnitOfWork()

        def counting():
            calls.append(1)
            return uow

        with pytest.raises(EntityNotFoundError):
            CheckAvailabilityHandler(counting).handle(AvailabilityRequest("P9", at(10), at(12)))
        assert len(calls) == 1


class TestValidateCoupon:

    def _handler(self, *coupons):
        uow = FakeUnitOfWork(coupons=list(coupons))
        return uow, ValidateCouponHandler(uow, clock=lambda: at(5))

    def test_valid_coupon(self):
        _, handler = self._handler(make_coupon("SAVE10", value="10"))
        result = handler.handle("save10", "1500.00")
        assert result.valid
        assert result.code == "SAVE10"
        assert result.discount == Decimal("150.00")
        assert result.final_amount == Decimal("1350.00")

    def test_preview_does_not_redeem(self):
        uow, handler = self._handler(make_coupon("ONCE", max_uses=1))
        handler.handle("ONCE", "100")
        handler.handle("ONCE", "100")
        assert uow.coupons.get_by_code("ONCE").used_count == 0

    def test_unknown_coupon_is_reported(self):
        _, handler = self._handler()
        result = handler.handle("NOPE", "100")
        assert not result.valid
        assert result.reason == "Invalid coupon code"
        assert result.final_amount == Decimal("100")

    def test_fixed_coupon_clamped(self):
        _, handler = self._handler(make_coupon("FLAT", DiscountType.FIXED, value="500"))
        result = handler.handle("FLAT", "200")
        assert result.discount == Decimal("200")
        assert result.final_amount == Decimal("0")

    def test_wrong_vendor(self):
        _, handler = self._handler(make_coupon("V1ONLY", vendor_id="V1"))
        result = handler.handle("V1ONLY", "100", vendor_id="V2")
        assert result.reason == "Coupon is not valid for this vendor"

    def test_bad_amount(self):
        _, handler = self._handler()
        with pytest.raises(ValidationError, match="Invalid money amount"):
            handler.handle("SAVE10", "lots")

    def test_blank_code(self):
        _, handler = self._handler()
        with pytest.raises(ValidationError, match="required"):
            handler.handle("  ", "100")

    def test_amount_uses_configured_currency(self):
        uow = FakeUnitOfWork(coupons=[make_coupon("FLAT", DiscountType.FIXED, value="5")])
        handler = ValidateCouponHandler(
            uow,
            StaticSettingsProvider(RentalSettings(currency="USD")),
            clock=lambda: at(5),
        )

        result = handler.handle("FLAT", "20")

        assert result.currency == "USD"
        assert result.final_amount == Decimal("15")
