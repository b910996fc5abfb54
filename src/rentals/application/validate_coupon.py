"""Application service: Validate Coupon use case (query)."""

from __future__ import annotations

from decimal import Decimal

from rentals.application.dto import CouponCheckDTO
from rentals.application.support import Clock, UnitOfWorkFactory, utc_now
from rentals.domain.exceptions import ValidationError
from rentals.domain.model.value_objects import Money
from rentals.domain.service.pricing_service import apply_coupon
from rentals.domain.settings import SettingsProvider, StaticSettingsProvider


class ValidateCouponHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        settings_provider: SettingsProvider | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._settings_provider = settings_provider or StaticSettingsProvider()
        self._clock = clock

    def handle(self, code: str, order_amount: str | Decimal, vendor_id: str | None = None) -> CouponCheckDTO:
        """Preview the discount *code* would give on *order_amount*.

        Nothing is redeemed; an unusable coupon is reported, not raised.
        """
        if not code or not code.strip():
            raise ValidationError("Coupon code is required")
        amount = Money.of(order_amount, self._settings_provider.get_settings().currency)

        with self._uow_factory() as uow:
            coupon = uow.coupons.get_by_code(code)
        result = apply_coupon(coupon, amount, self._clock(), vendor_id)

        return CouponCheckDTO(
            code=code.strip().upper(),
            valid=result.applied,
            discount=result.discount.amount,
            final_amount=(amount - result.discount).amount,
            reason=result.reason,
            currency=amount.currency,
        )
