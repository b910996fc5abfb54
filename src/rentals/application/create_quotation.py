"""Application service: Create Quotation use case.

Prices every line for the requested window, applies an optional coupon and
persists the order in QUOTATION status.  A quotation never reserves
inventory.

An unknown coupon code is an error.  A known coupon that cannot be used
(expired, used up, another vendor's) does not block the quotation: the
order is created without a discount and the reason is returned with it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from rentals.application.dto import CreateQuotationRequest, OrderDTO
from rentals.application.locking import BookingLocks, coupon_key
from rentals.application.support import Clock, UnitOfWorkFactory, utc_now
from rentals.domain.exceptions import EntityNotFoundError, UnauthorizedError, ValidationError
from rentals.domain.model.audit import ORDER, AuditAction, AuditEntry
from rentals.domain.model.order import Order, OrderLine
from rentals.domain.model.principal import Principal, Role
from rentals.domain.model.value_objects import Money, Quantity, RentalWindow
from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.service.pricing_service import CouponResult, apply_coupon, resolve_price
from rentals.domain.settings import SettingsProvider, StaticSettingsProvider

logger = logging.getLogger(__name__)


class CreateQuotationHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: BookingLocks,
        settings_provider: SettingsProvider | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks
        self._settings_provider = settings_provider or StaticSettingsProvider()
        self._clock = clock

    def handle(
        self,
        principal: Principal,
        request: CreateQuotationRequest,
        timeout: float | None = None,
    ) -> OrderDTO:
        """Create a new rental quotation.

        Steps:
        1. Resolve every product (must exist and belong to the vendor).
        2. Price each line with the cheapest tier for the window (snapshot).
        3. Apply and redeem the coupon, if any and if usable.
        4. Let the Order aggregate validate, persist and return a DTO.
        """
        customer_id = self._customer_for(principal, request)
        window = RentalWindow(request.start_date, request.end_date)
        currency = self._settings_provider.get_settings().currency
        keys = [coupon_key(request.coupon_code)] if request.coupon_code else []

        with self._locks.hold(keys, timeout), self._uow_factory() as uow:
            lines = self._price_lines(uow, request, window, currency)
            coupon = CouponResult(Money.zero(currency))
            if request.coupon_code:
                coupon = self._redeem_coupon(uow, request, lines, currency)

            order = Order.create(
                customer_id=customer_id,
                vendor_id=request.vendor_id,
                window=window,
                lines=lines,
                discount=coupon.discount,
                coupon_code=(
                    request.coupon_code.strip().upper()
                    if request.coupon_code and coupon.applied
                    else None
                ),
            )
            uow.orders.save(order)
            uow.audit.add(
                AuditEntry.record(
                    principal,
                    AuditAction.ORDER_CREATED,
                    ORDER,
                    order.id,  # type: ignore[arg-type]
                    self._clock(),
                    total=str(order.total_amount),
                    coupon_code=order.coupon_code,
                )
            )
            uow.commit()

        logger.info(
            "Created quotation %s for customer %s (total %s)",
            order.id,
            customer_id,
            order.total_amount,
            extra={"event_type": "order.quoted"},
        )
        return replace(OrderDTO.from_domain(order), coupon_rejection=coupon.reason)

    # --- Steps ----------------------------------------------------------------

    @staticmethod
    def _customer_for(principal: Principal, request: CreateQuotationRequest) -> str:
        if principal.role is Role.CUSTOMER:
            return principal.party_id  # type: ignore[return-value]
        if principal.is_admin:
            if not request.customer_id:
                raise ValidationError("Customer ID is required when quoting on behalf of a customer")
            return request.customer_id
        raise UnauthorizedError("Only customers can request quotations")

    @staticmethod
    def _price_lines(
        uow: UnitOfWork,
        request: CreateQuotationRequest,
        window: RentalWindow,
        currency: str,
    ) -> list[OrderLine]:
        lines: list[OrderLine] = []
        for spec in request.lines:
            product = uow.products.get_by_id(spec.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{spec.product_id}' not found")
            if product.vendor_id != request.vendor_id:
                raise ValidationError(
                    f"Product '{product.name}' is not offered by vendor '{request.vendor_id}'"
                )
            price = resolve_price(product, window)  # <-- price snapshot
            if price.currency != currency:
                raise ValidationError(
                    f"Product '{product.name}' is priced in {price.currency}, "
                    f"expected {currency}"
                )
            lines.append(
                OrderLine(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=Quantity(spec.quantity),
                    unit_price=price,
                )
            )
        return lines

    def _redeem_coupon(
        self,
        uow: UnitOfWork,
        request: CreateQuotationRequest,
        lines: list[OrderLine],
        currency: str,
    ) -> CouponResult:
        code = request.coupon_code or ""
        coupon = uow.coupons.get_by_code(code)
        if coupon is None:
            raise EntityNotFoundError(f"Coupon '{code}' not found")

        subtotal = Money.zero(currency)
        for line in lines:
            subtotal = subtotal + line.line_total

        result = apply_coupon(coupon, subtotal, self._clock(), request.vendor_id)
        if not result.applied:
            logger.info("Coupon %s not applied: %s", coupon.code, result.reason)
            return result

        coupon.redeem()
        uow.coupons.save(coupon)
        return result
