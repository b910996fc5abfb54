"""Domain service: Pricing & Coupon Engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from rentals.domain.exceptions import NoPricingAvailableError
from rentals.domain.model.coupon import Coupon, DiscountType
from rentals.domain.model.product import PeriodUnit, Product, RentalPeriodTier
from rentals.domain.model.value_objects import Money, RentalWindow


def tier_total(tier: RentalPeriodTier, window: RentalWindow) -> Money:
    """Price of one unit for the whole window under a single tier.

    Hourly tiers charge the exact (fractional) number of hours; daily and
    weekly tiers charge every started day or week.
    """
    if tier.unit is PeriodUnit.HOUR:
        return tier.price * window.hours
    if tier.unit is PeriodUnit.DAY:
        return tier.price * math.ceil(window.days)
    return tier.price * math.ceil(window.days / 7)


def resolve_price(product: Product, window: RentalWindow) -> Money:
    """Cheapest per-unit price for *window* across the product's tiers."""
    if not product.pricing:
        raise NoPricingAvailableError(f"No pricing found for product '{product.name}'")
    cheapest = min((tier_total(tier, window) for tier in product.pricing), key=lambda m: m.amount)
    return cheapest.rounded()


@dataclass(frozen=True)
class CouponResult:
    """Outcome of applying a coupon: a discount, or zero and the reason."""

    discount: Money
    reason: str | None = None

    @property
    def applied(self) -> bool:
        return self.reason is None


def apply_coupon(
    coupon: Coupon | None,
    subtotal: Money,
    at: datetime,
    vendor_id: str | None = None,
) -> CouponResult:
    """Compute the discount *coupon* gives on *subtotal*.

    The discount is clamped to the subtotal, so it can never make an order
    total negative.
    """
    none = Money.zero(subtotal.currency)
    if coupon is None:
        return CouponResult(none, "Invalid coupon code")

    reason = coupon.rejection_reason(at, vendor_id)
    if reason is not None:
        return CouponResult(none, reason)

    if coupon.discount_type is DiscountType.PERCENTAGE:
        discount = subtotal * (coupon.value / Decimal(100))
    else:
        discount = Money(coupon.value, subtotal.currency)

    discount = discount.rounded()
    if discount > subtotal:
        discount = subtotal
    return CouponResult(discount)
