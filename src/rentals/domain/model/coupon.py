"""Coupon aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from rentals.domain.exceptions import ValidationError
from rentals.domain.model.value_objects import as_utc


class DiscountType(Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


@dataclass
class Coupon:
    """A discount code, optionally limited to one vendor's orders.

    ``value`` is a percentage for PERCENTAGE coupons and an amount in the
    order's currency for FIXED ones.
    """

    code: str
    discount_type: DiscountType
    value: Decimal
    valid_from: datetime
    valid_to: datetime
    is_active: bool = True
    max_uses: int | None = None
    used_count: int = 0
    vendor_id: str | None = None

    def __post_init__(self) -> None:
        if not self.code or not self.code.strip():
            raise ValidationError("Coupon code is required")
        if self.value <= 0:
            raise ValidationError("Coupon value must be positive")
        if self.discount_type is DiscountType.PERCENTAGE and self.value > 100:
            raise ValidationError("Percentage coupon cannot exceed 100")
        if self.max_uses is not None and self.max_uses <= 0:
            raise ValidationError("Coupon max uses must be positive")
        self.valid_from = as_utc(self.valid_from)
        self.valid_to = as_utc(self.valid_to)

    def rejection_reason(self, at: datetime, vendor_id: str | None = None) -> str | None:
        """Why this coupon cannot be used at *at*, or None if it can."""
        at = as_utc(at)
        if not self.is_active:
            return "Coupon is inactive"
        if at < self.valid_from or at > self.valid_to:
            return "Coupon is expired or not yet valid"
        if self.max_uses is not None and self.used_count >= self.max_uses:
            return "Coupon usage limit reached"
        if self.vendor_id is not None and vendor_id is not None and self.vendor_id != vendor_id:
            return "Coupon is not valid for this vendor"
        return None

    def redeem(self) -> None:
        """Count one use of the coupon."""
        if self.max_uses is not None and self.used_count >= self.max_uses:
            raise ValidationError("Coupon usage limit reached")
        self.used_count += 1
