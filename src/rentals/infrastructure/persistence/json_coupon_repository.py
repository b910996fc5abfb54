"""Document-store implementation of CouponRepository.

Coupons are keyed by their upper-cased code, so lookups ignore case.
"""

from __future__ import annotations

from decimal import Decimal

from rentals.domain.model.coupon import Coupon, DiscountType
from rentals.domain.repository.coupon_repository import CouponRepository
from rentals.infrastructure.persistence.document_store import StagedCollection
from rentals.infrastructure.persistence.serialization import datetime_from_raw, datetime_to_raw


class JsonCouponRepository(StagedCollection, CouponRepository):

    collection = "coupons"

    def get_by_code(self, code: str) -> Coupon | None:
        raw = self._get_raw(code.strip().upper())
        return self._to_domain(raw) if raw is not None else None

    def save(self, coupon: Coupon) -> None:
        self._put_raw(coupon.code.strip().upper(), self._to_raw(coupon))

    @staticmethod
    def _to_raw(coupon: Coupon) -> dict:
        return {
            "code": coupon.code,
            "discount_type": coupon.discount_type.value,
            "value": str(coupon.value),
            "valid_from": datetime_to_raw(coupon.valid_from),
            "valid_to": datetime_to_raw(coupon.valid_to),
            "is_active": coupon.is_active,
            "max_uses": coupon.max_uses,
            "used_count": coupon.used_count,
            "vendor_id": coupon.vendor_id,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Coupon:
        return Coupon(
            code=raw["code"],
            discount_type=DiscountType(raw["discount_type"]),
            value=Decimal(raw["value"]),
            valid_from=datetime_from_raw(raw["valid_from"]),
            valid_to=datetime_from_raw(raw["valid_to"]),
            is_active=raw.get("is_active", True),
            max_uses=raw.get("max_uses"),
            used_count=raw.get("used_count", 0),
            vendor_id=raw.get("vendor_id"),
        )
