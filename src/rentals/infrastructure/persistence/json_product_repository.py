"""Document-store implementation of ProductRepository."""

from __future__ import annotations

from rentals.domain.model.product import PeriodUnit, Product, RentalPeriodTier
from rentals.domain.repository.product_repository import ProductRepository
from rentals.infrastructure.persistence.document_store import StagedCollection
from rentals.infrastructure.persistence.serialization import money_from_raw, money_to_raw


class JsonProductRepository(StagedCollection, ProductRepository):

    collection = "products"

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        raw = self._get_raw(product_id)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._scan_raw()]

    def save(self, product: Product) -> None:
        self._put_raw(product.id, self._to_raw(product))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "vendor_id": product.vendor_id,
            "total_stock": product.total_stock,
            "pricing": [
                {"unit": tier.unit.value, "price": money_to_raw(tier.price)}
                for tier in product.pricing
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            vendor_id=raw["vendor_id"],
            total_stock=raw["total_stock"],
            pricing=[
                RentalPeriodTier(unit=PeriodUnit(t["unit"]), price=money_from_raw(t["price"]))
                for t in raw.get("pricing", [])
            ],
        )
