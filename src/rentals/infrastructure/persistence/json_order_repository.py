"""Document-store implementation of OrderRepository."""

from __future__ import annotations

from rentals.domain.model.order import Order, OrderLine, OrderStatus
from rentals.domain.model.value_objects import Quantity
from rentals.domain.repository.order_repository import OrderRepository
from rentals.infrastructure.persistence.document_store import StagedCollection
from rentals.infrastructure.persistence.serialization import (
    datetime_from_raw,
    datetime_to_raw,
    money_from_raw,
    money_to_raw,
    window_from_raw,
    window_to_raw,
)


class JsonOrderRepository(StagedCollection, OrderRepository):

    collection = "orders"

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        raw = self._get_raw(str(order_id))
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._scan_raw()]

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self._store.next_sequence(self.collection)
        self._put_raw(str(order.id), self._to_raw(order))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_id": order.customer_id,
            "vendor_id": order.vendor_id,
            "status": order.status.value,
            "window": window_to_raw(order.window),
            "discount": money_to_raw(order.discount),
            "late_fee": money_to_raw(order.late_fee),
            "coupon_code": order.coupon_code,
            "actual_return_date": datetime_to_raw(order.actual_return_date),
            "created_at": datetime_to_raw(order.created_at),
            "lines": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "quantity": line.quantity.value,
                    "unit_price": money_to_raw(line.unit_price),
                }
                for line in order.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        lines = [
            OrderLine(
                product_id=line["product_id"],
                product_name=line["product_name"],
                quantity=Quantity(line["quantity"]),
                unit_price=money_from_raw(line["unit_price"]),
            )
            for line in raw["lines"]
        ]
        return Order(
            id=raw["id"],
            customer_id=raw["customer_id"],
            vendor_id=raw["vendor_id"],
            window=window_from_raw(raw["window"]),
            lines=lines,
            status=OrderStatus(raw["status"]),
            discount=money_from_raw(raw["discount"]),
            late_fee=money_from_raw(raw["late_fee"]),
            coupon_code=raw.get("coupon_code"),
            actual_return_date=datetime_from_raw(raw.get("actual_return_date")),
            created_at=datetime_from_raw(raw["created_at"]),
        )
