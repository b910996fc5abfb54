"""Helpers shared by the application handlers."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from rentals.domain.exceptions import EntityNotFoundError
from rentals.domain.model.order import Order
from rentals.domain.repository.unit_of_work import UnitOfWork

UnitOfWorkFactory = Callable[[], UnitOfWork]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def load_order(uow: UnitOfWork, order_id: int) -> Order:
    order = uow.orders.get_by_id(order_id)
    if order is None:
        raise EntityNotFoundError(f"Order #{order_id} not found")
    return order
