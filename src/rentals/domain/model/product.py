"""Product aggregate (rental view).

Catalog management lives outside the booking core; here a product is the
capacity (``total_stock``) and the rental period tiers it can be priced by.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rentals.domain.exceptions import ValidationError
from rentals.domain.model.value_objects import Money


class PeriodUnit(Enum):
    HOUR = "HOUR"
    DAY = "DAY"
    WEEK = "WEEK"


@dataclass(frozen=True)
class RentalPeriodTier:
    """Price per unit of rental time, e.g. 500 per DAY."""

    unit: PeriodUnit
    price: Money


@dataclass
class Product:
    """A rentable product owned by one vendor.

    ``total_stock`` is fixed for the booking core; how many units are free
    at a given time is derived from reservations, never stored here.
    """

    id: str
    name: str
    vendor_id: str
    total_stock: int
    pricing: list[RentalPeriodTier] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.total_stock, bool) or not isinstance(self.total_stock, int):
            raise ValidationError("Total stock must be an integer")
        if self.total_stock < 0:
            raise ValidationError(
                f"Total stock for {self.name} cannot be negative, got {self.total_stock}"
            )
