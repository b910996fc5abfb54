"""The caller on whose behalf an operation runs.

Authentication happens outside the core; the caller passes in who it is and
the core only checks ownership against the order it is about to touch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rentals.domain.exceptions import UnauthorizedError, ValidationError


class Role(Enum):
    ADMIN = "ADMIN"
    VENDOR = "VENDOR"
    CUSTOMER = "CUSTOMER"


@dataclass(frozen=True)
class Principal:

    role: Role
    party_id: str | None = None

    def __post_init__(self) -> None:
        if self.role is not Role.ADMIN and not self.party_id:
            raise ValidationError(f"{self.role.value} principal requires a party id")

    @staticmethod
    def admin() -> Principal:
        return Principal(Role.ADMIN)

    @staticmethod
    def vendor(vendor_id: str) -> Principal:
        return Principal(Role.VENDOR, vendor_id)

    @staticmethod
    def customer(customer_id: str) -> Principal:
        return Principal(Role.CUSTOMER, customer_id)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def owns_as_vendor(self, vendor_id: str) -> bool:
        return self.is_admin or (self.role is Role.VENDOR and self.party_id == vendor_id)

    def owns_as_customer(self, customer_id: str) -> bool:
        return self.role is Role.CUSTOMER and self.party_id == customer_id

    # --- Guards ---------------------------------------------------------------

    def require_vendor_of(self, vendor_id: str, what: str) -> None:
        """Only the owning vendor (or an admin) may manage *what*."""
        if not self.owns_as_vendor(vendor_id):
            raise UnauthorizedError(f"Not authorized to manage {what}")

    def require_party_of(self, vendor_id: str, customer_id: str, what: str) -> None:
        """Vendor, customer or admin of *what* may read it."""
        if not (self.owns_as_vendor(vendor_id) or self.owns_as_customer(customer_id)):
            raise UnauthorizedError(f"Not authorized to access {what}")

    def __str__(self) -> str:
        if self.is_admin:
            return "admin"
        return f"{self.role.value.lower()}:{self.party_id}"
