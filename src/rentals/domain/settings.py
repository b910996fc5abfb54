"""Settings consumed by the booking core.

The core only reads settings.  Where they come from, and how long they are
cached, is the provider's business.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from rentals.domain.exceptions import ValidationError


@dataclass(frozen=True)
class RentalSettings:

    gst_percent: Decimal = Decimal("18")
    late_fee_rate: Decimal = Decimal("0.1")
    grace_period_hours: Decimal = Decimal("24")
    currency: str = "INR"
    invoice_prefix: str = "INV"
    invoice_due_days: int = 30

    def __post_init__(self) -> None:
        if self.gst_percent < 0:
            raise ValidationError("GST percentage cannot be negative")
        if self.late_fee_rate < 0:
            raise ValidationError("Late fee rate cannot be negative")
        if self.grace_period_hours < 0:
            raise ValidationError("Grace period cannot be negative")
        if self.invoice_due_days < 0:
            raise ValidationError("Invoice due days cannot be negative")


class SettingsProvider(ABC):

    @abstractmethod
    def get_settings(self) -> RentalSettings:
        """Return the settings in force right now."""


class StaticSettingsProvider(SettingsProvider):
    """Serves one fixed RentalSettings instance."""

    def __init__(self, settings: RentalSettings | None = None) -> None:
        self._settings = settings or RentalSettings()

    def get_settings(self) -> RentalSettings:
        return self._settings
