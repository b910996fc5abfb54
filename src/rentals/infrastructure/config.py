"""Application configuration, read from ``RENTALS_*`` environment variables."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from rentals.domain.settings import RentalSettings, SettingsProvider

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class AppConfig(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_prefix="RENTALS_", env_file=".env", extra="ignore")

    data_dir: Path = _DEFAULT_DATA_DIR
    log_level: str = "INFO"
    lock_timeout_seconds: float = 10.0

    gst_percent: Decimal = Decimal("18")
    late_fee_rate: Decimal = Decimal("0.1")
    grace_period_hours: Decimal = Decimal("24")
    currency: str = "INR"
    invoice_prefix: str = "INV"
    invoice_due_days: int = 30

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"

    def rental_settings(self) -> RentalSettings:
        return RentalSettings(
            gst_percent=self.gst_percent,
            late_fee_rate=self.late_fee_rate,
            grace_period_hours=self.grace_period_hours,
            currency=self.currency,
            invoice_prefix=self.invoice_prefix,
            invoice_due_days=self.invoice_due_days,
        )


class EnvSettingsProvider(SettingsProvider):
    """Re-reads the environment on every call, so changes apply at once."""

    def get_settings(self) -> RentalSettings:
        return AppConfig().rental_settings()
