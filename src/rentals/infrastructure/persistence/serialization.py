"""Raw (JSON-friendly) encodings of value objects shared by the repositories."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from rentals.domain.model.value_objects import Money, RentalWindow, as_utc


def money_to_raw(money: Money) -> dict:
    return {"amount": str(money.amount), "currency": money.currency}


def money_from_raw(raw: dict) -> Money:
    return Money(Decimal(raw["amount"]), raw["currency"])


def datetime_to_raw(moment: datetime | None) -> str | None:
    return as_utc(moment).isoformat() if moment is not None else None


def datetime_from_raw(raw: str | None) -> datetime | None:
    return as_utc(datetime.fromisoformat(raw)) if raw is not None else None


def window_to_raw(window: RentalWindow) -> dict:
    return {"start": datetime_to_raw(window.start), "end": datetime_to_raw(window.end)}


def window_from_raw(raw: dict) -> RentalWindow:
    return RentalWindow(datetime.fromisoformat(raw["start"]), datetime.fromisoformat(raw["end"]))
