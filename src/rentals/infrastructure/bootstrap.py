"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import cached_property

from rentals.application.cancel_order import CancelOrderHandler
from rentals.application.check_availability import CheckAvailabilityHandler
from rentals.application.confirm_order import ConfirmOrderHandler
from rentals.application.create_invoice import CreateInvoiceHandler
from rentals.application.create_quotation import CreateQuotationHandler
from rentals.application.locking import BookingLocks
from rentals.application.pickup_order import PickupOrderHandler
from rentals.application.post_invoice import PostInvoiceHandler
from rentals.application.return_order import ReturnOrderHandler
from rentals.application.send_order import SendOrderHandler
from rentals.application.show_order import ShowOrderHandler
from rentals.application.validate_coupon import ValidateCouponHandler
from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.settings import SettingsProvider
from rentals.infrastructure.config import AppConfig, EnvSettingsProvider
from rentals.infrastructure.persistence.document_store import DocumentStore, JsonDocumentStore
from rentals.infrastructure.persistence.json_unit_of_work import DocumentUnitOfWork


class Container:
    """Builds handlers sharing one store, one lock registry and one settings source."""

    def __init__(
        self,
        config: AppConfig | None = None,
        store: DocumentStore | None = None,
        settings_provider: SettingsProvider | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self._store = store
        self.settings_provider = settings_provider or EnvSettingsProvider()
        self.locks = BookingLocks()

    @cached_property
    def store(self) -> DocumentStore:
        return self._store or JsonDocumentStore(
            self.config.store_path, lock_timeout=self.config.lock_timeout_seconds
        )

    def unit_of_work(self) -> UnitOfWork:
        return DocumentUnitOfWork(self.store)

    # --- Booking API ----------------------------------------------------------

    def create_quotation(self) -> CreateQuotationHandler:
        return CreateQuotationHandler(self.unit_of_work, self.locks, self.settings_provider)

    def send_order(self) -> SendOrderHandler:
        return SendOrderHandler(self.unit_of_work, self.locks)

    def confirm_order(self) -> ConfirmOrderHandler:
        return ConfirmOrderHandler(self.unit_of_work, self.locks)

    def create_invoice(self) -> CreateInvoiceHandler:
        return CreateInvoiceHandler(self.unit_of_work, self.locks, self.settings_provider)

    def post_invoice(self) -> PostInvoiceHandler:
        return PostInvoiceHandler(self.unit_of_work, self.locks)

    def pickup_order(self) -> PickupOrderHandler:
        return PickupOrderHandler(self.unit_of_work, self.locks)

    def return_order(self) -> ReturnOrderHandler:
        return ReturnOrderHandler(self.unit_of_work, self.locks, self.settings_provider)

    def cancel_order(self) -> CancelOrderHandler:
        return CancelOrderHandler(self.unit_of_work, self.locks)

    def check_availability(self) -> CheckAvailabilityHandler:
        return CheckAvailabilityHandler(self.unit_of_work)

    def validate_coupon(self) -> ValidateCouponHandler:
        return ValidateCouponHandler(self.unit_of_work, self.settings_provider)

    def show_order(self) -> ShowOrderHandler:
        return ShowOrderHandler(self.unit_of_work)
