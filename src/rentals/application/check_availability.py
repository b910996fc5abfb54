"""Application service: Check Availability use case (query).

Read-only, so a transient storage failure is retried here a bounded
number of times before it is surfaced.  Write use cases never retry.
"""

from __future__ import annotations

import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from rentals.application.dto import AvailabilityDTO, AvailabilityRequest
from rentals.application.support import UnitOfWorkFactory
from rentals.domain.exceptions import EntityNotFoundError, StorageError
from rentals.domain.model.value_objects import RentalWindow
from rentals.domain.service.availability_service import AvailabilityChecker

logger = logging.getLogger(__name__)

READ_ATTEMPTS = 3


class CheckAvailabilityHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @retry(
        stop=stop_after_attempt(READ_ATTEMPTS),
        wait=wait_exponential(multiplier=0.05, max=1),
        retry=retry_if_exception_type(StorageError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def handle(self, request: AvailabilityRequest) -> AvailabilityDTO:
        window = RentalWindow(request.start_date, request.end_date)
        with self._uow_factory() as uow:
            product = uow.products.get_by_id(request.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{request.product_id}' not found")
            checker = AvailabilityChecker(uow.reservations, uow.orders)
            result = checker.check(product, window, request.requested_qty)

        logger.debug(
            "Availability of %s over %s: %s (%d free of %d)",
            product.id, window, result.status.value, result.available_qty, result.total_stock,
        )
        return AvailabilityDTO.from_result(result)
