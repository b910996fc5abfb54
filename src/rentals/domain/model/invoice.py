"""Invoice aggregate.

An order has one PRIMARY invoice mirroring its lines.  Charges discovered
after that invoice is posted (late fees) go on a separate ADJUSTMENT
invoice, so a posted financial document is never edited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from rentals.domain.exceptions import InvalidStateError, ValidationError
from rentals.domain.model.value_objects import Money


class InvoiceStatus(Enum):
    DRAFT = "DRAFT"
    POSTED = "POSTED"


class InvoiceKind(Enum):
    PRIMARY = "PRIMARY"
    ADJUSTMENT = "ADJUSTMENT"


@dataclass(frozen=True)
class InvoiceLine:

    product_id: str | None
    description: str
    quantity: int
    unit_price: Money

    @property
    def amount(self) -> Money:
        return self.unit_price * self.quantity


@dataclass
class Invoice:

    id: int | None
    number: str
    order_id: int
    kind: InvoiceKind
    lines: list[InvoiceLine]
    total_amount: Money
    subtotal: Money
    tax_amount: Money
    issued_at: datetime
    due_date: datetime
    status: InvoiceStatus = InvoiceStatus.DRAFT

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValidationError("Invoice must contain at least one line")

    @property
    def is_posted(self) -> bool:
        return self.status is InvoiceStatus.POSTED

    def post(self) -> None:
        """Transition DRAFT -> POSTED.  Posted invoices are immutable."""
        if self.status is not InvoiceStatus.DRAFT:
            raise InvalidStateError(
                f"Cannot post invoice {self.number} in {self.status.value} status, "
                f"expected DRAFT",
                current=self.status.value,
                action="POST",
            )
        self.status = InvoiceStatus.POSTED
