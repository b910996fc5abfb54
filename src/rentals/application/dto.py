"""Data Transfer Objects — plain containers that cross layer boundaries.

Requests are validated when they are built, so malformed input never
reaches a handler.  Responses are flat, formatted views of the domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from rentals.domain.exceptions import ValidationError
from rentals.domain.model.audit import AuditEntry
from rentals.domain.model.invoice import Invoice
from rentals.domain.model.order import Order
from rentals.domain.service.availability_service import AvailabilityResult

# --- Requests -----------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineSpec:
    """Input: which product and how many units the customer wants."""

    product_id: str
    quantity: int

    def __post_init__(self) -> None:
        if not self.product_id or not self.product_id.strip():
            raise ValidationError("Product ID is required on every line")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError(f"Quantity for '{self.product_id}' must be an integer")
        if self.quantity <= 0:
            raise ValidationError(f"Quantity for '{self.product_id}' must be positive")


@dataclass(frozen=True)
class CreateQuotationRequest:
    """Input: a rental quotation for one vendor's products."""

    vendor_id: str
    start_date: datetime
    end_date: datetime
    lines: list[OrderLineSpec]
    coupon_code: str | None = None
    customer_id: str | None = None  # only honoured for admin principals

    def __post_init__(self) -> None:
        if not self.vendor_id or not self.vendor_id.strip():
            raise ValidationError("Vendor ID is required")
        if not isinstance(self.start_date, datetime) or not isinstance(self.end_date, datetime):
            raise ValidationError("Start and end dates must be timestamps")
        if not self.lines:
            raise ValidationError("Quotation must contain at least one line")
        if self.coupon_code is not None and not self.coupon_code.strip():
            raise ValidationError("Coupon code cannot be blank")


@dataclass(frozen=True)
class AvailabilityRequest:

    product_id: str
    start_date: datetime
    end_date: datetime
    requested_qty: int = 1

    def __post_init__(self) -> None:
        if not self.product_id or not self.product_id.strip():
            raise ValidationError("Product ID is required")
        if not isinstance(self.start_date, datetime) or not isinstance(self.end_date, datetime):
            raise ValidationError("Start and end dates must be timestamps")
        if isinstance(self.requested_qty, bool) or not isinstance(self.requested_qty, int):
            raise ValidationError("Requested quantity must be an integer")
        if self.requested_qty < 0:
            raise ValidationError("Requested quantity cannot be negative")


# --- Responses ----------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineDTO:
    """Output: a single order line as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "INR 500.00"
    line_total: str


@dataclass(frozen=True)
class InvoiceLineDTO:

    product_id: str | None
    description: str
    quantity: int
    unit_price: str
    amount: str


@dataclass(frozen=True)
class InvoiceDTO:

    id: int
    number: str
    order_id: int
    kind: str
    status: str
    lines: list[InvoiceLineDTO]
    subtotal: str
    tax_amount: str
    total_amount: str
    issued_at: str
    due_date: str

    @staticmethod
    def from_domain(invoice: Invoice) -> InvoiceDTO:
        return InvoiceDTO(
            id=invoice.id,  # type: ignore[arg-type]
            number=invoice.number,
            order_id=invoice.order_id,
            kind=invoice.kind.value,
            status=invoice.status.value,
            lines=[
                InvoiceLineDTO(
                    product_id=line.product_id,
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=str(line.unit_price),
                    amount=str(line.amount),
                )
                for line in invoice.lines
            ],
            subtotal=str(invoice.subtotal),
            tax_amount=str(invoice.tax_amount),
            total_amount=str(invoice.total_amount),
            issued_at=invoice.issued_at.strftime("%Y-%m-%d %H:%M UTC"),
            due_date=invoice.due_date.strftime("%Y-%m-%d"),
        )


@dataclass(frozen=True)
class AuditEntryDTO:
    """Output: one recorded transition."""

    action: str
    actor: str
    at: str
    metadata: dict

    @staticmethod
    def from_domain(entry: AuditEntry) -> AuditEntryDTO:
        return AuditEntryDTO(
            action=entry.action.value,
            actor=entry.actor,
            at=entry.created_at.strftime("%Y-%m-%d %H:%M UTC") if entry.created_at else "",
            metadata=dict(entry.metadata),
        )


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_id: str
    vendor_id: str
    status: str
    start_date: str
    end_date: str
    lines: list[OrderLineDTO]
    subtotal: str
    discount: str
    total: str
    late_fee: str
    coupon_code: str | None
    actual_return_date: str | None
    created_at: str
    invoices: list[InvoiceDTO] = field(default_factory=list)
    history: list[AuditEntryDTO] = field(default_factory=list)
    coupon_rejection: str | None = None

    @staticmethod
    def from_domain(
        order: Order,
        invoices: list[Invoice] | None = None,
        history: list[AuditEntry] | None = None,
    ) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            customer_id=order.customer_id,
            vendor_id=order.vendor_id,
            status=order.status.value,
            start_date=order.window.start.strftime("%Y-%m-%d %H:%M UTC"),
            end_date=order.window.end.strftime("%Y-%m-%d %H:%M UTC"),
            lines=[
                OrderLineDTO(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity.value,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                )
                for line in order.lines
            ],
            subtotal=str(order.subtotal),
            discount=str(order.discount),
            total=str(order.total_amount),
            late_fee=str(order.late_fee),
            coupon_code=order.coupon_code,
            actual_return_date=(
                order.actual_return_date.strftime("%Y-%m-%d %H:%M UTC")
                if order.actual_return_date
                else None
            ),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            invoices=[InvoiceDTO.from_domain(i) for i in invoices or []],
            history=[AuditEntryDTO.from_domain(e) for e in history or []],
        )


@dataclass(frozen=True)
class AvailabilityDTO:

    product_id: str
    status: str
    available_qty: int
    total_stock: int
    booked_qty: int

    @staticmethod
    def from_result(result: AvailabilityResult) -> AvailabilityDTO:
        return AvailabilityDTO(
            product_id=result.product_id,
            status=result.status.value,
            available_qty=result.available_qty,
            total_stock=result.total_stock,
            booked_qty=result.booked_qty,
        )


@dataclass(frozen=True)
class ReturnResultDTO:
    """Output of a return: the order, its late fee, and any new invoice."""

    order: OrderDTO
    late_fee: str
    was_late: bool
    late_fee_invoice: InvoiceDTO | None = None


@dataclass(frozen=True)
class CouponCheckDTO:

    code: str
    valid: bool
    discount: Decimal
    final_amount: Decimal
    currency: str = "INR"
    reason: str | None = None
