"""Domain service: Late-Fee & Invoice Calculator.

Amounts on orders are tax-inclusive.  Tax is therefore *derived* from a
total by division, never added on top of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from rentals.domain.model.invoice import Invoice, InvoiceKind, InvoiceLine
from rentals.domain.model.order import Order
from rentals.domain.model.value_objects import Money, as_utc, hours_between
from rentals.domain.settings import RentalSettings


def late_fee(
    order_amount: Money,
    planned_end: datetime,
    actual_return: datetime,
    late_fee_rate: Decimal,
    grace_period_hours: Decimal,
) -> Money:
    """Fee for returning *actual_return* against a planned end of *planned_end*.

    Nothing is charged within the grace period.  Past it, the fee is the
    order amount times the daily rate for every (fractional) day beyond the
    grace period, rounded to cents.
    """
    days_late = max(Decimal(0), hours_between(planned_end, actual_return) / Decimal(24))
    grace_days = Decimal(str(grace_period_hours)) / Decimal(24)
    if days_late <= grace_days:
        return Money.zero(order_amount.currency)
    return (order_amount * (Decimal(str(late_fee_rate)) * (days_late - grace_days))).rounded()


@dataclass(frozen=True)
class TaxBreakdown:

    subtotal: Money
    tax_amount: Money
    gst_percent: Decimal

    @property
    def total(self) -> Money:
        return self.subtotal + self.tax_amount


def tax_breakdown(total_amount: Money, gst_percent: Decimal) -> TaxBreakdown:
    """Split a tax-inclusive total into its pre-tax subtotal and tax."""
    divisor = Decimal(1) + Decimal(str(gst_percent)) / Decimal(100)
    subtotal = Money(total_amount.amount / divisor, total_amount.currency).rounded()
    return TaxBreakdown(
        subtotal=subtotal,
        tax_amount=total_amount - subtotal,
        gst_percent=Decimal(str(gst_percent)),
    )


def invoice_number(settings: RentalSettings, invoice_id: int, kind: InvoiceKind) -> str:
    if kind is InvoiceKind.ADJUSTMENT:
        return f"{settings.invoice_prefix}-LATE-{invoice_id:06d}"
    return f"{settings.invoice_prefix}-{invoice_id:06d}"


def build_order_invoice(
    order: Order,
    invoice_id: int,
    settings: RentalSettings,
    issued_at: datetime,
) -> Invoice:
    """The PRIMARY invoice for an order: one line per order line."""
    issued_at = as_utc(issued_at)
    breakdown = tax_breakdown(order.total_amount, settings.gst_percent)
    return Invoice(
        id=invoice_id,
        number=invoice_number(settings, invoice_id, InvoiceKind.PRIMARY),
        order_id=order.id,  # type: ignore[arg-type]
        kind=InvoiceKind.PRIMARY,
        lines=[
            InvoiceLine(
                product_id=line.product_id,
                description=line.product_name,
                quantity=line.quantity.value,
                unit_price=line.unit_price,
            )
            for line in order.lines
        ],
        total_amount=order.total_amount,
        subtotal=breakdown.subtotal,
        tax_amount=breakdown.tax_amount,
        issued_at=issued_at,
        due_date=issued_at + timedelta(days=settings.invoice_due_days),
    )


def build_late_fee_invoice(
    order: Order,
    fee: Money,
    invoice_id: int,
    settings: RentalSettings,
    issued_at: datetime,
) -> Invoice:
    """An ADJUSTMENT invoice whose only line is the order's late fee."""
    issued_at = as_utc(issued_at)
    breakdown = tax_breakdown(fee, settings.gst_percent)
    return Invoice(
        id=invoice_id,
        number=invoice_number(settings, invoice_id, InvoiceKind.ADJUSTMENT),
        order_id=order.id,  # type: ignore[arg-type]
        kind=InvoiceKind.ADJUSTMENT,
        lines=[
            InvoiceLine(
                product_id=None,
                description=f"Late fee for order #{order.id}",
                quantity=1,
                unit_price=fee,
            )
        ],
        total_amount=fee,
        subtotal=breakdown.subtotal,
        tax_amount=breakdown.tax_amount,
        issued_at=issued_at,
        due_date=issued_at + timedelta(days=settings.invoice_due_days),
    )
