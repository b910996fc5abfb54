"""Order aggregate — the core of the rental domain.

The Order is an aggregate root that owns its line items and its status.
Every status change goes through ``TRANSITIONS``; there is no other way to
move an order between states.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rentals.domain.exceptions import InvalidStateError, ValidationError
from rentals.domain.model.value_objects import Money, Quantity, RentalWindow, as_utc


class OrderStatus(Enum):
    QUOTATION = "QUOTATION"
    SENT = "SENT"
    CONFIRMED = "CONFIRMED"
    INVOICED = "INVOICED"
    PICKED_UP = "PICKED_UP"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class OrderAction(Enum):
    SEND = "SEND"
    CONFIRM = "CONFIRM"
    INVOICE = "INVOICE"
    PICKUP = "PICKUP"
    RETURN = "RETURN"
    CANCEL = "CANCEL"


TERMINAL_STATUSES = frozenset({OrderStatus.RETURNED, OrderStatus.CANCELLED})

# Statuses during which an order's reservations hold inventory.
ACTIVE_BOOKING_STATUSES = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.INVOICED, OrderStatus.PICKED_UP}
)

# Statuses whose reservations count against availability.  SENT orders never
# own reservations; it is listed so the filter stays right if that changes.
AVAILABILITY_COUNTED_STATUSES = ACTIVE_BOOKING_STATUSES | {OrderStatus.SENT}

TRANSITIONS: dict[tuple[OrderStatus, OrderAction], OrderStatus] = {
    (OrderStatus.QUOTATION, OrderAction.SEND): OrderStatus.SENT,
    (OrderStatus.SENT, OrderAction.CONFIRM): OrderStatus.CONFIRMED,
    (OrderStatus.CONFIRMED, OrderAction.INVOICE): OrderStatus.INVOICED,
    (OrderStatus.INVOICED, OrderAction.PICKUP): OrderStatus.PICKED_UP,
    (OrderStatus.PICKED_UP, OrderAction.RETURN): OrderStatus.RETURNED,
    **{
        (status, OrderAction.CANCEL): OrderStatus.CANCELLED
        for status in OrderStatus
        if status not in TERMINAL_STATUSES
    },
}


def next_status(current: OrderStatus, action: OrderAction) -> OrderStatus:
    """Look up the status *action* leads to, or raise InvalidStateError."""
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        allowed = sorted(s.value for (s, a) in TRANSITIONS if a is action)
        raise InvalidStateError(
            f"Cannot {action.value.lower()} order in {current.value} status "
            f"(allowed from: {', '.join(allowed)})",
            current=current.value,
            action=action.value,
        ) from None


@dataclass
class OrderLine:
    """Captures the rental price of a product at quotation time.

    ``unit_price`` is the price of one unit for the whole rental window.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


MAX_LINES = 50


@dataclass
class Order:
    """Aggregate root for rental orders.

    Use the ``Order.create()`` factory for new quotations; it enforces the
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_id: str
    vendor_id: str
    window: RentalWindow
    lines: list[OrderLine]
    status: OrderStatus = OrderStatus.QUOTATION
    discount: Money = field(default_factory=Money.zero)
    late_fee: Money = field(default_factory=Money.zero)
    coupon_code: str | None = None
    actual_return_date: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_id: str,
        vendor_id: str,
        window: RentalWindow,
        lines: list[OrderLine],
        discount: Money | None = None,
        coupon_code: str | None = None,
    ) -> Order:
        """Create a new quotation, enforcing all invariants."""
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer is required")
        if not vendor_id or not vendor_id.strip():
            raise ValidationError("Vendor is required")
        if not lines:
            raise ValidationError("Order must contain at least one line")
        if len(lines) > MAX_LINES:
            raise ValidationError(f"Maximum {MAX_LINES} lines per order")

        seen: set[str] = set()
        for line in lines:
            if line.product_id in seen:
                raise ValidationError(
                    f"Product '{line.product_name}' appears on more than one line"
                )
            seen.add(line.product_id)

        currency = lines[0].unit_price.currency
        order = Order(
            id=None,
            customer_id=customer_id.strip(),
            vendor_id=vendor_id.strip(),
            window=window,
            lines=list(lines),
            discount=discount or Money.zero(currency),
            late_fee=Money.zero(currency),
            coupon_code=coupon_code,
        )
        if order.discount > order.subtotal:
            raise ValidationError(
                f"Discount {order.discount} exceeds order subtotal {order.subtotal}"
            )
        return order

    # --- State transitions ----------------------------------------------------

    def can(self, action: OrderAction) -> bool:
        return (self.status, action) in TRANSITIONS

    def ensure_can(self, action: OrderAction) -> None:
        next_status(self.status, action)

    def send(self) -> None:
        self._apply(OrderAction.SEND)

    def confirm(self) -> None:
        """Transition SENT -> CONFIRMED.

        Reservations must be committed in the same unit of work
        (coordinated by the application handler).
        """
        self._apply(OrderAction.CONFIRM)

    def mark_invoiced(self) -> None:
        self._apply(OrderAction.INVOICE)

    def pick_up(self) -> None:
        self._apply(OrderAction.PICKUP)

    def mark_returned(self, returned_at: datetime, late_fee: Money) -> None:
        """Transition PICKED_UP -> RETURNED, recording when and at what cost."""
        returned_at = as_utc(returned_at)
        self.ensure_can(OrderAction.RETURN)
        if returned_at < self.window.start:
            raise ValidationError(
                f"Return time {returned_at.isoformat()} is before the rental start "
                f"{self.window.start.isoformat()}"
            )
        self._apply(OrderAction.RETURN)
        self.actual_return_date = returned_at
        self.late_fee = late_fee

    def cancel(self) -> None:
        """Transition any non-terminal status -> CANCELLED.

        If the order holds reservations they must be released in the same
        unit of work.
        """
        self._apply(OrderAction.CANCEL)

    # --- Computed properties --------------------------------------------------

    @property
    def currency(self) -> str:
        return self.lines[0].unit_price.currency

    @property
    def subtotal(self) -> Money:
        result = Money.zero(self.currency)
        for line in self.lines:
            result = result + line.line_total
        return result

    @property
    def total_amount(self) -> Money:
        return self.subtotal - self.discount

    @property
    def holds_reservations(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    @property
    def product_ids(self) -> list[str]:
        return [line.product_id for line in self.lines]

    def __str__(self) -> str:
        return f"Order #{self.id}"

    # --- Internal helpers -----------------------------------------------------

    def _apply(self, action: OrderAction) -> None:
        self.status = next_status(self.status, action)
