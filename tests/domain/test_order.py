"""Unit tests for the Order aggregate and its status machine."""

import pytest

from rentals.domain.exceptions import InvalidStateError, ValidationError
from rentals.domain.model.order import (
    TRANSITIONS,
    Order,
    OrderAction,
    OrderLine,
    OrderStatus,
    next_status,
)
from rentals.domain.model.value_objects import Money, Quantity, RentalWindow
from tests.fakes import at


def _make_line(product_id: str = "P1", qty: int = 1, price: str = "500.00") -> OrderLine:
    """Helper to build a valid line."""
    return OrderLine(
        product_id=product_id,
        product_name=f"Product {product_id}",
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


def _make_order(status: OrderStatus = OrderStatus.QUOTATION, **kwargs) -> Order:
    order = Order.create(
        customer_id="C1",
        vendor_id="V1",
        window=RentalWindow(at(10), at(15)),
        lines=kwargs.pop("lines", [_make_line(qty=2)]),
        **kwargs,
    )
    order.id = 1
    order.status = status
    return order


class TestOrderCreation:

    def test_happy_path(self):
        order = _make_order()
        assert order.status == OrderStatus.QUOTATION
        assert order.subtotal == Money.of("1000.00")
        assert order.total_amount == Money.of("1000.00")
        assert order.late_fee.is_zero

    def test_id_is_none_for_new_orders(self):
        order = Order.create("C1", "V1", RentalWindow(at(10), at(15)), [_make_line()])
        assert order.id is None  # assigned by repository

    def test_discount_reduces_total(self):
        order = _make_order(discount=Money.of("100"), coupon_code="SAVE")
        assert order.total_amount == Money.of("900.00")

    def test_discount_above_subtotal_rejected(self):
        with pytest.raises(ValidationError, match="exceeds order subtotal"):
            _make_order(discount=Money.of("5000"))

    def test_empty_lines_rejected(self):
        with pytest.raises(ValidationError, match="at least one line"):
            Order.create("C1", "V1", RentalWindow(at(10), at(15)), [])

    def test_customer_required(self):
        with pytest.raises(ValidationError, match="Customer is required"):
            Order.create("  ", "V1", RentalWindow(at(10), at(15)), [_make_line()])

    def test_duplicate_product_rejected(self):
        with pytest.raises(ValidationError, match="more than one line"):
            _make_order(lines=[_make_line("P1"), _make_line("P1")])


class TestTransitionTable:

    def test_happy_path_sequence(self):
        status = OrderStatus.QUOTATION
        for action in (
            OrderAction.SEND,
            OrderAction.CONFIRM,
            OrderAction.INVOICE,
            OrderAction.PICKUP,
            OrderAction.RETURN,
        ):
            status = next_status(status, action)
        assert status == OrderStatus.RETURNED

    def test_cancel_allowed_from_every_non_terminal_status(self):
        for status in OrderStatus:
            if status.is_terminal:
                assert (status, OrderAction.CANCEL) not in TRANSITIONS
            else:
                assert next_status(status, OrderAction.CANCEL) == OrderStatus.CANCELLED

    def test_terminal_statuses_have_no_exits(self):
        for (status, _action) in TRANSITIONS:
            assert not status.is_terminal

    @pytest.mark.parametrize(
        "status, action",
        [
            (OrderStatus.QUOTATION, OrderAction.CONFIRM),
            (OrderStatus.SENT, OrderAction.INVOICE),
            (OrderStatus.CONFIRMED, OrderAction.PICKUP),
            (OrderStatus.INVOICED, OrderAction.RETURN),
            (OrderStatus.RETURNED, OrderAction.CANCEL),
            (OrderStatus.CANCELLED, OrderAction.SEND),
        ],
    )
    def test_illegal_transition_raises(self, status, action):
        with pytest.raises(InvalidStateError) as exc_info:
            next_status(status, action)
        assert exc_info.value.current == status.value
        assert exc_info.value.action == action.value


class TestOrderTransitions:

    def test_confirm_requires_sent(self):
        order = _make_order()
        with pytest.raises(InvalidStateError, match="QUOTATION"):
            order.confirm()
        assert order.status == OrderStatus.QUOTATION

    def test_send_then_confirm(self):
        order = _make_order()
        order.send()
        order.confirm()
        assert order.status == OrderStatus.CONFIRMED
        assert order.holds_reservations

    def test_quotation_holds_no_reservations(self):
        assert not _make_order(OrderStatus.SENT).holds_reservations

    def test_mark_returned_records_time_and_fee(self):
        order = _make_order(OrderStatus.PICKED_UP)
        order.mark_returned(at(16), Money.of("50"))
        assert order.status == OrderStatus.RETURNED
        assert order.actual_return_date == at(16)
        assert order.late_fee == Money.of("50")

    def test_return_before_start_rejected(self):
        order = _make_order(OrderStatus.PICKED_UP)
        with pytest.raises(ValidationError, match="before the rental start"):
            order.mark_returned(at(9), Money.zero())
        assert order.status == OrderStatus.PICKED_UP

    def test_return_requires_picked_up(self):
        order = _make_order(OrderStatus.INVOICED)
        with pytest.raises(InvalidStateError):
            order.mark_returned(at(16), Money.zero())

    def test_cancel_terminal_order_rejected(self):
        order = _make_order(OrderStatus.CANCELLED)
        with pytest.raises(InvalidStateError):
            order.cancel()
