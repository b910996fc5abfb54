"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime

import click

from rentals.application.dto import CreateQuotationRequest, OrderDTO, OrderLineSpec
from rentals.domain.exceptions import DomainException
from rentals.domain.model.principal import Principal
from rentals.infrastructure.bootstrap import Container
from rentals.infrastructure.cli.options import TIMESTAMP, acting_as


def _parse_lines(raw: str) -> list[OrderLineSpec]:
    """Parse 'P1:3,P2:5' into OrderLineSpec list."""
    specs: list[OrderLineSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid line format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        try:
            specs.append(OrderLineSpec(product_id=product_id.strip(), quantity=qty))
        except DomainException as exc:
            raise click.BadParameter(str(exc))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_id}   Vendor: {dto.vendor_id}")
    click.echo(f"Rental:   {dto.start_date} -> {dto.end_date}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*55}")
    for line in dto.lines:
        click.echo(
            f"  {line.product_name:<20} {line.quantity:>5} {line.unit_price:>14} {line.line_total:>14}"
        )
    click.echo(f"  {'-'*55}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>28}")
    if dto.coupon_code:
        click.echo(f"  {'Discount (' + dto.coupon_code + ')':<27} {dto.discount:>28}")
    click.echo(f"  {'Order Total':<27} {dto.total:>28}")
    if dto.coupon_rejection:
        click.echo(f"  Coupon not applied: {dto.coupon_rejection}")
    if dto.actual_return_date:
        click.echo(f"  {'Returned':<27} {dto.actual_return_date:>28}")
        click.echo(f"  {'Late fee':<27} {dto.late_fee:>28}")
    for invoice in dto.invoices:
        click.echo(
            f"  Invoice {invoice.number} [{invoice.kind}/{invoice.status}] "
            f"total {invoice.total_amount}, due {invoice.due_date}"
        )
    if dto.history:
        click.echo()
        click.echo("History:")
    for entry in dto.history:
        click.echo(f"  {entry.at}  {entry.action:<16} by {entry.actor}")


@click.command("create")
@acting_as
@click.option("--vendor", "vendor_id", required=True, help="Vendor whose products are rented.")
@click.option("--start", "start", required=True, type=TIMESTAMP, help="Rental start (UTC).")
@click.option("--end", "end", required=True, type=TIMESTAMP, help="Rental end (UTC, exclusive).")
@click.option("--lines", required=True, help="Lines as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--coupon", default=None, help="Coupon code to apply.")
@click.option("--customer", "customer_id", default=None, help="Customer (admin only).")
@click.pass_obj
def order_create(
    container: Container,
    principal: Principal,
    vendor_id: str,
    start: datetime,
    end: datetime,
    lines: str,
    coupon: str | None,
    customer_id: str | None,
) -> None:
    """Create a rental quotation (reserves nothing)."""
    specs = _parse_lines(lines)
    try:
        request = CreateQuotationRequest(
            vendor_id=vendor_id,
            start_date=start,
            end_date=end,
            lines=specs,
            coupon_code=coupon,
            customer_id=customer_id,
        )
        dto = container.create_quotation().handle(
            principal, request, timeout=container.config.lock_timeout_seconds
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Quotation #{dto.id} created")
    _display_order(dto)


@click.command("show")
@acting_as
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(container: Container, principal: Principal, order_id: int) -> None:
    """Show details of an existing order."""
    try:
        dto = container.show_order().handle(principal, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("send")
@acting_as
@click.option("--id", "order_id", required=True, type=int, help="Order ID to send.")
@click.pass_obj
def order_send(container: Container, principal: Principal, order_id: int) -> None:
    """Send a quotation to the customer."""
    try:
        container.send_order().handle(
            principal, order_id, timeout=container.config.lock_timeout_seconds
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} sent.")


@click.command("confirm")
@acting_as
@click.option("--id", "order_id", required=True, type=int, help="Order ID to confirm.")
@click.pass_obj
def order_confirm(container: Container, principal: Principal, order_id: int) -> None:
    """Confirm a sent quotation (reserves inventory)."""
    try:
        container.confirm_order().handle(
            principal, order_id, timeout=container.config.lock_timeout_seconds
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} confirmed, inventory reserved.")


@click.command("invoice")
@acting_as
@click.option("--id", "order_id", required=True, type=int, help="Order ID to invoice.")
@click.pass_obj
def order_invoice(container: Container, principal: Principal, order_id: int) -> None:
    """Raise the invoice for a confirmed order."""
    try:
        invoice = container.create_invoice().handle(
            principal, order_id, timeout=container.config.lock_timeout_seconds
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Invoice {invoice.number} created for order #{order_id} ({invoice.status}).")
    click.echo(f"  Subtotal {invoice.subtotal}  Tax {invoice.tax_amount}  Total {invoice.total_amount}")
    click.echo(f"  Due {invoice.due_date}")


@click.command("pickup")
@acting_as
@click.option("--id", "order_id", required=True, type=int, help="Order ID being picked up.")
@click.pass_obj
def order_pickup(container: Container, principal: Principal, order_id: int) -> None:
    """Record that the customer collected the goods."""
    try:
        container.pickup_order().handle(
            principal, order_id, timeout=container.config.lock_timeout_seconds
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} picked up.")


@click.command("return")
@acting_as
@click.option("--id", "order_id", required=True, type=int, help="Order ID being returned.")
@click.option("--at", "returned_at", default=None, type=TIMESTAMP, help="Return time (UTC); defaults to now.")
@click.pass_obj
def order_return(
    container: Container,
    principal: Principal,
    order_id: int,
    returned_at: datetime | None,
) -> None:
    """Return the goods (releases inventory, charges any late fee)."""
    try:
        result = container.return_order().handle(
            principal,
            order_id,
            returned_at=returned_at,
            timeout=container.config.lock_timeout_seconds,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} returned.")
    if result.was_late:
        click.echo(f"Late fee: {result.late_fee}")
    if result.late_fee_invoice:
        click.echo(f"Late fee invoice {result.late_fee_invoice.number} raised.")


@click.command("cancel")
@acting_as
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.pass_obj
def order_cancel(container: Container, principal: Principal, order_id: int) -> None:
    """Cancel an order (releases reserved inventory if confirmed)."""
    try:
        container.cancel_order().handle(
            principal, order_id, timeout=container.config.lock_timeout_seconds
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")
