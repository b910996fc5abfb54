"""CLI queries: product availability and coupon previews."""

from __future__ import annotations

from datetime import datetime

import click

from rentals.application.dto import AvailabilityRequest
from rentals.domain.exceptions import DomainException
from rentals.infrastructure.bootstrap import Container
from rentals.infrastructure.cli.options import TIMESTAMP


@click.command("availability")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--start", required=True, type=TIMESTAMP, help="Window start (UTC).")
@click.option("--end", required=True, type=TIMESTAMP, help="Window end (UTC, exclusive).")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units wanted.")
@click.pass_obj
def product_availability(
    container: Container,
    product_id: str,
    start: datetime,
    end: datetime,
    quantity: int,
) -> None:
    """Show how many units of a product are free for a window."""
    try:
        request = AvailabilityRequest(
            product_id=product_id, start_date=start, end_date=end, requested_qty=quantity
        )
        result = container.check_availability().handle(request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{'Product':<12} {'Status':<8} {'Stock':>6} {'Booked':>7} {'Available':>10}")
    click.echo("-" * 47)
    click.echo(
        f"{result.product_id:<12} {result.status:<8} {result.total_stock:>6} "
        f"{result.booked_qty:>7} {result.available_qty:>10}"
    )


@click.command("validate")
@click.option("--code", required=True, help="Coupon code.")
@click.option("--amount", required=True, help="Order amount (e.g. 1500.00).")
@click.option("--vendor", "vendor_id", default=None, help="Vendor the order is placed with.")
@click.pass_obj
def coupon_validate(container: Container, code: str, amount: str, vendor_id: str | None) -> None:
    """Preview the discount a coupon gives on an order amount."""
    try:
        result = container.validate_coupon().handle(code, amount, vendor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.valid:
        raise click.ClickException(f"Coupon {result.code} rejected: {result.reason}")
    click.echo(
        f"Coupon {result.code}: discount {result.currency} {result.discount:.2f}, "
        f"pay {result.currency} {result.final_amount:.2f}"
    )
