import click

from rentals.infrastructure.bootstrap import Container
from rentals.infrastructure.cli.catalog_commands import coupon_validate, product_availability
from rentals.infrastructure.cli.invoice_commands import invoice_post
from rentals.infrastructure.cli.order_commands import (
    order_cancel,
    order_confirm,
    order_create,
    order_invoice,
    order_pickup,
    order_return,
    order_send,
    order_show,
)
from rentals.infrastructure.logging_config import setup_logging


@click.group()
@click.option("--log-level", default=None, help="Override RENTALS_LOG_LEVEL.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Rentals — rental booking core"""
    if ctx.obj is None:
        ctx.obj = Container()
    setup_logging("rentals", log_level or ctx.obj.config.log_level)


@cli.group()
def order() -> None:
    """Manage rental orders."""


@cli.group()
def invoice() -> None:
    """Manage invoices."""


@cli.group()
def product() -> None:
    """Query products."""


@cli.group()
def coupon() -> None:
    """Query coupons."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_confirm)
order.add_command(order_create)
order.add_command(order_invoice)
order.add_command(order_pickup)
order.add_command(order_return)
order.add_command(order_send)
order.add_command(order_show)
invoice.add_command(invoice_post)
product.add_command(product_availability)
coupon.add_command(coupon_validate)
