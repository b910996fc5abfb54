"""CLI commands for invoices."""

from __future__ import annotations

import click

from rentals.domain.exceptions import DomainException
from rentals.domain.model.principal import Principal
from rentals.infrastructure.bootstrap import Container
from rentals.infrastructure.cli.options import acting_as


@click.command("post")
@acting_as
@click.option("--id", "invoice_id", required=True, type=int, help="Invoice ID to post.")
@click.pass_obj
def invoice_post(container: Container, principal: Principal, invoice_id: int) -> None:
    """Post a draft invoice; posted invoices can no longer change."""
    try:
        invoice = container.post_invoice().handle(
            principal, invoice_id, timeout=container.config.lock_timeout_seconds
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Invoice {invoice.number} posted.")
