"""Shared click options and parameter types for the rentals CLI."""

from __future__ import annotations

import click

from rentals.domain.exceptions import ValidationError
from rentals.domain.model.principal import Principal

TIMESTAMP = click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"])


class PrincipalType(click.ParamType):
    """Parses 'admin', 'vendor:<id>' or 'customer:<id>'."""

    name = "principal"

    def convert(self, value, param, ctx):
        if isinstance(value, Principal):
            return value
        role, _, party = str(value).partition(":")
        role = role.strip().lower()
        try:
            if role == "admin" and not party:
                return Principal.admin()
            if role == "vendor":
                return Principal.vendor(party.strip())
            if role == "customer":
                return Principal.customer(party.strip())
        except ValidationError as exc:
            self.fail(str(exc), param, ctx)
        self.fail(
            f"Invalid principal '{value}'. Expected 'admin', 'vendor:<id>' or 'customer:<id>'.",
            param,
            ctx,
        )


acting_as = click.option(
    "--as",
    "principal",
    required=True,
    type=PrincipalType(),
    help="Who is acting: 'admin', 'vendor:<id>' or 'customer:<id>'.",
)
