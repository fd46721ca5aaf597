"""Command group: patron registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lendctl.commands._base import LendGroup

if TYPE_CHECKING:
    from lendctl.commands._context import AppContext


@click.group(
    cls=LendGroup,
    examples="""\
  lendctl user add "Ada Lovelace" ada@example.org
  lendctl user add "Charles Babbage" cb@example.org --limit 2""",
)
def user() -> None:
    """Manage library patrons."""


@user.command(
    examples="""\
  lendctl user add "Ada Lovelace" ada@example.org
  lendctl --json user add "Grace Hopper" grace@example.org --limit 10"""
)
@click.argument("name")
@click.argument("email")
@click.option(
    "--limit",
    "loan_limit",
    type=int,
    default=None,
    help="Maximum concurrent loans (default from [loans] default_loan_limit).",
)
@click.pass_obj
def add(app: AppContext, name: str, email: str, loan_limit: int | None) -> None:
    """Register a patron."""
    from lendctl.services.catalog import CatalogService

    app.emit(CatalogService(app.ledger).register_user(name, email, loan_limit=loan_limit))
