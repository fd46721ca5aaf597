"""Command group: read-only views of a patron's record."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lendctl.commands._base import LendGroup
from lendctl.services.query import QueryService

if TYPE_CHECKING:
    from lendctl.commands._context import AppContext

_SHOW_EXAMPLES = """\
  lendctl show loans usr_1a2b3c4d5e6f --active
  lendctl show reservations usr_1a2b3c4d5e6f
  lendctl --json show overdue usr_1a2b3c4d5e6f"""


@click.group(cls=LendGroup, examples=_SHOW_EXAMPLES)
def show() -> None:
    """Show loans, reservations and overdue history."""


@show.command(
    examples="""\
  lendctl show loans usr_1a2b3c4d5e6f
  lendctl show loans usr_1a2b3c4d5e6f --active"""
)
@click.argument("user_id")
@click.option("--active", "active_only", is_flag=True, help="Only loans not yet returned.")
@click.pass_obj
def loans(app: AppContext, user_id: str, active_only: bool) -> None:
    """List a patron's loans."""
    app.emit(QueryService(app.ledger).user_loans(user_id, active_only=active_only))


@show.command(examples="  lendctl show reservations usr_1a2b3c4d5e6f")
@click.argument("user_id")
@click.pass_obj
def reservations(app: AppContext, user_id: str) -> None:
    """List a patron's reservations, newest first."""
    app.emit(QueryService(app.ledger).user_reservations(user_id))


@show.command(examples="  lendctl show overdue usr_1a2b3c4d5e6f")
@click.argument("user_id")
@click.pass_obj
def overdue(app: AppContext, user_id: str) -> None:
    """List a patron's overdue records."""
    app.emit(QueryService(app.ledger).user_overdue_records(user_id))
