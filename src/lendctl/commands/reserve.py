"""Command group: the per-book waiting list."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lendctl.commands._base import LendGroup

if TYPE_CHECKING:
    from lendctl.commands._context import AppContext

_RESERVE_EXAMPLES = """\
  lendctl reserve create usr_1a2b3c4d5e6f bk_1a2b3c4d5e6f
  lendctl reserve queue bk_1a2b3c4d5e6f
  lendctl reserve cancel res_1a2b3c4d5e6f
  lendctl reserve fulfill res_1a2b3c4d5e6f"""


@click.group(cls=LendGroup, examples=_RESERVE_EXAMPLES)
def reserve() -> None:
    """Join, leave and inspect waiting lists."""


@reserve.command(
    examples="""\
  lendctl reserve create usr_1a2b3c4d5e6f bk_1a2b3c4d5e6f
  lendctl --json reserve create usr_1a2b3c4d5e6f bk_1a2b3c4d5e6f"""
)
@click.argument("user_id")
@click.argument("book_id")
@click.pass_obj
def create(app: AppContext, user_id: str, book_id: str) -> None:
    """Reserve a book that has no copy on the shelf."""
    from lendctl.services.reservations import ReservationService

    app.emit(ReservationService(app.ledger).create_reservation(user_id, book_id))


@reserve.command(examples="  lendctl reserve cancel res_1a2b3c4d5e6f")
@click.argument("reservation_id")
@click.pass_obj
def cancel(app: AppContext, reservation_id: str) -> None:
    """Cancel a pending or notified reservation."""
    from lendctl.services.reservations import ReservationService

    app.emit(ReservationService(app.ledger).cancel_reservation(reservation_id))


@reserve.command(examples="  lendctl reserve fulfill res_1a2b3c4d5e6f")
@click.argument("reservation_id")
@click.pass_obj
def fulfill(app: AppContext, reservation_id: str) -> None:
    """Mark a notified reservation as collected."""
    from lendctl.services.reservations import ReservationService

    app.emit(ReservationService(app.ledger).fulfill_reservation(reservation_id))


@reserve.command(
    examples="""\
  lendctl reserve queue bk_1a2b3c4d5e6f
  lendctl -q reserve queue bk_1a2b3c4d5e6f"""
)
@click.argument("book_id")
@click.pass_obj
def queue(app: AppContext, book_id: str) -> None:
    """Show the active waiting list for a book."""
    from lendctl.services.query import QueryService

    app.emit(QueryService(app.ledger).book_queue(book_id))
