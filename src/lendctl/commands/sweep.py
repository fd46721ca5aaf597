"""Command: expire unclaimed holds and promote the next patrons."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lendctl.commands._base import LendCommand

if TYPE_CHECKING:
    from lendctl.commands._context import AppContext


@click.command(
    cls=LendCommand,
    examples="""\
  lendctl sweep
  lendctl --json --log-json sweep

  # crontab: every 15 minutes
  */15 * * * * cd /srv/library && lendctl -q sweep""",
)
@click.pass_obj
def sweep(app: AppContext) -> None:
    """Expire NOTIFIED reservations past their pickup window.

    Safe to run repeatedly; a run with nothing due expires nothing.
    """
    from lendctl.services.sweep import ExpiryService

    app.emit(ExpiryService(app.ledger).expire_overdue_reservations())
