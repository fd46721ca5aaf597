"""Command group: lending and returns."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lendctl.commands._base import LendGroup

if TYPE_CHECKING:
    from lendctl.commands._context import AppContext

_LOAN_EXAMPLES = """\
  lendctl loan create usr_1a2b3c4d5e6f cpy_1a2b3c4d5e6f
  lendctl loan create usr_1a2b3c4d5e6f cpy_1a2b3c4d5e6f --receipt
  lendctl loan return loan_1a2b3c4d5e6f"""


@click.group(cls=LendGroup, examples=_LOAN_EXAMPLES)
def loan() -> None:
    """Lend copies and take them back."""


@loan.command(
    examples="""\
  lendctl loan create usr_1a2b3c4d5e6f cpy_1a2b3c4d5e6f
  lendctl --json loan create usr_1a2b3c4d5e6f cpy_1a2b3c4d5e6f --receipt"""
)
@click.argument("user_id")
@click.argument("copy_id")
@click.option("--receipt", is_flag=True, help="Include book title and patron name.")
@click.pass_obj
def create(app: AppContext, user_id: str, copy_id: str, receipt: bool) -> None:
    """Lend a copy to a patron."""
    from lendctl.services.loans import LoanService

    app.emit(LoanService(app.ledger).create_loan(user_id, copy_id, receipt=receipt))


@loan.command(
    name="return",
    examples="""\
  lendctl loan return loan_1a2b3c4d5e6f
  lendctl --json loan return loan_1a2b3c4d5e6f""",
)
@click.argument("loan_id")
@click.pass_obj
def return_(app: AppContext, loan_id: str) -> None:
    """Return a loan and notify the next patron waiting for the book."""
    from lendctl.services.loans import LoanService
    from lendctl.services.notifications import NotificationService

    result = LoanService(app.ledger).return_book(loan_id)
    if result.ok:
        promotion = NotificationService(app.ledger).process_returned_book(result.data["book_id"])
        result = result.model_copy(
            update={
                "data": {**result.data, **promotion.data},
                "warnings": [*result.warnings, *promotion.warnings],
            }
        )
    app.emit(result)
