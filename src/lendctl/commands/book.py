"""Command group: catalog titles and physical copies."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lendctl.commands._base import LendGroup
from lendctl.domain.types import CopyStatus

if TYPE_CHECKING:
    from lendctl.commands._context import AppContext

_BOOK_EXAMPLES = """\
  lendctl book add "Dune" "Frank Herbert" --copies 3
  lendctl book copy bk_1a2b3c4d5e6f --location "SF-HER-01"
  lendctl book status cpy_1a2b3c4d5e6f MAINTENANCE"""


@click.group(cls=LendGroup, examples=_BOOK_EXAMPLES)
def book() -> None:
    """Manage books and their copies."""


@book.command(
    examples="""\
  lendctl book add "Dune" "Frank Herbert"
  lendctl book add "Dune" "Frank Herbert" --isbn 9780441013593 --category sf --copies 2
  lendctl book add "Rare Folio" "Anon" --copies 0"""
)
@click.argument("title")
@click.argument("author")
@click.option("--isbn", default=None, help="ISBN of the edition.")
@click.option("--category", default=None, help="Catalog category.")
@click.option("--copies", type=int, default=1, show_default=True, help="Copies to shelve.")
@click.option("--location", default=None, help="Shelf location for the new copies.")
@click.pass_obj
def add(
    app: AppContext,
    title: str,
    author: str,
    isbn: str | None,
    category: str | None,
    copies: int,
    location: str | None,
) -> None:
    """Add a book to the catalog with its copies."""
    from lendctl.services.catalog import CatalogService

    result = CatalogService(app.ledger).add_book(
        title, author, isbn=isbn, category=category, copies=copies, location=location
    )
    app.emit(result)


@book.command(
    examples="""\
  lendctl book copy bk_1a2b3c4d5e6f
  lendctl book copy bk_1a2b3c4d5e6f --location "Stack B" """
)
@click.argument("book_id")
@click.option("--location", default=None, help="Shelf location.")
@click.pass_obj
def copy(app: AppContext, book_id: str, location: str | None) -> None:
    """Add one more copy of an existing book."""
    from lendctl.services.catalog import CatalogService

    app.emit(CatalogService(app.ledger).add_copy(book_id, location=location))


@book.command(
    examples="""\
  lendctl book status cpy_1a2b3c4d5e6f MAINTENANCE
  lendctl book status cpy_1a2b3c4d5e6f available"""
)
@click.argument("copy_id")
@click.argument(
    "status",
    type=click.Choice([str(s) for s in CopyStatus], case_sensitive=False),
)
@click.pass_obj
def status(app: AppContext, copy_id: str, status: str) -> None:
    """Set a copy's shelf status."""
    from lendctl.services.catalog import CatalogService

    app.emit(CatalogService(app.ledger).set_copy_status(copy_id, status))
