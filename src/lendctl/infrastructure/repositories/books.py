"""Book and copy store port."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import insert, select, update

from lendctl.domain.ids import generate_id
from lendctl.domain.models import Book, Copy
from lendctl.domain.types import CopyStatus
from lendctl.infrastructure.database.schema import books, copies

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import Connection


class BookRepository:
    """Catalog titles and their physical copies."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    # --- books ---

    def find_by_id(self, book_id: str) -> Book | None:
        stmt = select(books.c.id, books.c.title, books.c.author, books.c.isbn, books.c.category)
        row = self._conn.execute(stmt.where(books.c.id == book_id)).mappings().first()
        return Book.model_validate(dict(row)) if row is not None else None

    def create_book(
        self,
        *,
        title: str,
        author: str,
        created_at: datetime,
        isbn: str | None = None,
        category: str | None = None,
    ) -> Book:
        book_id = generate_id("book")
        self._conn.execute(
            insert(books).values(
                id=book_id,
                title=title,
                author=author,
                isbn=isbn,
                category=category,
                created_at=created_at,
            )
        )
        return Book(id=book_id, title=title, author=author, isbn=isbn, category=category)

    # --- copies ---

    def find_copy_by_id(self, copy_id: str) -> Copy | None:
        stmt = select(copies.c.id, copies.c.book_id, copies.c.status, copies.c.location)
        row = self._conn.execute(stmt.where(copies.c.id == copy_id)).mappings().first()
        return Copy.model_validate(dict(row)) if row is not None else None

    def find_copies_by_book_id(self, book_id: str) -> list[Copy]:
        stmt = (
            select(copies.c.id, copies.c.book_id, copies.c.status, copies.c.location)
            .where(copies.c.book_id == book_id)
            .order_by(copies.c.created_at, copies.c.id)
        )
        return [Copy.model_validate(dict(r)) for r in self._conn.execute(stmt).mappings()]

    def create_copy(
        self,
        book_id: str,
        *,
        created_at: datetime,
        location: str | None = None,
        status: CopyStatus = CopyStatus.AVAILABLE,
    ) -> Copy:
        copy_id = generate_id("copy")
        self._conn.execute(
            insert(copies).values(
                id=copy_id,
                book_id=book_id,
                status=str(status),
                location=location,
                created_at=created_at,
            )
        )
        return Copy(id=copy_id, book_id=book_id, status=status, location=location)

    def update_copy_status(self, copy_id: str, status: CopyStatus) -> Copy | None:
        """Set a copy's status. Returns the updated copy, or None if it does not exist."""
        result = self._conn.execute(
            update(copies).where(copies.c.id == copy_id).values(status=str(status))
        )
        if result.rowcount != 1:
            return None
        return self.find_copy_by_id(copy_id)
