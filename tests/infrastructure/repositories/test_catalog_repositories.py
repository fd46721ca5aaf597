"""Tests for BookRepository and UserRepository."""

from datetime import UTC, datetime

from lendctl.domain.ids import validate_id
from lendctl.domain.types import CopyStatus
from lendctl.infrastructure.ledger import Ledger

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


class TestBookRepository:
    def test_book_and_copies(self, ledger: Ledger) -> None:
        with ledger.transaction() as txn:
            book = txn.books.create_book(title="Dune", author="Frank Herbert", created_at=T0)
            first = txn.books.create_copy(book.id, created_at=T0, location="A1")
            second = txn.books.create_copy(book.id, created_at=T0)
            assert validate_id(book.id, "book")
            assert txn.books.find_by_id(book.id) == book
            copies = txn.books.find_copies_by_book_id(book.id)
            assert {c.id for c in copies} == {first.id, second.id}
            assert all(c.status is CopyStatus.AVAILABLE for c in copies)

    def test_update_copy_status(self, ledger: Ledger) -> None:
        with ledger.transaction() as txn:
            book = txn.books.create_book(title="Dune", author="Frank Herbert", created_at=T0)
            copy = txn.books.create_copy(book.id, created_at=T0)
            updated = txn.books.update_copy_status(copy.id, CopyStatus.MAINTENANCE)
            assert updated is not None and updated.status is CopyStatus.MAINTENANCE
            assert txn.books.update_copy_status("cpy_000000000000", CopyStatus.BORROWED) is None

    def test_missing(self, ledger: Ledger) -> None:
        with ledger.transaction() as txn:
            assert txn.books.find_by_id("bk_000000000000") is None
            assert txn.books.find_copy_by_id("cpy_000000000000") is None
            assert txn.books.find_copies_by_book_id("bk_000000000000") == []


class TestUserRepository:
    def test_create_and_lookup(self, ledger: Ledger) -> None:
        with ledger.transaction() as txn:
            user = txn.users.create(
                name="Ada", email="ada@example.org", loan_limit=3, registered_at=T0
            )
            assert txn.users.find_by_id(user.id) == user
            assert txn.users.find_by_email("ada@example.org") == user
            assert txn.users.find_by_email("nobody@example.org") is None
