"""Tests for table definitions and store-enforced invariants."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy import inspect, insert
from sqlalchemy.exc import IntegrityError, StatementError

from lendctl.infrastructure.database.schema import (
    ACTIVE_LOAN_COLUMNS,
    ACTIVE_POSITION_COLUMNS,
    ACTIVE_RESERVATION_COLUMNS,
    UtcTimestamp,
    reservations,
)
from lendctl.infrastructure.ledger import Ledger
from tests.conftest import add_book, register_user

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


class TestUtcTimestamp:
    def test_bind_normalizes_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2026, 3, 2, 11, 0, tzinfo=plus_two)
        assert UtcTimestamp().process_bind_param(value, None) == "2026-03-02T09:00:00.000000Z"

    def test_result_is_aware(self) -> None:
        parsed = UtcTimestamp().process_result_value("2026-03-02T09:00:00.000000Z", None)
        assert parsed == T0
        assert parsed is not None and parsed.tzinfo is UTC

    def test_naive_rejected(self) -> None:
        with pytest.raises(ValueError, match="Naive datetime"):
            UtcTimestamp().process_bind_param(datetime(2026, 3, 2, 9, 0), None)

    def test_text_order_matches_time_order(self) -> None:
        earlier = UtcTimestamp().process_bind_param(T0, None)
        later = UtcTimestamp().process_bind_param(T0 + timedelta(microseconds=1), None)
        assert earlier is not None and later is not None
        assert earlier < later


class TestIndexes:
    def test_partial_unique_indexes_exist(self, ledger: Ledger) -> None:
        names = {
            ix["name"]
            for table in ("loans", "reservations")
            for ix in inspect(ledger.engine).get_indexes(table)
        }
        assert {
            "uq_loans_active_copy",
            "uq_reservations_active_user_book",
            "uq_reservations_active_queue_position",
        } <= names


class TestActiveLoanPerCopy:
    def test_second_active_loan_rejected(self, ledger: Ledger) -> None:
        user = register_user(ledger)
        copy_id = add_book(ledger)["copies"][0]["id"]
        due = T0 + timedelta(days=14)
        with ledger.transaction() as txn:
            txn.loans.create(user_id=user["id"], copy_id=copy_id, borrowed_at=T0, due_date=due)
        with pytest.raises(IntegrityError) as exc_info, ledger.transaction() as txn:
            txn.loans.create(user_id=user["id"], copy_id=copy_id, borrowed_at=T0, due_date=due)
        assert str(exc_info.value.orig).endswith(ACTIVE_LOAN_COLUMNS)

    def test_closed_loan_does_not_block(self, ledger: Ledger) -> None:
        user = register_user(ledger)
        copy_id = add_book(ledger)["copies"][0]["id"]
        due = T0 + timedelta(days=14)
        with ledger.transaction() as txn:
            loan = txn.loans.create(
                user_id=user["id"], copy_id=copy_id, borrowed_at=T0, due_date=due
            )
            txn.loans.update_returned_at(loan.id, T0 + timedelta(days=1))
            txn.loans.create(user_id=user["id"], copy_id=copy_id, borrowed_at=T0, due_date=due)


class TestReservationIndexes:
    def _insert(self, ledger: Ledger, **values: object) -> None:
        with ledger.transaction() as txn:
            txn.conn.execute(insert(reservations).values(reserved_at=T0, **values))

    def test_one_active_per_user_and_book(self, ledger: Ledger) -> None:
        user = register_user(ledger)
        book_id = add_book(ledger, copies=0)["book"]["id"]
        common = {"user_id": user["id"], "book_id": book_id, "status": "PENDING"}
        self._insert(ledger, id="res_000000000001", queue_position=1, **common)
        with pytest.raises(IntegrityError) as exc_info:
            self._insert(ledger, id="res_000000000002", queue_position=2, **common)
        assert str(exc_info.value.orig).endswith(ACTIVE_RESERVATION_COLUMNS)

    def test_unique_active_position(self, ledger: Ledger) -> None:
        a, b = register_user(ledger, "A"), register_user(ledger, "B")
        book_id = add_book(ledger, copies=0)["book"]["id"]
        self._insert(
            ledger,
            id="res_000000000001",
            user_id=a["id"],
            book_id=book_id,
            status="PENDING",
            queue_position=1,
        )
        with pytest.raises(IntegrityError) as exc_info:
            self._insert(
                ledger,
                id="res_000000000002",
                user_id=b["id"],
                book_id=book_id,
                status="NOTIFIED",
                queue_position=1,
            )
        assert str(exc_info.value.orig).endswith(ACTIVE_POSITION_COLUMNS)

    def test_terminal_rows_do_not_count(self, ledger: Ledger) -> None:
        user = register_user(ledger)
        book_id = add_book(ledger, copies=0)["book"]["id"]
        common = {"user_id": user["id"], "book_id": book_id, "queue_position": 1}
        self._insert(ledger, id="res_000000000001", status="CANCELLED", **common)
        self._insert(ledger, id="res_000000000002", status="EXPIRED", **common)
        self._insert(ledger, id="res_000000000003", status="PENDING", **common)

    def test_unknown_status_rejected(self, ledger: Ledger) -> None:
        user = register_user(ledger)
        book_id = add_book(ledger, copies=0)["book"]["id"]
        with pytest.raises(IntegrityError):
            self._insert(
                ledger,
                id="res_000000000001",
                user_id=user["id"],
                book_id=book_id,
                status="LOST",
                queue_position=1,
            )


class TestForeignKeys:
    def test_loan_requires_existing_copy(self, ledger: Ledger) -> None:
        user = register_user(ledger)
        with pytest.raises(IntegrityError), ledger.transaction() as txn:
            txn.loans.create(
                user_id=user["id"],
                copy_id="cpy_000000000000",
                borrowed_at=T0,
                due_date=T0 + timedelta(days=14),
            )

    def test_naive_timestamp_never_stored(self, ledger: Ledger) -> None:
        with pytest.raises(StatementError, match="Naive datetime"), ledger.transaction() as txn:
            txn.books.create_book(title="X", author="Y", created_at=datetime(2026, 1, 1))
