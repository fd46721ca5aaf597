"""Tests for shared service-layer helper functions."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError

from lendctl.domain.models import Loan
from lendctl.services._helpers import dump, violates


def _integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, sqlite3.IntegrityError(message))


class TestDump:
    def test_keeps_python_types(self) -> None:
        when = datetime(2026, 3, 2, tzinfo=UTC)
        loan = Loan(
            id="loan_0123456789ab",
            user_id="usr_0123456789ab",
            copy_id="cpy_0123456789ab",
            borrowed_at=when,
            due_date=when,
        )
        data = dump(loan)
        assert data["id"] == "loan_0123456789ab"
        assert data["borrowed_at"] == when
        assert isinstance(data["borrowed_at"], datetime)
        assert data["returned_at"] is None


class TestViolates:
    def test_matching_columns(self) -> None:
        exc = _integrity_error("UNIQUE constraint failed: loans.copy_id")
        assert violates(exc, "loans.copy_id")

    def test_composite_columns(self) -> None:
        exc = _integrity_error(
            "UNIQUE constraint failed: reservations.user_id, reservations.book_id"
        )
        assert violates(exc, "reservations.user_id, reservations.book_id")
        assert not violates(exc, "reservations.book_id")

    def test_other_constraint(self) -> None:
        exc = _integrity_error("FOREIGN KEY constraint failed")
        assert not violates(exc, "loans.copy_id")
