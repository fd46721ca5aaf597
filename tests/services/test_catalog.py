"""Tests for CatalogService — patrons, titles, copies and shelf states."""

from __future__ import annotations

from pathlib import Path

import pytest

from lendctl.config.settings import LendSettings
from lendctl.domain.types import CopyStatus, ErrorCode
from lendctl.infrastructure.ledger import Ledger
from lendctl.services.catalog import CatalogService
from tests.conftest import FakeClock, add_book, borrow, register_user


class TestRegisterUser:
    def test_defaults(self, ledger: Ledger) -> None:
        result = CatalogService(ledger).register_user("Ada Lovelace", "ada@example.org")
        assert result.ok
        user = result.data["user"]
        assert user["id"].startswith("usr_")
        assert user["loan_limit"] == 5
        assert user["email"] == "ada@example.org"

    def test_explicit_limit(self, ledger: Ledger) -> None:
        user = register_user(ledger, loan_limit=2)
        assert user["loan_limit"] == 2

    def test_configured_default_limit(self, tmp_path: Path, clock: FakeClock) -> None:
        (tmp_path / "lendctl.toml").write_text("[loans]\ndefault_loan_limit = 9\n")
        settings = LendSettings.from_cli(root=tmp_path)
        ledger = Ledger(settings, clock=clock)
        try:
            assert register_user(ledger)["loan_limit"] == 9
        finally:
            ledger.close()

    @pytest.mark.parametrize("limit", [0, -3])
    def test_limit_below_one(self, ledger: Ledger, limit: int) -> None:
        result = CatalogService(ledger).register_user("Ada", "ada@example.org", loan_limit=limit)
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.detail["field"] == "loan_limit"

    def test_duplicate_email(self, ledger: Ledger) -> None:
        svc = CatalogService(ledger)
        assert svc.register_user("Ada", "ada@example.org").ok
        result = svc.register_user("Another Ada", "ada@example.org")
        assert result.error is not None
        assert result.error.code == ErrorCode.DUPLICATE_EMAIL
        assert result.error.detail == {"email": "ada@example.org"}

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name(self, ledger: Ledger, name: str) -> None:
        result = CatalogService(ledger).register_user(name, "ada@example.org")
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.detail["field"] == "name"

    @pytest.mark.parametrize("email", ["", "  ", "invalid-email", "ada@"])
    def test_invalid_email(self, ledger: Ledger, email: str) -> None:
        result = CatalogService(ledger).register_user("Ada", email)
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.detail["field"] == "email"

    def test_rejected_input_writes_nothing(self, ledger: Ledger) -> None:
        svc = CatalogService(ledger)
        assert not svc.register_user(" ", "ada@example.org").ok
        assert svc.register_user("Ada", "ada@example.org").ok

    def test_inputs_are_stripped(self, ledger: Ledger) -> None:
        result = CatalogService(ledger).register_user("  Ada Lovelace ", " ada@example.org  ")
        assert result.ok
        user = result.data["user"]
        assert user["name"] == "Ada Lovelace"
        assert user["email"] == "ada@example.org"


class TestAddBook:
    def test_with_copies(self, ledger: Ledger) -> None:
        result = CatalogService(ledger).add_book(
            "Dune",
            "Frank Herbert",
            isbn="9780441013593",
            category="fiction",
            copies=3,
            location="Shelf A",
        )
        assert result.ok
        book = result.data["book"]
        assert book["id"].startswith("bk_")
        assert book["isbn"] == "9780441013593"
        copies = result.data["copies"]
        assert len(copies) == 3
        assert {c["status"] for c in copies} == {CopyStatus.AVAILABLE}
        assert {c["book_id"] for c in copies} == {book["id"]}
        assert {c["location"] for c in copies} == {"Shelf A"}

    def test_zero_copies(self, ledger: Ledger) -> None:
        assert add_book(ledger, copies=0)["copies"] == []

    def test_negative_copies(self, ledger: Ledger) -> None:
        result = CatalogService(ledger).add_book("Dune", "Frank Herbert", copies=-1)
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.detail["field"] == "copies"


class TestAddCopy:
    def test_add_copy(self, ledger: Ledger) -> None:
        book_id = add_book(ledger, copies=0)["book"]["id"]
        result = CatalogService(ledger).add_copy(book_id, location="Stack 2")
        assert result.ok
        assert result.data["copy"]["book_id"] == book_id
        assert result.data["copy"]["status"] is CopyStatus.AVAILABLE
        with ledger.transaction() as txn:
            assert len(txn.books.find_copies_by_book_id(book_id)) == 1

    def test_unknown_book(self, ledger: Ledger) -> None:
        result = CatalogService(ledger).add_copy("bk_000000000000")
        assert result.error is not None
        assert result.error.code == ErrorCode.BOOK_NOT_FOUND


class TestSetCopyStatus:
    def test_to_maintenance_and_back(self, ledger: Ledger) -> None:
        copy_id = add_book(ledger)["copies"][0]["id"]
        svc = CatalogService(ledger)
        assert svc.set_copy_status(copy_id, CopyStatus.MAINTENANCE).data["copy"]["status"] is (
            CopyStatus.MAINTENANCE
        )
        assert svc.set_copy_status(copy_id, "available").data["copy"]["status"] is (
            CopyStatus.AVAILABLE
        )

    def test_unknown_status(self, ledger: Ledger) -> None:
        copy_id = add_book(ledger)["copies"][0]["id"]
        result = CatalogService(ledger).set_copy_status(copy_id, "LOST")
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.detail["field"] == "status"
        assert "AVAILABLE" in result.error.detail["allowed"]

    def test_unknown_copy(self, ledger: Ledger) -> None:
        result = CatalogService(ledger).set_copy_status("cpy_000000000000", "MAINTENANCE")
        assert result.error is not None
        assert result.error.code == ErrorCode.COPY_NOT_FOUND

    def test_copy_on_loan_stays_borrowed(self, ledger: Ledger) -> None:
        copy_id = add_book(ledger)["copies"][0]["id"]
        loan = borrow(ledger, register_user(ledger)["id"], copy_id)

        result = CatalogService(ledger).set_copy_status(copy_id, CopyStatus.AVAILABLE)

        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.detail["loan_id"] == loan["id"]
        with ledger.transaction() as txn:
            copy = txn.books.find_copy_by_id(copy_id)
        assert copy is not None
        assert copy.status is CopyStatus.BORROWED
