"""CatalogService — register patrons, add books and copies, shelve copies."""

from __future__ import annotations

import structlog
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError

from lendctl.domain.types import CopyStatus, ErrorCode
from lendctl.services._helpers import dump, violates
from lendctl.services.base import BaseService
from lendctl.services.result import ServiceResult
from lendctl.services.telemetry import traced

log = structlog.get_logger(__name__)

_EMAIL_COLUMNS = "users.email"

_email_adapter: TypeAdapter[str] = TypeAdapter(EmailStr)


class CatalogService(BaseService):
    """Administrative writes that seed the ledger."""

    @traced
    def register_user(
        self,
        name: str,
        email: str,
        *,
        loan_limit: int | None = None,
    ) -> ServiceResult:
        """Register a patron. *loan_limit* defaults to ``[loans] default_loan_limit``.

        *name* and *email* are stripped first; a blank name or a malformed
        address is a ``VALIDATION_ERROR`` naming the field.
        """
        op = "register_user"
        name = name.strip()
        if not name:
            return ServiceResult.failure(
                op, ErrorCode.VALIDATION_ERROR, "Name must not be blank", field="name"
            )
        try:
            email = _email_adapter.validate_python(email.strip())
        except ValidationError:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Not a valid email address: {email!r}",
                field="email",
            )

        limit = (
            loan_limit if loan_limit is not None else self._ledger.settings.loans.default_loan_limit
        )
        if limit < 1:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Loan limit must be at least 1, got {limit}",
                field="loan_limit",
            )

        now = self._ledger.now()
        with self._ledger.transaction() as txn:
            if txn.users.find_by_email(email) is not None:
                return _duplicate_email(op, email)
            try:
                user = txn.users.create(
                    name=name, email=email, loan_limit=limit, registered_at=now
                )
            except IntegrityError as exc:
                if not violates(exc, _EMAIL_COLUMNS):
                    raise
                txn.abort()
                return _duplicate_email(op, email)

        log.info("user.registered", user_id=user.id)
        return ServiceResult(ok=True, op=op, data={"user": dump(user)})

    @traced
    def add_book(
        self,
        title: str,
        author: str,
        *,
        isbn: str | None = None,
        category: str | None = None,
        copies: int = 1,
        location: str | None = None,
    ) -> ServiceResult:
        """Add a title with *copies* AVAILABLE copies shelved at *location*."""
        op = "add_book"
        if copies < 0:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Number of copies cannot be negative, got {copies}",
                field="copies",
            )

        now = self._ledger.now()
        with self._ledger.transaction() as txn:
            book = txn.books.create_book(
                title=title, author=author, isbn=isbn, category=category, created_at=now
            )
            created = [
                txn.books.create_copy(book.id, created_at=now, location=location)
                for _ in range(copies)
            ]

        log.info("book.added", book_id=book.id, copies=len(created))
        return ServiceResult(
            ok=True,
            op=op,
            data={"book": dump(book), "copies": [dump(c) for c in created]},
        )

    @traced
    def add_copy(self, book_id: str, *, location: str | None = None) -> ServiceResult:
        op = "add_copy"
        now = self._ledger.now()
        with self._ledger.transaction() as txn:
            if txn.books.find_by_id(book_id) is None:
                return ServiceResult.failure(
                    op, ErrorCode.BOOK_NOT_FOUND, f"No book with id {book_id}", book_id=book_id
                )
            copy = txn.books.create_copy(book_id, created_at=now, location=location)

        log.info("copy.added", book_id=book_id, copy_id=copy.id)
        return ServiceResult(ok=True, op=op, data={"copy": dump(copy)})

    @traced
    def set_copy_status(self, copy_id: str, status: CopyStatus | str) -> ServiceResult:
        """Move a copy between shelf states (e.g. into MAINTENANCE).

        A copy out on loan stays BORROWED until the loan is returned.
        """
        op = "set_copy_status"
        try:
            target = CopyStatus(str(status).upper())
        except ValueError:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Unknown copy status {status!r}",
                field="status",
                allowed=[str(s) for s in CopyStatus],
            )

        with self._ledger.transaction() as txn:
            copy = txn.books.find_copy_by_id(copy_id)
            if copy is None:
                return ServiceResult.failure(
                    op, ErrorCode.COPY_NOT_FOUND, f"No copy with id {copy_id}", copy_id=copy_id
                )
            active = txn.loans.find_active_by_copy_id(copy_id)
            if active is not None and target != CopyStatus.BORROWED:
                return ServiceResult.failure(
                    op,
                    ErrorCode.VALIDATION_ERROR,
                    f"Copy {copy_id} is on loan {active.id}; return it first",
                    field="status",
                    loan_id=active.id,
                )
            updated = txn.books.update_copy_status(copy_id, target)
            if updated is None:
                txn.abort()
                return ServiceResult.failure(
                    op, ErrorCode.COPY_NOT_FOUND, f"No copy with id {copy_id}", copy_id=copy_id
                )

        log.info("copy.status_changed", copy_id=copy_id, old=str(copy.status), new=str(target))
        return ServiceResult(ok=True, op=op, data={"copy": dump(updated)})


def _duplicate_email(op: str, email: str) -> ServiceResult:
    return ServiceResult.failure(
        op, ErrorCode.DUPLICATE_EMAIL, f"A user with email {email} already exists", email=email
    )
