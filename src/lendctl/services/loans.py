"""LoanService — admit loans and close them.

Create pipeline: USER → LIMIT → COPY → AVAILABILITY → INSERT LOAN → MARK
BORROWED → EVENT → RESPOND. The insert and the copy update share one unit
of work; the limit check runs under the same write lock so two concurrent
requests for one user cannot both slip under the limit.

Return pipeline: LOAN → CLOSE → COPY AVAILABLE → OVERDUE RECORD → EVENT →
RESPOND. Queue promotion is not part of a return; callers follow up with
:meth:`NotificationService.process_returned_book`.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from lendctl.domain.lifecycle import compute_due_date, compute_overdue_days
from lendctl.domain.models import LoanReceipt
from lendctl.domain.types import CopyStatus, ErrorCode
from lendctl.infrastructure.database.schema import ACTIVE_LOAN_COLUMNS
from lendctl.services._helpers import dump, violates
from lendctl.services.base import BaseService
from lendctl.services.result import ServiceResult
from lendctl.services.telemetry import traced

log = structlog.get_logger(__name__)


class LoanService(BaseService):
    """Loan admission and returns."""

    @traced
    def create_loan(self, user_id: str, copy_id: str, *, receipt: bool = False) -> ServiceResult:
        """Lend *copy_id* to *user_id*.

        With *receipt*, the result carries the book title and patron name
        alongside the loan (``{"loan", "book_title", "user_name"}``);
        otherwise it is ``{"loan": ...}``.
        """
        op = "create_loan"
        now = self._ledger.now()
        settings = self._ledger.settings
        warnings: list[str] = []

        with self._ledger.transaction() as txn:
            user = txn.users.find_by_id(user_id)
            if user is None:
                return ServiceResult.failure(
                    op, ErrorCode.USER_NOT_FOUND, f"No user with id {user_id}", user_id=user_id
                )

            current = txn.loans.count_active_loans(user_id)
            if current >= user.loan_limit:
                return ServiceResult.failure(
                    op,
                    ErrorCode.LOAN_LIMIT_EXCEEDED,
                    f"User {user_id} already holds {current} of {user.loan_limit} loans",
                    user_id=user_id,
                    limit=user.loan_limit,
                    current_count=current,
                )

            copy = txn.books.find_copy_by_id(copy_id)
            if copy is None:
                return ServiceResult.failure(
                    op, ErrorCode.COPY_NOT_FOUND, f"No copy with id {copy_id}", copy_id=copy_id
                )
            if copy.status != CopyStatus.AVAILABLE:
                return ServiceResult.failure(
                    op,
                    ErrorCode.BOOK_NOT_AVAILABLE,
                    f"Copy {copy_id} is {copy.status}",
                    copy_id=copy_id,
                    status=str(copy.status),
                )

            book_title: str | None = None
            if receipt:
                book = txn.books.find_by_id(copy.book_id)
                if book is None:
                    return ServiceResult.failure(
                        op,
                        ErrorCode.VALIDATION_ERROR,
                        f"Copy {copy_id} refers to missing book {copy.book_id}",
                        field="book",
                        book_id=copy.book_id,
                    )
                book_title = book.title

            due = compute_due_date(now, settings.loans.duration_days)
            try:
                loan = txn.loans.create(
                    user_id=user_id, copy_id=copy_id, borrowed_at=now, due_date=due
                )
            except IntegrityError as exc:
                if not violates(exc, ACTIVE_LOAN_COLUMNS):
                    raise
                txn.abort()
                return ServiceResult.failure(
                    op,
                    ErrorCode.BOOK_NOT_AVAILABLE,
                    f"Copy {copy_id} already has an active loan",
                    copy_id=copy_id,
                )

            if txn.books.update_copy_status(copy_id, CopyStatus.BORROWED) is None:
                txn.abort()
                return ServiceResult.failure(
                    op,
                    ErrorCode.VALIDATION_ERROR,
                    f"Could not mark copy {copy_id} as borrowed",
                    field="copy",
                    copy_id=copy_id,
                )

        log.info("loan.created", loan_id=loan.id, user_id=user_id, copy_id=copy_id)
        self._dispatch_event("post_loan_created", {"loan": dump(loan)}, warnings)

        data: dict[str, Any]
        if receipt:
            assert book_title is not None
            data = dump(LoanReceipt(loan=loan, book_title=book_title, user_name=user.name))
        else:
            data = {"loan": dump(loan)}
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    @traced
    def return_book(self, loan_id: str) -> ServiceResult:
        """Close *loan_id*, free its copy, and record lateness.

        Result data: ``loan``, ``book_id``, ``is_overdue`` and, for a late
        return, ``overdue_days`` plus the ``overdue_record`` when it could be
        written. A failure to write the overdue record does not undo the
        return; it is reported as a warning.
        """
        op = "return_book"
        now = self._ledger.now()
        warnings: list[str] = []
        overdue_record: dict[str, Any] | None = None

        with self._ledger.transaction() as txn:
            loan = txn.loans.find_by_id(loan_id)
            if loan is None:
                return ServiceResult.failure(
                    op, ErrorCode.LOAN_NOT_FOUND, f"No loan with id {loan_id}", loan_id=loan_id
                )
            if not loan.is_active:
                return ServiceResult.failure(
                    op,
                    ErrorCode.ALREADY_RETURNED,
                    f"Loan {loan_id} was already returned",
                    loan_id=loan_id,
                )

            copy = txn.books.find_copy_by_id(loan.copy_id)
            if copy is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.COPY_NOT_FOUND,
                    f"Loan {loan_id} refers to missing copy {loan.copy_id}",
                    copy_id=loan.copy_id,
                )

            closed = txn.loans.update_returned_at(loan_id, now)
            if closed is None:
                txn.abort()
                return ServiceResult.failure(
                    op,
                    ErrorCode.ALREADY_RETURNED,
                    f"Loan {loan_id} was already returned",
                    loan_id=loan_id,
                )

            if txn.books.update_copy_status(copy.id, CopyStatus.AVAILABLE) is None:
                txn.abort()
                return ServiceResult.failure(
                    op,
                    ErrorCode.VALIDATION_ERROR,
                    f"Could not mark copy {copy.id} as available",
                    field="copy",
                    copy_id=copy.id,
                )

            overdue_days = compute_overdue_days(closed.due_date, now)
            if overdue_days > 0:
                try:
                    with txn.savepoint():
                        record = txn.overdue_records.create(
                            loan_id=loan_id, overdue_days=overdue_days, recorded_at=now
                        )
                    overdue_record = dump(record)
                except SQLAlchemyError as exc:
                    log.warning(
                        "overdue_record.failed",
                        loan_id=loan_id,
                        overdue_days=overdue_days,
                        error=str(exc.orig if isinstance(exc, IntegrityError) else exc),
                    )
                    warnings.append(
                        f"Loan {loan_id} returned {overdue_days} day(s) late "
                        "but the overdue record could not be written"
                    )

        log.info(
            "book.returned",
            loan_id=loan_id,
            book_id=copy.book_id,
            overdue_days=overdue_days,
        )
        self._dispatch_event(
            "post_book_returned",
            {
                "loan": dump(closed),
                "book_id": copy.book_id,
                "overdue_days": overdue_days or None,
            },
            warnings,
        )

        data: dict[str, Any] = {
            "loan": dump(closed),
            "book_id": copy.book_id,
            "is_overdue": overdue_days > 0,
        }
        if overdue_days > 0:
            data["overdue_days"] = overdue_days
            if overdue_record is not None:
                data["overdue_record"] = overdue_record
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
