"""QueryService — read-only views over the ledger.

Every query runs in its own short unit of work and returns list data under
``items`` with a ``count``, which the human formatter renders as a table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from lendctl.domain.types import ErrorCode
from lendctl.services._helpers import dump
from lendctl.services.base import BaseService
from lendctl.services.result import ServiceResult
from lendctl.services.telemetry import traced

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pydantic import BaseModel


def _listing(op: str, items: Sequence[BaseModel], **extra: Any) -> ServiceResult:
    return ServiceResult(
        ok=True,
        op=op,
        data={**extra, "items": [dump(i) for i in items], "count": len(items)},
    )


class QueryService(BaseService):
    """Queues, loans, reservations and overdue history."""

    @traced
    def book_queue(self, book_id: str) -> ServiceResult:
        """Active reservations for *book_id*, head of the queue first."""
        op = "book_queue"
        with self._ledger.transaction() as txn:
            if txn.books.find_by_id(book_id) is None:
                return ServiceResult.failure(
                    op, ErrorCode.BOOK_NOT_FOUND, f"No book with id {book_id}", book_id=book_id
                )
            queue = txn.reservations.find_active_by_book_id(book_id)
        return _listing(op, queue, book_id=book_id)

    @traced
    def user_loans(self, user_id: str, *, active_only: bool = False) -> ServiceResult:
        op = "user_loans"
        with self._ledger.transaction() as txn:
            if txn.users.find_by_id(user_id) is None:
                return _no_user(op, user_id)
            loans = txn.loans.find_by_user_id(user_id, active_only=active_only)
        return _listing(op, loans, user_id=user_id)

    @traced
    def user_reservations(self, user_id: str) -> ServiceResult:
        op = "user_reservations"
        with self._ledger.transaction() as txn:
            if txn.users.find_by_id(user_id) is None:
                return _no_user(op, user_id)
            found = txn.reservations.find_by_user_id(user_id)
        return _listing(op, found, user_id=user_id)

    @traced
    def user_overdue_records(self, user_id: str) -> ServiceResult:
        op = "user_overdue_records"
        with self._ledger.transaction() as txn:
            if txn.users.find_by_id(user_id) is None:
                return _no_user(op, user_id)
            records = txn.overdue_records.find_by_user_id(user_id)
        return _listing(op, records, user_id=user_id)


def _no_user(op: str, user_id: str) -> ServiceResult:
    return ServiceResult.failure(
        op, ErrorCode.USER_NOT_FOUND, f"No user with id {user_id}", user_id=user_id
    )
