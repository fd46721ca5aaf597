"""Store ports consumed by the lending engine.

Services are written against these protocols; the SQLite repositories in
:mod:`lendctl.infrastructure.repositories` satisfy them structurally. Lookups
return None for a missing row, and updates return None when no row matched,
so "absent" is always a value the service turns into a typed error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from datetime import datetime

    from lendctl.domain.models import Book, Copy, Loan, OverdueRecord, Reservation, User
    from lendctl.domain.types import CopyStatus, ReservationStatus


@runtime_checkable
class BookPort(Protocol):
    def find_by_id(self, book_id: str) -> Book | None: ...

    def find_copy_by_id(self, copy_id: str) -> Copy | None: ...

    def find_copies_by_book_id(self, book_id: str) -> list[Copy]: ...

    def update_copy_status(self, copy_id: str, status: CopyStatus) -> Copy | None: ...


@runtime_checkable
class UserPort(Protocol):
    def find_by_id(self, user_id: str) -> User | None: ...


@runtime_checkable
class LoanPort(Protocol):
    def create(
        self,
        *,
        user_id: str,
        copy_id: str,
        borrowed_at: datetime,
        due_date: datetime,
    ) -> Loan: ...

    def find_by_id(self, loan_id: str) -> Loan | None: ...

    def count_active_loans(self, user_id: str) -> int: ...

    def update_returned_at(self, loan_id: str, when: datetime) -> Loan | None: ...

    def find_active_by_copy_id(self, copy_id: str) -> Loan | None: ...


@runtime_checkable
class ReservationPort(Protocol):
    def create(
        self,
        *,
        user_id: str,
        book_id: str,
        queue_position: int,
        reserved_at: datetime,
    ) -> Reservation: ...

    def find_by_id(self, reservation_id: str) -> Reservation | None: ...

    def find_active_by_book_id(self, book_id: str) -> list[Reservation]: ...

    def count_active_by_book_id(self, book_id: str) -> int: ...

    def next_queue_position(self, book_id: str) -> int: ...

    def has_active_reservation(self, user_id: str, book_id: str) -> bool: ...

    def update_status(
        self,
        reservation_id: str,
        status: ReservationStatus,
        notified_at: datetime | None = None,
        expires_at: datetime | None = None,
        *,
        expected: ReservationStatus | None = None,
    ) -> Reservation | None: ...

    def find_expired_reservations(self, now: datetime) -> list[Reservation]: ...


@runtime_checkable
class OverdueRecordPort(Protocol):
    def create(self, *, loan_id: str, overdue_days: int, recorded_at: datetime) -> OverdueRecord: ...


@runtime_checkable
class UnitOfWork(Protocol):
    """One atomic unit over all ports.

    Writes made through the ports commit together when the unit ends, unless
    :meth:`abort` was called or the block raised.
    """

    books: BookPort
    users: UserPort
    loans: LoanPort
    reservations: ReservationPort
    overdue_records: OverdueRecordPort

    def abort(self) -> None: ...

    def savepoint(self) -> AbstractContextManager[None]: ...
