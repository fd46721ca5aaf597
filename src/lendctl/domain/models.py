"""Ledger entities as frozen pydantic models.

Repositories build these from rows; services never mutate them in place.
A changed entity is always re-read from the store (or rebuilt with
``model_copy``) so callers see exactly what was persisted.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from lendctl.domain.types import ACTIVE_RESERVATION_STATUSES, CopyStatus, ReservationStatus

DEFAULT_LOAN_LIMIT = 5


class Book(BaseModel):
    """Catalog title. Immutable as far as the lending engine is concerned."""

    model_config = {"frozen": True}

    id: str
    title: str
    author: str
    isbn: str | None = None
    category: str | None = None


class Copy(BaseModel):
    """One physical copy of a :class:`Book`."""

    model_config = {"frozen": True}

    id: str
    book_id: str
    status: CopyStatus = CopyStatus.AVAILABLE
    location: str | None = None


class User(BaseModel):
    """A patron, with the number of loans they may hold at once."""

    model_config = {"frozen": True}

    id: str
    name: str
    email: str
    loan_limit: int = DEFAULT_LOAN_LIMIT


class Loan(BaseModel):
    model_config = {"frozen": True}

    id: str
    user_id: str
    copy_id: str
    borrowed_at: datetime
    due_date: datetime
    returned_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.returned_at is None


class OverdueRecord(BaseModel):
    model_config = {"frozen": True}

    id: str
    loan_id: str
    overdue_days: int
    recorded_at: datetime


class Reservation(BaseModel):
    """A patron's place in the waiting list for a book.

    ``queue_position`` is assigned once at creation and never renumbered;
    the queue itself is derived by ordering active rows on it.
    """

    model_config = {"frozen": True}

    id: str
    user_id: str
    book_id: str
    reserved_at: datetime
    status: ReservationStatus = ReservationStatus.PENDING
    queue_position: int
    notified_at: datetime | None = None
    expires_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_RESERVATION_STATUSES


class LoanReceipt(BaseModel):
    """Loan enriched with the display names a desk receipt needs."""

    model_config = {"frozen": True}

    loan: Loan
    book_title: str
    user_name: str
