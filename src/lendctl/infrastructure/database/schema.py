"""SQLAlchemy Core table definitions for the lending ledger.

Timestamps are stored as fixed-width UTC text (see :class:`UtcTimestamp`) so
that SQL comparisons such as ``expires_at < :now`` order correctly.

Partial unique indexes back the cross-row invariants:

- at most one active loan per copy
- at most one active reservation per (user, book)
- active queue positions are unique per book
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)
from sqlalchemy.types import TypeDecorator

from lendctl.domain.types import ACTIVE_RESERVATION_STATUSES, CopyStatus, ReservationStatus

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class UtcTimestamp(TypeDecorator[datetime]):
    """Timezone-aware datetime persisted as ``YYYY-MM-DDTHH:MM:SS.ffffffZ``."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> str | None:
        if value is None:
            return None
        if value.tzinfo is None:
            msg = f"Naive datetime not allowed in the ledger: {value!r}"
            raise ValueError(msg)
        return value.astimezone(UTC).strftime(_TIMESTAMP_FORMAT)

    def process_result_value(self, value: str | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        return datetime.strptime(value, _TIMESTAMP_FORMAT).replace(tzinfo=UTC)


def _in_list(values: frozenset[Any] | list[Any]) -> str:
    return ", ".join(f"'{v}'" for v in sorted(str(s) for s in values))


metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True),
    Column("loan_limit", Integer, nullable=False, server_default="5"),
    Column("registered_at", UtcTimestamp, nullable=False),
    CheckConstraint("loan_limit > 0", name="ck_users_loan_limit_positive"),
)

books = Table(
    "books",
    metadata,
    Column("id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("author", Text, nullable=False),
    Column("isbn", Text),
    Column("category", Text),
    Column("created_at", UtcTimestamp, nullable=False),
)

copies = Table(
    "copies",
    metadata,
    Column("id", Text, primary_key=True),
    Column("book_id", Text, ForeignKey("books.id"), nullable=False),
    Column("status", Text, nullable=False, server_default=str(CopyStatus.AVAILABLE)),
    Column("location", Text),
    Column("created_at", UtcTimestamp, nullable=False),
    CheckConstraint(f"status IN ({_in_list(list(CopyStatus))})", name="ck_copies_status"),
)

loans = Table(
    "loans",
    metadata,
    Column("id", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("users.id"), nullable=False),
    Column("copy_id", Text, ForeignKey("copies.id"), nullable=False),
    Column("borrowed_at", UtcTimestamp, nullable=False),
    Column("due_date", UtcTimestamp, nullable=False),
    Column("returned_at", UtcTimestamp),
)

reservations = Table(
    "reservations",
    metadata,
    Column("id", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("users.id"), nullable=False),
    Column("book_id", Text, ForeignKey("books.id"), nullable=False),
    Column("reserved_at", UtcTimestamp, nullable=False),
    Column("notified_at", UtcTimestamp),
    Column("expires_at", UtcTimestamp),
    Column("status", Text, nullable=False, server_default=str(ReservationStatus.PENDING)),
    Column("queue_position", Integer, nullable=False),
    CheckConstraint(
        f"status IN ({_in_list(list(ReservationStatus))})", name="ck_reservations_status"
    ),
    CheckConstraint("queue_position > 0", name="ck_reservations_queue_position_positive"),
)

overdue_records = Table(
    "overdue_records",
    metadata,
    Column("id", Text, primary_key=True),
    Column("loan_id", Text, ForeignKey("loans.id"), nullable=False, unique=True),
    Column("overdue_days", Integer, nullable=False),
    Column("recorded_at", UtcTimestamp, nullable=False),
    CheckConstraint("overdue_days > 0", name="ck_overdue_records_days_positive"),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_copies_book_id_status", copies.c.book_id, copies.c.status)
Index("ix_loans_user_id_returned_at", loans.c.user_id, loans.c.returned_at)
Index("ix_reservations_book_id_status", reservations.c.book_id, reservations.c.status)
Index("ix_reservations_status_expires_at", reservations.c.status, reservations.c.expires_at)

# ---------------------------------------------------------------------------
# Partial unique indexes (store-enforced invariants)
# ---------------------------------------------------------------------------

Index(
    "uq_loans_active_copy",
    loans.c.copy_id,
    unique=True,
    sqlite_where=loans.c.returned_at.is_(None),
)
Index(
    "uq_reservations_active_user_book",
    reservations.c.user_id,
    reservations.c.book_id,
    unique=True,
    sqlite_where=reservations.c.status.in_([str(s) for s in ACTIVE_RESERVATION_STATUSES]),
)
Index(
    "uq_reservations_active_queue_position",
    reservations.c.book_id,
    reservations.c.queue_position,
    unique=True,
    sqlite_where=reservations.c.status.in_([str(s) for s in ACTIVE_RESERVATION_STATUSES]),
)

# Constraint names surfaced by IntegrityError messages, mapped to the
# invariant they protect (see services that translate them).
ACTIVE_LOAN_COLUMNS = "loans.copy_id"
ACTIVE_RESERVATION_COLUMNS = "reservations.user_id, reservations.book_id"
ACTIVE_POSITION_COLUMNS = "reservations.book_id, reservations.queue_position"
