"""Reservation store port.

The waiting list for a book is never held in memory: it is rebuilt on
every read by ordering the book's active rows on ``queue_position``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from lendctl.domain.ids import generate_id
from lendctl.domain.models import Reservation
from lendctl.domain.types import ACTIVE_RESERVATION_STATUSES, ReservationStatus
from lendctl.infrastructure.database.schema import reservations

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import ColumnElement, Connection

_ACTIVE = [str(s) for s in ACTIVE_RESERVATION_STATUSES]


def _is_active() -> ColumnElement[bool]:
    return reservations.c.status.in_(_ACTIVE)


class ReservationRepository:
    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def create(
        self,
        *,
        user_id: str,
        book_id: str,
        queue_position: int,
        reserved_at: datetime,
    ) -> Reservation:
        reservation_id = generate_id("reservation")
        self._conn.execute(
            insert(reservations).values(
                id=reservation_id,
                user_id=user_id,
                book_id=book_id,
                reserved_at=reserved_at,
                status=str(ReservationStatus.PENDING),
                queue_position=queue_position,
            )
        )
        return Reservation(
            id=reservation_id,
            user_id=user_id,
            book_id=book_id,
            reserved_at=reserved_at,
            queue_position=queue_position,
        )

    def find_by_id(self, reservation_id: str) -> Reservation | None:
        stmt = select(reservations).where(reservations.c.id == reservation_id)
        row = self._conn.execute(stmt).mappings().first()
        return Reservation.model_validate(dict(row)) if row is not None else None

    def find_active_by_book_id(self, book_id: str) -> list[Reservation]:
        """Active reservations for *book_id* in queue order."""
        stmt = (
            select(reservations)
            .where(reservations.c.book_id == book_id, _is_active())
            .order_by(reservations.c.queue_position, reservations.c.reserved_at)
        )
        return [Reservation.model_validate(dict(r)) for r in self._conn.execute(stmt).mappings()]

    def find_by_user_id(self, user_id: str) -> list[Reservation]:
        stmt = (
            select(reservations)
            .where(reservations.c.user_id == user_id)
            .order_by(reservations.c.reserved_at.desc())
        )
        return [Reservation.model_validate(dict(r)) for r in self._conn.execute(stmt).mappings()]

    def count_active_by_book_id(self, book_id: str) -> int:
        stmt = select(func.count(reservations.c.id)).where(
            reservations.c.book_id == book_id, _is_active()
        )
        return int(self._conn.execute(stmt).scalar_one() or 0)

    def next_queue_position(self, book_id: str) -> int:
        """Position for a new reservation at the tail of *book_id*'s queue.

        While the active queue is gap-free this is ``count_active + 1``.
        Cancellations and expiries leave holes (positions are never
        renumbered), in which case ``count_active + 1`` may already be held
        by a waiting patron; the tail is then one past the highest active
        position so FIFO order and uniqueness both hold.
        """
        active = self.count_active_by_book_id(book_id)
        highest = self._conn.execute(
            select(func.max(reservations.c.queue_position)).where(
                reservations.c.book_id == book_id, _is_active()
            )
        ).scalar_one()
        return max(active, int(highest or 0)) + 1

    def has_active_reservation(self, user_id: str, book_id: str) -> bool:
        stmt = select(reservations.c.id).where(
            reservations.c.user_id == user_id,
            reservations.c.book_id == book_id,
            _is_active(),
        )
        return self._conn.execute(stmt.limit(1)).first() is not None

    def update_status(
        self,
        reservation_id: str,
        status: ReservationStatus,
        notified_at: datetime | None = None,
        expires_at: datetime | None = None,
        *,
        expected: ReservationStatus | None = None,
    ) -> Reservation | None:
        """Set a reservation's status, and its notification window when given.

        Timestamps left as None keep their stored value. With *expected*, the
        row is only updated while it still has that status, which lets a
        caller claim a row without racing a concurrent writer.

        Returns the updated reservation, or None if no row matched.
        """
        values: dict[str, Any] = {"status": str(status)}
        if notified_at is not None:
            values["notified_at"] = notified_at
        if expires_at is not None:
            values["expires_at"] = expires_at

        stmt = update(reservations).where(reservations.c.id == reservation_id)
        if expected is not None:
            stmt = stmt.where(reservations.c.status == str(expected))

        result = self._conn.execute(stmt.values(**values))
        if result.rowcount != 1:
            return None
        return self.find_by_id(reservation_id)

    def find_expired_reservations(self, now: datetime) -> list[Reservation]:
        """NOTIFIED reservations whose pickup window closed before *now*."""
        stmt = (
            select(reservations)
            .where(
                reservations.c.status == str(ReservationStatus.NOTIFIED),
                reservations.c.expires_at < now,
            )
            .order_by(reservations.c.expires_at, reservations.c.id)
        )
        return [Reservation.model_validate(dict(r)) for r in self._conn.execute(stmt).mappings()]
