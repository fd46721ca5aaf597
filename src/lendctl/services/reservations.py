"""ReservationService — the per-book waiting list.

Reservations are only accepted for a book with no AVAILABLE copy. A new
entry joins the tail of the queue as PENDING; promotion to NOTIFIED is the
job of :mod:`lendctl.services.notifications`.
"""

from __future__ import annotations

import structlog
from sqlalchemy.exc import IntegrityError

from lendctl.domain.lifecycle import InvalidTransitionError, check_transition, is_terminal
from lendctl.domain.types import CopyStatus, ErrorCode, ReservationStatus
from lendctl.infrastructure.database.schema import (
    ACTIVE_POSITION_COLUMNS,
    ACTIVE_RESERVATION_COLUMNS,
)
from lendctl.services._helpers import dump, violates
from lendctl.services.base import BaseService
from lendctl.services.result import ServiceResult
from lendctl.services.telemetry import traced

log = structlog.get_logger(__name__)


class ReservationService(BaseService):
    """Create, cancel and fulfill reservations."""

    @traced
    def create_reservation(self, user_id: str, book_id: str) -> ServiceResult:
        op = "create_reservation"
        now = self._ledger.now()
        warnings: list[str] = []

        with self._ledger.transaction() as txn:
            if txn.users.find_by_id(user_id) is None:
                return ServiceResult.failure(
                    op, ErrorCode.USER_NOT_FOUND, f"No user with id {user_id}", user_id=user_id
                )
            if txn.books.find_by_id(book_id) is None:
                return ServiceResult.failure(
                    op, ErrorCode.BOOK_NOT_FOUND, f"No book with id {book_id}", book_id=book_id
                )
            if txn.reservations.has_active_reservation(user_id, book_id):
                return _already_reserved(op, user_id, book_id)

            copies = txn.books.find_copies_by_book_id(book_id)
            if any(c.status == CopyStatus.AVAILABLE for c in copies):
                return ServiceResult.failure(
                    op,
                    ErrorCode.BOOK_AVAILABLE,
                    f"Book {book_id} has an available copy; borrow it instead",
                    book_id=book_id,
                )

            position = txn.reservations.next_queue_position(book_id)
            try:
                reservation = txn.reservations.create(
                    user_id=user_id,
                    book_id=book_id,
                    queue_position=position,
                    reserved_at=now,
                )
            except IntegrityError as exc:
                txn.abort()
                if violates(exc, ACTIVE_RESERVATION_COLUMNS):
                    return _already_reserved(op, user_id, book_id)
                if violates(exc, ACTIVE_POSITION_COLUMNS):
                    return ServiceResult.failure(
                        op,
                        ErrorCode.VALIDATION_ERROR,
                        f"Queue position {position} for book {book_id} is taken",
                        field="queue_position",
                        book_id=book_id,
                    )
                raise

        log.info(
            "reservation.created",
            reservation_id=reservation.id,
            book_id=book_id,
            queue_position=position,
        )
        self._dispatch_event(
            "post_reservation_created", {"reservation": dump(reservation)}, warnings
        )
        return ServiceResult(
            ok=True, op=op, data={"reservation": dump(reservation)}, warnings=warnings
        )

    @traced
    def cancel_reservation(self, reservation_id: str) -> ServiceResult:
        """Withdraw a reservation. The rest of the queue keeps its positions."""
        result = self._transition(
            "cancel_reservation", reservation_id, ReservationStatus.CANCELLED
        )
        if result.ok:
            warnings = list(result.warnings)
            self._dispatch_event("post_reservation_cancelled", dict(result.data), warnings)
            result = result.model_copy(update={"warnings": warnings})
        return result

    @traced
    def fulfill_reservation(self, reservation_id: str) -> ServiceResult:
        """Close a NOTIFIED reservation once the patron has collected the book."""
        return self._transition(
            "fulfill_reservation", reservation_id, ReservationStatus.FULFILLED
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _transition(
        self, op: str, reservation_id: str, target: ReservationStatus
    ) -> ServiceResult:
        with self._ledger.transaction() as txn:
            reservation = txn.reservations.find_by_id(reservation_id)
            if reservation is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.RESERVATION_NOT_FOUND,
                    f"No reservation with id {reservation_id}",
                    reservation_id=reservation_id,
                )
            try:
                check_transition(reservation.status, target)
            except InvalidTransitionError as exc:
                return _invalid_transition(op, reservation_id, exc.current, exc.target)

            updated = txn.reservations.update_status(
                reservation_id, target, expected=reservation.status
            )
            if updated is None:
                txn.abort()
                return _invalid_transition(op, reservation_id, reservation.status, target)

        log.info(f"reservation.{target.lower()}", reservation_id=reservation_id)
        return ServiceResult(ok=True, op=op, data={"reservation": dump(updated)})


def _already_reserved(op: str, user_id: str, book_id: str) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.ALREADY_RESERVED,
        f"User {user_id} already has an active reservation for book {book_id}",
        user_id=user_id,
        book_id=book_id,
    )


def _invalid_transition(
    op: str,
    reservation_id: str,
    current: ReservationStatus,
    target: ReservationStatus,
) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.INVALID_TRANSITION,
        f"Reservation {reservation_id} cannot move from {current} to {target}",
        reservation_id=reservation_id,
        current=str(current),
        target=str(target),
        terminal=is_terminal(current),
    )
