"""NotificationService — promote the head of a book's waiting list.

A book has at most one outstanding pickup notification at a time: when the
first active entry of the queue is already NOTIFIED, nobody else is
promoted until that hold is fulfilled, cancelled or expired.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lendctl.domain.lifecycle import compute_hold_expiry
from lendctl.domain.types import ReservationStatus
from lendctl.services._helpers import dump
from lendctl.services.base import BaseService
from lendctl.services.result import ServiceResult
from lendctl.services.telemetry import traced

if TYPE_CHECKING:
    from datetime import datetime

    from lendctl.domain.models import Reservation
    from lendctl.services.ports import UnitOfWork

log = structlog.get_logger(__name__)


def promote_queue_head(
    txn: UnitOfWork,
    book_id: str,
    *,
    now: datetime,
    hold_days: int,
) -> Reservation | None:
    """Promote the head of *book_id*'s queue to NOTIFIED within *txn*.

    Returns the promoted reservation, or None when the queue is empty, has
    no PENDING entry, or its head is already NOTIFIED.
    """
    queue = txn.reservations.find_active_by_book_id(book_id)
    if not queue:
        return None

    head = queue[0]
    if head.status != ReservationStatus.PENDING:
        return None

    return txn.reservations.update_status(
        head.id,
        ReservationStatus.NOTIFIED,
        notified_at=now,
        expires_at=compute_hold_expiry(now, hold_days),
        expected=ReservationStatus.PENDING,
    )


class NotificationService(BaseService):
    """Queue promotion after a copy of a book frees up."""

    @traced
    def process_returned_book(self, book_id: str) -> ServiceResult:
        """Notify the next waiting patron for *book_id*.

        Result data is ``{"notified_reservation": <reservation> | None}``.
        """
        op = "process_returned_book"
        now = self._ledger.now()
        hold_days = self._ledger.settings.reservations.hold_days
        warnings: list[str] = []

        with self._ledger.transaction() as txn:
            promoted = promote_queue_head(txn, book_id, now=now, hold_days=hold_days)

        if promoted is None:
            log.debug("reservation.no_promotion", book_id=book_id)
            return ServiceResult(ok=True, op=op, data={"notified_reservation": None})

        log.info(
            "reservation.notified",
            reservation_id=promoted.id,
            book_id=book_id,
            expires_at=promoted.expires_at.isoformat() if promoted.expires_at else None,
        )
        self._dispatch_event(
            "post_reservation_notified", {"reservation": dump(promoted)}, warnings
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"notified_reservation": dump(promoted)},
            warnings=warnings,
        )
