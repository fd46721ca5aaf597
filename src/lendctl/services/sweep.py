"""ExpiryService — periodic expiry of unclaimed pickup notifications.

The sweep is meant to be run by an external scheduler (``lendctl sweep``
from cron or a systemd timer). One pass:

1. claims every NOTIFIED reservation whose ``expires_at`` has passed and
   marks it EXPIRED,
2. re-runs queue promotion once for each book that lost a hold.

Both steps share one write transaction. Claims are conditional on the row
still being NOTIFIED, so overlapping sweeps never expire or promote twice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lendctl.domain.types import ReservationStatus
from lendctl.services._helpers import dump
from lendctl.services.base import BaseService
from lendctl.services.notifications import promote_queue_head
from lendctl.services.result import ServiceResult
from lendctl.services.telemetry import traced

if TYPE_CHECKING:
    from lendctl.domain.models import Reservation

log = structlog.get_logger(__name__)


class ExpiryService(BaseService):
    """Expire stale notifications and cascade promotions."""

    @traced
    def expire_overdue_reservations(self) -> ServiceResult:
        """Run one sweep.

        Result data: ``expired_count`` and ``next_notified_reservations``
        (the reservations promoted as a consequence, in book order of
        first expiry).
        """
        op = "expire_overdue_reservations"
        now = self._ledger.now()
        hold_days = self._ledger.settings.reservations.hold_days
        warnings: list[str] = []

        expired_ids: list[str] = []
        touched_books: list[str] = []
        promoted: list[Reservation] = []

        with self._ledger.transaction() as txn:
            for reservation in txn.reservations.find_expired_reservations(now):
                claimed = txn.reservations.update_status(
                    reservation.id,
                    ReservationStatus.EXPIRED,
                    expected=ReservationStatus.NOTIFIED,
                )
                if claimed is None:
                    continue
                expired_ids.append(claimed.id)
                if claimed.book_id not in touched_books:
                    touched_books.append(claimed.book_id)

            for book_id in touched_books:
                next_up = promote_queue_head(txn, book_id, now=now, hold_days=hold_days)
                if next_up is not None:
                    promoted.append(next_up)

        log.info(
            "sweep.completed",
            expired_count=len(expired_ids),
            promoted_count=len(promoted),
            books=len(touched_books),
        )
        if expired_ids:
            self._dispatch_event(
                "post_reservation_expired", {"reservation_ids": expired_ids}, warnings
            )
        for reservation in promoted:
            self._dispatch_event(
                "post_reservation_notified", {"reservation": dump(reservation)}, warnings
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "expired_count": len(expired_ids),
                "next_notified_reservations": [dump(r) for r in promoted],
            },
            warnings=warnings,
        )
