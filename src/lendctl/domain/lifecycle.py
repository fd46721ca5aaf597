"""Reservation state machine and loan/hold date rules.

Reservation lifecycle::

    PENDING  --notify-->  NOTIFIED  --expire-->  EXPIRED
    PENDING  --cancel-->  CANCELLED
    NOTIFIED --cancel-->  CANCELLED
    NOTIFIED --fulfill--> FULFILLED

FULFILLED, EXPIRED and CANCELLED are terminal.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from lendctl.domain.types import ReservationStatus

DEFAULT_LOAN_DURATION_DAYS = 14
DEFAULT_HOLD_DAYS = 7

_ONE_DAY = timedelta(days=1)

# --- Transition map ---

RESERVATION_TRANSITIONS: dict[ReservationStatus, list[ReservationStatus]] = {
    ReservationStatus.PENDING: [ReservationStatus.NOTIFIED, ReservationStatus.CANCELLED],
    ReservationStatus.NOTIFIED: [
        ReservationStatus.EXPIRED,
        ReservationStatus.CANCELLED,
        ReservationStatus.FULFILLED,
    ],
    ReservationStatus.FULFILLED: [],
    ReservationStatus.EXPIRED: [],
    ReservationStatus.CANCELLED: [],
}


class InvalidTransitionError(ValueError):
    """Raised by :func:`check_transition` for a move the state machine forbids."""

    def __init__(self, current: ReservationStatus, target: ReservationStatus) -> None:
        self.current = current
        self.target = target
        allowed = [str(s) for s in RESERVATION_TRANSITIONS.get(current, [])]
        super().__init__(
            f"Invalid reservation transition: {current} -> {target}. Allowed: {allowed}"
        )


def is_valid_transition(current: ReservationStatus, target: ReservationStatus) -> bool:
    """Check if moving a reservation from *current* to *target* is allowed."""
    return target in RESERVATION_TRANSITIONS.get(current, [])


def check_transition(current: ReservationStatus, target: ReservationStatus) -> None:
    """Guard form of :func:`is_valid_transition`.

    Raises:
        InvalidTransitionError: If the move is not in the transition map.
    """
    if not is_valid_transition(current, target):
        raise InvalidTransitionError(current, target)


def is_terminal(status: ReservationStatus) -> bool:
    return not RESERVATION_TRANSITIONS.get(status)


# --- Date rules ---


def compute_due_date(
    borrowed_at: datetime,
    duration_days: int = DEFAULT_LOAN_DURATION_DAYS,
) -> datetime:
    """Due date for a loan starting at *borrowed_at*."""
    return borrowed_at + timedelta(days=duration_days)


def compute_hold_expiry(notified_at: datetime, hold_days: int = DEFAULT_HOLD_DAYS) -> datetime:
    """Expiry of a NOTIFIED reservation's pickup window."""
    return notified_at + timedelta(days=hold_days)


def compute_overdue_days(due_date: datetime, returned_at: datetime) -> int:
    """Started days by which *returned_at* postdates *due_date*.

    Returns 0 for an on-time return; any late return counts at least one day.
    """
    if returned_at <= due_date:
        return 0
    return math.ceil((returned_at - due_date) / _ONE_DAY)
