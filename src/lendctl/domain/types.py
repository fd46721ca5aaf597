"""Status and error vocabularies shared across the engine.

Copy and reservation statuses are stored as their string values, so the
enum values double as the persisted representation.
"""

from __future__ import annotations

from enum import StrEnum


class CopyStatus(StrEnum):
    """Physical state of a single copy of a book."""

    AVAILABLE = "AVAILABLE"
    BORROWED = "BORROWED"
    RESERVED = "RESERVED"
    MAINTENANCE = "MAINTENANCE"


class ReservationStatus(StrEnum):
    """Reservation lifecycle states. See :mod:`lendctl.domain.lifecycle`."""

    PENDING = "PENDING"
    NOTIFIED = "NOTIFIED"
    FULFILLED = "FULFILLED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


ACTIVE_RESERVATION_STATUSES: frozenset[ReservationStatus] = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.NOTIFIED}
)


class ErrorCode(StrEnum):
    """Closed set of error codes carried by ``ServiceError.code``."""

    # not found
    USER_NOT_FOUND = "USER_NOT_FOUND"
    BOOK_NOT_FOUND = "BOOK_NOT_FOUND"
    COPY_NOT_FOUND = "COPY_NOT_FOUND"
    LOAN_NOT_FOUND = "LOAN_NOT_FOUND"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"

    # business rules
    LOAN_LIMIT_EXCEEDED = "LOAN_LIMIT_EXCEEDED"
    BOOK_NOT_AVAILABLE = "BOOK_NOT_AVAILABLE"
    BOOK_AVAILABLE = "BOOK_AVAILABLE"
    ALREADY_RESERVED = "ALREADY_RESERVED"
    ALREADY_RETURNED = "ALREADY_RETURNED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"

    # input / consistency
    VALIDATION_ERROR = "VALIDATION_ERROR"
