"""Tests for status and error-code vocabularies."""

from lendctl.domain.types import (
    ACTIVE_RESERVATION_STATUSES,
    CopyStatus,
    ErrorCode,
    ReservationStatus,
)


class TestCopyStatus:
    def test_members(self) -> None:
        assert {s.value for s in CopyStatus} == {
            "AVAILABLE",
            "BORROWED",
            "RESERVED",
            "MAINTENANCE",
        }

    def test_str_is_value(self) -> None:
        assert str(CopyStatus.BORROWED) == "BORROWED"


class TestReservationStatus:
    def test_active_set(self) -> None:
        assert ACTIVE_RESERVATION_STATUSES == {
            ReservationStatus.PENDING,
            ReservationStatus.NOTIFIED,
        }

    def test_lookup_by_value(self) -> None:
        assert ReservationStatus("EXPIRED") is ReservationStatus.EXPIRED


class TestErrorCode:
    def test_closed_set(self) -> None:
        assert {c.value for c in ErrorCode} == {
            "USER_NOT_FOUND",
            "BOOK_NOT_FOUND",
            "COPY_NOT_FOUND",
            "LOAN_NOT_FOUND",
            "RESERVATION_NOT_FOUND",
            "LOAN_LIMIT_EXCEEDED",
            "BOOK_NOT_AVAILABLE",
            "BOOK_AVAILABLE",
            "ALREADY_RESERVED",
            "ALREADY_RETURNED",
            "INVALID_TRANSITION",
            "DUPLICATE_EMAIL",
            "VALIDATION_ERROR",
        }

    def test_compares_equal_to_string(self) -> None:
        assert ErrorCode.USER_NOT_FOUND == "USER_NOT_FOUND"
