"""Pluggy hook specifications for lendctl lifecycle events.

Hooks fire synchronously after the unit of work that produced the event
has committed, so a plugin never observes state that was rolled back.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("lendctl")


class LendctlHookSpec:
    """Hook specifications for the lendctl plugin system."""

    @hookspec
    def post_loan_created(self, loan: dict[str, Any]) -> None:
        """Called after a loan is admitted and its copy marked BORROWED."""

    @hookspec
    def post_book_returned(
        self,
        loan: dict[str, Any],
        book_id: str,
        overdue_days: int | None,
    ) -> None:
        """Called after a loan is closed. ``overdue_days`` is None for on-time returns."""

    @hookspec
    def post_reservation_created(self, reservation: dict[str, Any]) -> None:
        """Called after a patron joins a book's waiting list."""

    @hookspec
    def post_reservation_notified(self, reservation: dict[str, Any]) -> None:
        """Called after a reservation is promoted to NOTIFIED.

        Delivery of the actual message to the patron belongs here.
        """

    @hookspec
    def post_reservation_expired(self, reservation_ids: list[str]) -> None:
        """Called after a sweep expires one or more NOTIFIED reservations."""

    @hookspec
    def post_reservation_cancelled(self, reservation: dict[str, Any]) -> None:
        """Called after a reservation is cancelled."""
