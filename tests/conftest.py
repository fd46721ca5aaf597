"""Shared pytest fixtures and test helpers for lendctl tests."""

from __future__ import annotations

from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from lendctl.config.settings import LendSettings
from lendctl.infrastructure.ledger import Ledger
from lendctl.services.telemetry import disable_telemetry

START = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


class FakeClock:
    """Adjustable clock injected into the Ledger."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, *, days: float = 0, hours: float = 0, seconds: float = 0) -> datetime:
        self.current += timedelta(days=days, hours=hours, seconds=seconds)
        return self.current


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """``-v`` in a CLI test must not leak spans into later tests."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> LendSettings:
    """Settings rooted at a temp directory, isolated from the environment."""
    monkeypatch.delenv("LENDCTL_CONFIG", raising=False)
    return LendSettings.from_cli(root=tmp_path)


@pytest.fixture
def ledger(settings: LendSettings, clock: FakeClock) -> Generator[Ledger]:
    """Fresh ledger database on a temp directory, driven by ``clock``."""
    led = Ledger(settings, clock=clock)
    try:
        yield led
    finally:
        led.close()


@pytest.fixture
def _isolated_ledger(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated ledger.

    Use via ``@pytest.mark.usefixtures("_isolated_ledger")`` on command test
    classes.
    """
    monkeypatch.delenv("LENDCTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------

_counter = {"n": 0}


def register_user(ledger: Ledger, name: str = "Ada", **kwargs: Any) -> dict[str, Any]:
    """Register a patron via CatalogService, asserting success."""
    from lendctl.services.catalog import CatalogService

    _counter["n"] += 1
    email = kwargs.pop("email", f"{name.lower().replace(' ', '.')}.{_counter['n']}@example.org")
    result = CatalogService(ledger).register_user(name, email, **kwargs)
    assert result.ok, result.error
    return result.data["user"]


def add_book(ledger: Ledger, title: str = "Dune", **kwargs: Any) -> dict[str, Any]:
    """Add a book via CatalogService; returns ``{"book", "copies"}``."""
    from lendctl.services.catalog import CatalogService

    kwargs.setdefault("author", "Frank Herbert")
    author = kwargs.pop("author")
    result = CatalogService(ledger).add_book(title, author, **kwargs)
    assert result.ok, result.error
    return result.data


def borrow(ledger: Ledger, user_id: str, copy_id: str) -> dict[str, Any]:
    """Create a loan via LoanService, asserting success."""
    from lendctl.services.loans import LoanService

    result = LoanService(ledger).create_loan(user_id, copy_id)
    assert result.ok, result.error
    return result.data["loan"]


def reserve(ledger: Ledger, user_id: str, book_id: str) -> dict[str, Any]:
    """Create a reservation via ReservationService, asserting success."""
    from lendctl.services.reservations import ReservationService

    result = ReservationService(ledger).create_reservation(user_id, book_id)
    assert result.ok, result.error
    return result.data["reservation"]


def checked_out_book(ledger: Ledger, copies: int = 1) -> dict[str, Any]:
    """A book whose copies are all on loan to a fresh borrower.

    Returns ``{"book", "copies", "borrower", "loans"}``.
    """
    data = add_book(ledger, copies=copies)
    borrower = register_user(ledger, "Borrower")
    loans = [borrow(ledger, borrower["id"], c["id"]) for c in data["copies"]]
    return {**data, "borrower": borrower, "loans": loans}
