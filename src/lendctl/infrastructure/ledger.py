"""Ledger — the store plus its unit-of-work coordinator.

The Ledger is the single dependency injected into every service. It owns
the database engine, the clock, and the plugin manager. Services open a
unit of work with :meth:`Ledger.transaction`; the yielded
:class:`LedgerTransaction` carries one connection and the store ports bound
to it, so a multi-step operation (insert loan + flip copy status, expire +
promote) either commits as a whole or not at all.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from lendctl.infrastructure.database.engine import init_database
from lendctl.infrastructure.repositories import (
    BookRepository,
    LoanRepository,
    OverdueRecordRepository,
    ReservationRepository,
    UserRepository,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from lendctl.config.settings import LendSettings
    from lendctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# LedgerTransaction: yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class LedgerTransaction:
    """Active unit of work: one connection and the ports bound to it.

    Call :meth:`abort` to roll the unit back while still returning normally
    (services return a failed ``ServiceResult`` instead of raising).
    """

    conn: Connection
    books: BookRepository = field(init=False)
    users: UserRepository = field(init=False)
    loans: LoanRepository = field(init=False)
    reservations: ReservationRepository = field(init=False)
    overdue_records: OverdueRecordRepository = field(init=False)
    _aborted: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.books = BookRepository(self.conn)
        self.users = UserRepository(self.conn)
        self.loans = LoanRepository(self.conn)
        self.reservations = ReservationRepository(self.conn)
        self.overdue_records = OverdueRecordRepository(self.conn)

    @property
    def aborted(self) -> bool:
        return self._aborted

    def abort(self) -> None:
        """Mark the unit for rollback when the ``transaction()`` block exits."""
        self._aborted = True

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        """Nested unit whose failure rolls back only its own writes.

        The exception still propagates; the caller decides whether it is fatal.
        """
        with self.conn.begin_nested():
            yield


# ---------------------------------------------------------------------------
# Ledger: engine, clock and plugins
# ---------------------------------------------------------------------------


class Ledger:
    """Database, clock and plugin access for the lending engine.

    Constructed once at CLI startup from :class:`LendSettings` and stored on
    the click context. Tests pass a *clock* to move time deterministically.
    """

    def __init__(self, settings: LendSettings, *, clock: Clock | None = None) -> None:
        self._settings = settings
        self._clock: Clock = clock or utc_now
        self._engine: Engine = init_database(
            settings.db_path,
            busy_timeout_ms=settings.ledger.busy_timeout_ms,
        )
        self._plugins: PluginManager | None = None

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> LendSettings:
        return self._settings

    @property
    def plugins(self) -> PluginManager | None:
        """The plugin manager (None until :meth:`init_plugins` runs)."""
        return self._plugins

    def now(self) -> datetime:
        """Current time from the ledger clock (timezone-aware UTC)."""
        return self._clock()

    def init_plugins(self) -> None:
        """Create the plugin manager and load entry-point plugins."""
        from lendctl.plugins.manager import PluginManager

        pm = PluginManager()
        if self._settings.plugins.enabled:
            pm.discover_and_load()
        self._plugins = pm

    @contextmanager
    def transaction(self) -> Iterator[LedgerTransaction]:
        """Open one unit of work.

        Commits when the block exits normally, rolls back when it raises or
        when :meth:`LedgerTransaction.abort` was called. The engine opens
        every transaction with ``BEGIN IMMEDIATE``, so the whole block runs
        under the database write lock.

        Usage::

            with ledger.transaction() as txn:
                loan = txn.loans.create(...)
                if txn.books.update_copy_status(copy_id, CopyStatus.BORROWED) is None:
                    txn.abort()
        """
        with self._engine.connect() as conn:
            trans = conn.begin()
            txn = LedgerTransaction(conn=conn)
            try:
                yield txn
            except BaseException:
                trans.rollback()
                raise
            if txn.aborted:
                logger.debug("Ledger transaction aborted; rolling back")
                trans.rollback()
            else:
                trans.commit()

    def close(self) -> None:
        """Dispose of pooled connections."""
        self._engine.dispose()
