"""Store ports implemented with SQLAlchemy Core.

Each repository is bound to the ``Connection`` of one ledger transaction,
so every read and write it performs belongs to that unit of work.
"""

from lendctl.infrastructure.repositories.books import BookRepository
from lendctl.infrastructure.repositories.loans import LoanRepository, OverdueRecordRepository
from lendctl.infrastructure.repositories.reservations import ReservationRepository
from lendctl.infrastructure.repositories.users import UserRepository

__all__ = [
    "BookRepository",
    "LoanRepository",
    "OverdueRecordRepository",
    "ReservationRepository",
    "UserRepository",
]
