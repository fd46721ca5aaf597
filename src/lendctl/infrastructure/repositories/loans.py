"""Loan and overdue-record store ports."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, insert, select, update

from lendctl.domain.ids import generate_id
from lendctl.domain.models import Loan, OverdueRecord
from lendctl.infrastructure.database.schema import loans, overdue_records

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import Connection


class LoanRepository:
    """Loans are inserted once, closed once, and never deleted."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def create(
        self,
        *,
        user_id: str,
        copy_id: str,
        borrowed_at: datetime,
        due_date: datetime,
    ) -> Loan:
        loan_id = generate_id("loan")
        self._conn.execute(
            insert(loans).values(
                id=loan_id,
                user_id=user_id,
                copy_id=copy_id,
                borrowed_at=borrowed_at,
                due_date=due_date,
                returned_at=None,
            )
        )
        return Loan(
            id=loan_id,
            user_id=user_id,
            copy_id=copy_id,
            borrowed_at=borrowed_at,
            due_date=due_date,
        )

    def find_by_id(self, loan_id: str) -> Loan | None:
        row = self._conn.execute(select(loans).where(loans.c.id == loan_id)).mappings().first()
        return Loan.model_validate(dict(row)) if row is not None else None

    def count_active_loans(self, user_id: str) -> int:
        stmt = select(func.count(loans.c.id)).where(
            loans.c.user_id == user_id, loans.c.returned_at.is_(None)
        )
        return int(self._conn.execute(stmt).scalar_one() or 0)

    def find_active_by_copy_id(self, copy_id: str) -> Loan | None:
        stmt = select(loans).where(loans.c.copy_id == copy_id, loans.c.returned_at.is_(None))
        row = self._conn.execute(stmt).mappings().first()
        return Loan.model_validate(dict(row)) if row is not None else None

    def find_by_user_id(self, user_id: str, *, active_only: bool = False) -> list[Loan]:
        stmt = select(loans).where(loans.c.user_id == user_id)
        if active_only:
            stmt = stmt.where(loans.c.returned_at.is_(None))
        stmt = stmt.order_by(loans.c.borrowed_at, loans.c.id)
        return [Loan.model_validate(dict(r)) for r in self._conn.execute(stmt).mappings()]

    def update_returned_at(self, loan_id: str, when: datetime) -> Loan | None:
        """Close an active loan.

        Only a loan that is still open is touched, so a loan can be closed
        exactly once. Returns None if no open loan with *loan_id* exists.
        """
        result = self._conn.execute(
            update(loans)
            .where(loans.c.id == loan_id, loans.c.returned_at.is_(None))
            .values(returned_at=when)
        )
        if result.rowcount != 1:
            return None
        return self.find_by_id(loan_id)


class OverdueRecordRepository:
    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def create(self, *, loan_id: str, overdue_days: int, recorded_at: datetime) -> OverdueRecord:
        record_id = generate_id("overdue_record")
        self._conn.execute(
            insert(overdue_records).values(
                id=record_id,
                loan_id=loan_id,
                overdue_days=overdue_days,
                recorded_at=recorded_at,
            )
        )
        return OverdueRecord(
            id=record_id,
            loan_id=loan_id,
            overdue_days=overdue_days,
            recorded_at=recorded_at,
        )

    def find_by_loan_id(self, loan_id: str) -> OverdueRecord | None:
        stmt = select(overdue_records).where(overdue_records.c.loan_id == loan_id)
        row = self._conn.execute(stmt).mappings().first()
        return OverdueRecord.model_validate(dict(row)) if row is not None else None

    def find_by_user_id(self, user_id: str) -> list[OverdueRecord]:
        stmt = (
            select(overdue_records)
            .join(loans, overdue_records.c.loan_id == loans.c.id)
            .where(loans.c.user_id == user_id)
            .order_by(overdue_records.c.recorded_at.desc())
        )
        return [OverdueRecord.model_validate(dict(r)) for r in self._conn.execute(stmt).mappings()]
