"""SQLModel implementation of the snapshot store."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...models.snapshot import EmergencyFundSnapshot


class SQLModelSnapshotRepository:
    """Date-keyed snapshot rows; a second write on the same date overwrites."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_date(self, snapshot_date: date) -> Optional[EmergencyFundSnapshot]:
        with self.session_factory() as session:
            return session.exec(
                select(EmergencyFundSnapshot).where(
                    EmergencyFundSnapshot.snapshot_date == snapshot_date
                )
            ).first()

    def upsert(
        self,
        snapshot_date: date,
        *,
        fund_balance: float,
        monthly_expenses: float,
        months_of_runway: float,
        notes: Optional[str] = None,
    ) -> EmergencyFundSnapshot:
        values = {
            "fund_balance": fund_balance,
            "monthly_expenses": monthly_expenses,
            "months_of_runway": months_of_runway,
        }
        try:
            return self._write(snapshot_date, values, notes)
        except IntegrityError:
            # Another writer inserted this date first; overwrite its row.
            return self._write(snapshot_date, values, notes)

    def _write(
        self, snapshot_date: date, values: dict[str, float], notes: Optional[str]
    ) -> EmergencyFundSnapshot:
        with self.session_factory() as session:
            row = session.exec(
                select(EmergencyFundSnapshot).where(
                    EmergencyFundSnapshot.snapshot_date == snapshot_date
                )
            ).first()
            if row is None:
                row = EmergencyFundSnapshot(snapshot_date=snapshot_date, notes=notes, **values)
            else:
                for name, value in values.items():
                    setattr(row, name, value)
                if notes is not None:
                    row.notes = notes
            session.add(row)
            session.commit()
            session.refresh(row)
            return row

    def list_recent(self, limit: int = 30) -> list[EmergencyFundSnapshot]:
        with self.session_factory() as session:
            statement = (
                select(EmergencyFundSnapshot)
                .order_by(EmergencyFundSnapshot.snapshot_date.desc())  # type: ignore[attr-defined]
                .limit(limit)
            )
            return list(session.exec(statement).all())

    def delete(self, snapshot_id: int) -> None:
        with self.session_factory() as session:
            row = session.get(EmergencyFundSnapshot, snapshot_id)
            if row:
                session.delete(row)
                session.commit()


__all__ = ["SQLModelSnapshotRepository"]
