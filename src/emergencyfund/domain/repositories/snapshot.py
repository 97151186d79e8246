"""Snapshot store protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.snapshot import EmergencyFundSnapshot


class SnapshotRepository(Protocol):
    """Date-keyed store of runway snapshots."""

    def upsert(
        self,
        snapshot_date: date,
        *,
        fund_balance: float,
        monthly_expenses: float,
        months_of_runway: float,
        notes: Optional[str] = None,
    ) -> EmergencyFundSnapshot:
        """Insert a snapshot or overwrite the numbers of the row for that date."""
        ...

    def list_recent(self, limit: int = 30) -> list[EmergencyFundSnapshot]:
        """List snapshots, most recent date first."""
        ...

    def delete(self, snapshot_id: int) -> None:
        """Delete a snapshot; unknown ids are ignored."""
        ...
