"""Snapshot history: capture, list and delete runway snapshots."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..domain.repositories import SnapshotRepository
from ..errors import failures_reported_as
from ..models.snapshot import EmergencyFundSnapshot
from .runway import RunwayResult

logger = logging.getLogger(__name__)


def capture_snapshot(
    store: SnapshotRepository,
    result: RunwayResult,
    *,
    snapshot_date: Optional[date] = None,
    notes: Optional[str] = None,
) -> EmergencyFundSnapshot:
    """Persist ``result`` for the given date (today by default), overwriting that date's row."""

    when = snapshot_date or date.today()
    with failures_reported_as("save snapshot"):
        row = store.upsert(
            when,
            fund_balance=result.fund_balance,
            monthly_expenses=result.monthly_expenses,
            months_of_runway=result.months_of_runway,
            notes=notes,
        )
    logger.info(
        "Snapshot saved",
        extra={"snapshot_date": when.isoformat(), "months_of_runway": result.months_of_runway},
    )
    return row


def list_snapshots(store: SnapshotRepository, limit: int = 30) -> list[EmergencyFundSnapshot]:
    if limit < 1:
        raise ValueError("limit must be at least 1")
    with failures_reported_as("load snapshots"):
        return store.list_recent(limit)


def delete_snapshot(store: SnapshotRepository, snapshot_id: int) -> None:
    """Delete a snapshot; deleting an unknown id is a no-op."""

    with failures_reported_as("delete snapshot"):
        store.delete(snapshot_id)
