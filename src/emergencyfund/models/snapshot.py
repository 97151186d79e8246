"""Date-keyed history of runway evaluations."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class EmergencyFundSnapshot(SQLModel, table=True):
    """One captured runway evaluation; at most one row per calendar date."""

    __tablename__: ClassVar[str] = "emergency_fund_snapshot"

    snapshot_id: Optional[int] = Field(default=None, primary_key=True)
    snapshot_date: date = Field(nullable=False, unique=True, index=True)
    fund_balance: float = Field(nullable=False)
    monthly_expenses: float = Field(nullable=False)
    months_of_runway: float = Field(nullable=False)
    notes: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
