"""Singleton configuration row for the emergency fund."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

CONFIG_ROW_ID = "default"


class EmergencyFundConfig(SQLModel, table=True):
    """Persisted fund settings; list columns hold JSON arrays."""

    __tablename__: ClassVar[str] = "emergency_fund_config"

    id: str = Field(default=CONFIG_ROW_ID, primary_key=True, max_length=32)
    linked_goal_id: Optional[int] = Field(default=None)
    target_months: Optional[float] = Field(default=None)
    target_months_is_override: bool = Field(default=False, nullable=False)
    fund_allocations: str = Field(default="[]", nullable=False)
    expense_account_ids: str = Field(default="[]", nullable=False)
    excluded_tags: str = Field(default="[]", nullable=False)
    lookback_months: int = Field(default=6, nullable=False)
    calculation_method: str = Field(default="mean", nullable=False, max_length=16)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
