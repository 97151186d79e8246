"""Savings goals that an emergency fund can be linked to."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Goal(SQLModel, table=True):
    """A savings goal.

    ``allocations`` holds the goal's allocation list as a JSON string; see
    ``emergencyfund.domain.allocation`` for the format.
    """

    __tablename__: ClassVar[str] = "goal"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=128)
    target_amount: float = Field(default=0.0, nullable=False)
    allocations: str = Field(default="[]", nullable=False)
    icon: str = Field(default="", max_length=16)
    active: bool = Field(default=True, nullable=False, index=True)
