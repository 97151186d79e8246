"""Account and balance history tables."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .transaction import Transaction


class Account(SQLModel, table=True):
    """A financial account; ``balance`` is the static fallback balance."""

    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=128)
    account_type: str = Field(default="depository", max_length=32)
    institution_name: str = Field(default="", max_length=128)
    balance: float = Field(default=0.0, nullable=False)

    transactions: list["Transaction"] = Relationship(
        back_populates="account",
        sa_relationship=relationship("Transaction", back_populates="account"),
    )
    balance_snapshots: list["AccountBalanceSnapshot"] = Relationship(
        back_populates="account",
        sa_relationship=relationship("AccountBalanceSnapshot", back_populates="account"),
    )


class AccountBalanceSnapshot(SQLModel, table=True):
    """Point-in-time balance reported for an account (e.g. by a sync)."""

    __tablename__: ClassVar[str] = "account_balance_snapshot"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", nullable=False, index=True)
    balance: float = Field(nullable=False)
    snapshot_time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False, index=True
    )

    account: "Account" = Relationship(
        back_populates="balance_snapshots",
        sa_relationship=relationship("Account", back_populates="balance_snapshots"),
    )
