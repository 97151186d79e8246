"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .account import Account


class Transaction(SQLModel, table=True):
    """A single ledger transaction."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", nullable=False, index=True)
    transaction_date: date = Field(nullable=False, index=True)
    amount: float = Field(nullable=False, description="Positive for inflow, negative for outflow")
    description: str = Field(default="", max_length=255)

    account: "Account" = Relationship(
        back_populates="transactions",
        sa_relationship=relationship("Account", back_populates="transactions"),
    )
    tag_links: list["TransactionTag"] = Relationship(
        sa_relationship=relationship("TransactionTag", cascade="all, delete-orphan"),
    )


class TransactionTag(SQLModel, table=True):
    """Association rows giving a transaction any number of free-text tags."""

    __tablename__: ClassVar[str] = "transaction_tag"

    transaction_id: int = Field(foreign_key="transaction.id", primary_key=True)
    tag: str = Field(primary_key=True, max_length=64)
