"""Read-only data source protocol."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol

from ..fund import AccountSummary, ExpenseTransaction, GoalSpec


class FundDataSource(Protocol):
    """Read-only queries over accounts, transactions and goals."""

    def account_balances(self) -> dict[int, float]:
        """Return current balance per account (latest snapshot, else static balance)."""
        ...

    def list_accounts(self) -> list[AccountSummary]:
        """List accounts with their current balances."""
        ...

    def get_goal(self, goal_id: int) -> Optional[GoalSpec]:
        """Return an active goal with decoded allocations, or ``None``."""
        ...

    def list_active_goals(self) -> list[GoalSpec]:
        """List goals that may be linked."""
        ...

    def distinct_tags(self) -> list[str]:
        """Return every tag used on any transaction, sorted."""
        ...

    def outflows(
        self, *, account_ids: Iterable[int], start: date, end: date
    ) -> list[ExpenseTransaction]:
        """Return negative-amount transactions for the accounts in ``[start, end)``."""
        ...
