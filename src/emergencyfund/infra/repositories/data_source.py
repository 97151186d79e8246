"""SQLModel implementation of the read-only fund data source."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Callable, Iterable, Optional

from sqlmodel import Session, select

from ...domain.allocation import decode_allocations
from ...domain.fund import AccountSummary, ExpenseTransaction, GoalSpec
from ...models.account import Account, AccountBalanceSnapshot
from ...models.goal import Goal
from ...models.transaction import Transaction, TransactionTag


def _goal_spec(goal: Goal) -> GoalSpec:
    return GoalSpec(
        id=goal.id,
        name=goal.name,
        target_amount=float(goal.target_amount or 0.0),
        allocations=tuple(decode_allocations(goal.allocations)),
        icon=goal.icon or "",
    )


class SQLModelFundDataSource:
    """Answers the engine's read queries from the ledger tables."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def _latest_snapshot_balances(self, session: Session) -> dict[int, float]:
        statement = select(AccountBalanceSnapshot).order_by(
            AccountBalanceSnapshot.account_id,  # type: ignore[arg-type]
            AccountBalanceSnapshot.snapshot_time,  # type: ignore[arg-type]
            AccountBalanceSnapshot.id,  # type: ignore[arg-type]
        )
        latest: dict[int, float] = {}
        # Rows arrive oldest first per account, so the last one written wins.
        for snap in session.exec(statement):
            latest[snap.account_id] = float(snap.balance)
        return latest

    def account_balances(self) -> dict[int, float]:
        with self.session_factory() as session:
            balances = {
                account.id: float(account.balance or 0.0)
                for account in session.exec(select(Account))
            }
            balances.update(self._latest_snapshot_balances(session))
            return balances

    def list_accounts(self) -> list[AccountSummary]:
        with self.session_factory() as session:
            latest = self._latest_snapshot_balances(session)
            accounts = session.exec(select(Account).order_by(Account.name)).all()  # type: ignore[arg-type]
            return [
                AccountSummary(
                    account_id=account.id,
                    name=account.name,
                    account_type=account.account_type,
                    institution_name=account.institution_name,
                    balance=latest.get(account.id, float(account.balance or 0.0)),
                )
                for account in accounts
            ]

    def get_goal(self, goal_id: int) -> Optional[GoalSpec]:
        with self.session_factory() as session:
            goal = session.get(Goal, goal_id)
            if goal is None or not goal.active:
                return None
            return _goal_spec(goal)

    def list_active_goals(self) -> list[GoalSpec]:
        with self.session_factory() as session:
            statement = select(Goal).where(Goal.active == True).order_by(Goal.name)  # noqa: E712
            return [_goal_spec(goal) for goal in session.exec(statement)]

    def distinct_tags(self) -> list[str]:
        with self.session_factory() as session:
            statement = select(TransactionTag.tag).distinct().order_by(TransactionTag.tag)
            return list(session.exec(statement).all())

    def outflows(
        self, *, account_ids: Iterable[int], start: date, end: date
    ) -> list[ExpenseTransaction]:
        ids = list(account_ids)
        if not ids:
            return []
        with self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(Transaction.account_id.in_(ids))  # type: ignore[union-attr]
                .where(Transaction.amount < 0)
                .where(Transaction.transaction_date >= start)
                .where(Transaction.transaction_date < end)
                .order_by(Transaction.transaction_date)  # type: ignore[arg-type]
            )
            transactions = list(session.exec(statement).all())
            if not transactions:
                return []

            tags_by_txn: dict[int, set[str]] = defaultdict(set)
            tag_rows = session.exec(
                select(TransactionTag).where(
                    TransactionTag.transaction_id.in_([t.id for t in transactions])  # type: ignore[attr-defined]
                )
            )
            for link in tag_rows:
                tags_by_txn[link.transaction_id].add(link.tag)

            return [
                ExpenseTransaction(
                    account_id=txn.account_id,
                    transaction_date=txn.transaction_date,
                    amount=float(txn.amount),
                    tags=frozenset(tags_by_txn.get(txn.id, ())),
                )
                for txn in transactions
            ]


__all__ = ["SQLModelFundDataSource"]
