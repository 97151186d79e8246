"""Pytest configuration and shared fixtures for emergency fund tests.

Provides an isolated SQLite database per test, a session factory matching the
one repositories receive in production, and row factories for ledger data.
"""

from __future__ import annotations

import json
import tempfile
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

import pytest

# Import all models to ensure they're registered with SQLModel metadata
from emergencyfund.models import (
    Account,
    AccountBalanceSnapshot,
    Goal,
    Transaction,
    TransactionTag,
)
from sqlmodel import Session, SQLModel, create_engine

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated temp-file SQLite database for each test.

    ``check_same_thread`` is disabled because the async engine runs repository
    calls in worker threads.
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory with commit-on-success semantics, as used by repositories."""

    @contextmanager
    def factory():
        session = Session(db_engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def account_factory(session_factory):
    """Factory for creating accounts with a static balance."""

    def _create_account(
        name: str = "Test Account",
        balance: float = 0.0,
        account_type: str = "depository",
        institution_name: str = "Test Bank",
    ) -> Account:
        with session_factory() as session:
            account = Account(
                name=name,
                balance=balance,
                account_type=account_type,
                institution_name=institution_name,
            )
            session.add(account)
            session.commit()
            session.refresh(account)
            return account

    return _create_account


@pytest.fixture
def balance_snapshot_factory(session_factory):
    """Factory for recording synced account balances."""

    def _create_snapshot(account_id: int, balance: float, snapshot_time: datetime) -> AccountBalanceSnapshot:
        with session_factory() as session:
            snap = AccountBalanceSnapshot(
                account_id=account_id, balance=balance, snapshot_time=snapshot_time
            )
            session.add(snap)
            session.commit()
            session.refresh(snap)
            return snap

    return _create_snapshot


@pytest.fixture
def transaction_factory(session_factory):
    """Factory for creating transactions with optional tags.

    Amounts are positive for inflows and negative for outflows.
    """

    def _create_transaction(
        account_id: int,
        amount: float,
        transaction_date: date,
        tags: tuple[str, ...] = (),
        description: str = "Test transaction",
    ) -> Transaction:
        with session_factory() as session:
            txn = Transaction(
                account_id=account_id,
                amount=amount,
                transaction_date=transaction_date,
                description=description,
            )
            session.add(txn)
            session.flush()
            for tag in tags:
                session.add(TransactionTag(transaction_id=txn.id, tag=tag))
            session.commit()
            session.refresh(txn)
            return txn

    return _create_transaction


@pytest.fixture
def goal_factory(session_factory):
    """Factory for savings goals; ``allocations`` are plain dicts serialized to JSON."""

    def _create_goal(
        name: str = "Rainy Day",
        target_amount: float = 10000.0,
        allocations: list[dict] | None = None,
        icon: str = "",
        active: bool = True,
    ) -> Goal:
        with session_factory() as session:
            goal = Goal(
                name=name,
                target_amount=target_amount,
                allocations=json.dumps(allocations or []),
                icon=icon,
                active=active,
            )
            session.add(goal)
            session.commit()
            session.refresh(goal)
            return goal

    return _create_goal


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance (default one cent)."""
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
