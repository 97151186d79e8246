"""Unit tests for the SQLModel repository implementations."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone

import pytest
from sqlmodel import select

from emergencyfund.domain.allocation import FixedAllocation, PercentageAllocation
from emergencyfund.domain.fund import EstimatorKind, FundConfiguration
from emergencyfund.infra.repositories import (
    SQLModelFundConfigRepository,
    SQLModelFundDataSource,
    SQLModelSnapshotRepository,
)
from emergencyfund.models import AccountBalanceSnapshot, EmergencyFundConfig, EmergencyFundSnapshot


# ---------------------------------------------------------------------------
# data source
# ---------------------------------------------------------------------------


def test_balances_prefer_latest_snapshot(session_factory, account_factory, balance_snapshot_factory):
    savings = account_factory(name="Savings", balance=1000.0)
    checking = account_factory(name="Checking", balance=500.0)
    balance_snapshot_factory(savings.id, 1800.0, datetime(2025, 3, 2, 9, 0, tzinfo=timezone.utc))
    balance_snapshot_factory(savings.id, 1500.0, datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))

    balances = SQLModelFundDataSource(session_factory).account_balances()

    assert balances == {savings.id: 1800.0, checking.id: 500.0}


def test_list_accounts_reports_current_balance(session_factory, account_factory, balance_snapshot_factory):
    savings = account_factory(name="Savings", balance=1000.0, institution_name="Credit Union")
    account_factory(name="Checking", balance=250.0, account_type="checking")
    balance_snapshot_factory(savings.id, 1200.0, datetime(2025, 3, 1, tzinfo=timezone.utc))

    accounts = SQLModelFundDataSource(session_factory).list_accounts()

    assert [a.name for a in accounts] == ["Checking", "Savings"]
    assert accounts[0].account_type == "checking"
    assert accounts[1].balance == 1200.0
    assert accounts[1].institution_name == "Credit Union"


def test_outflows_filters_by_account_sign_and_window(session_factory, account_factory, transaction_factory):
    checking = account_factory(name="Checking")
    other = account_factory(name="Other")
    transaction_factory(checking.id, -40.0, date(2025, 2, 1), tags=("groceries", "household"))
    transaction_factory(checking.id, -60.0, date(2025, 2, 15))
    transaction_factory(checking.id, 900.0, date(2025, 2, 16))
    transaction_factory(checking.id, -10.0, date(2025, 3, 1))  # end is exclusive
    transaction_factory(checking.id, -10.0, date(2025, 1, 31))
    transaction_factory(other.id, -70.0, date(2025, 2, 10))

    outflows = SQLModelFundDataSource(session_factory).outflows(
        account_ids=[checking.id], start=date(2025, 2, 1), end=date(2025, 3, 1)
    )

    assert [(t.amount, t.transaction_date) for t in outflows] == [
        (-40.0, date(2025, 2, 1)),
        (-60.0, date(2025, 2, 15)),
    ]
    assert outflows[0].tags == frozenset({"groceries", "household"})
    assert outflows[1].tags == frozenset()


def test_outflows_without_accounts_is_empty(session_factory):
    source = SQLModelFundDataSource(session_factory)
    assert source.outflows(account_ids=[], start=date(2025, 1, 1), end=date(2025, 2, 1)) == []


def test_distinct_tags_sorted(session_factory, account_factory, transaction_factory):
    checking = account_factory()
    transaction_factory(checking.id, -1.0, date(2025, 1, 1), tags=("rent", "bills"))
    transaction_factory(checking.id, -1.0, date(2025, 1, 2), tags=("bills",))

    assert SQLModelFundDataSource(session_factory).distinct_tags() == ["bills", "rent"]


def test_goal_lookup_decodes_allocations(session_factory, goal_factory):
    goal = goal_factory(
        name="Safety Net",
        target_amount=24000.0,
        allocations=[
            {"account_id": 1, "allocation_type": "percentage", "allocation_value": 50},
            {"account_id": 2, "allocation_type": "fixed", "allocation_value": 3000},
        ],
        icon="S",
    )
    retired = goal_factory(name="Old", active=False)
    source = SQLModelFundDataSource(session_factory)

    spec = source.get_goal(goal.id)
    assert spec is not None
    assert spec.target_amount == 24000.0
    assert spec.allocations == (PercentageAllocation(1, 50.0), FixedAllocation(2, 3000.0))
    assert source.get_goal(retired.id) is None
    assert source.get_goal(9999) is None
    assert [g.name for g in source.list_active_goals()] == ["Safety Net"]


def test_goal_with_malformed_allocations_raises(session_factory):
    from emergencyfund.models import Goal

    with session_factory() as session:
        goal = Goal(name="Broken", target_amount=1.0, allocations="{oops")
        session.add(goal)
        session.commit()
        session.refresh(goal)

    with pytest.raises(ValueError):
        SQLModelFundDataSource(session_factory).get_goal(goal.id)


# ---------------------------------------------------------------------------
# configuration
# ---------------------------------------------------------------------------


def test_config_defaults_when_nothing_saved(session_factory):
    config = SQLModelFundConfigRepository(session_factory, default_lookback_months=12).load()
    assert config == FundConfiguration(lookback_months=12)


def test_config_save_and_load(session_factory):
    repo = SQLModelFundConfigRepository(session_factory)
    config = FundConfiguration(
        linked_goal_id=3,
        target_months=4.5,
        target_months_is_override=True,
        manual_allocations=(PercentageAllocation(1, 40.0), FixedAllocation(2, 1500.0)),
        expense_account_ids=frozenset({5, 2}),
        excluded_tags=frozenset({"transfer", "reimbursable"}),
        lookback_months=9,
        estimator=EstimatorKind.TRIMMED_MEAN,
    )

    assert repo.save(config) == config
    assert repo.load() == config

    with session_factory() as session:
        row = session.exec(select(EmergencyFundConfig)).one()
        assert row.calculation_method == "trimmed_mean"
        assert row.expense_account_ids == "[2, 5]"


def test_config_save_keeps_single_row(session_factory):
    repo = SQLModelFundConfigRepository(session_factory)
    repo.save(FundConfiguration(target_months=3))
    repo.save(FundConfiguration(target_months=None, linked_goal_id=1))

    with session_factory() as session:
        rows = session.exec(select(EmergencyFundConfig)).all()
    assert len(rows) == 1
    assert rows[0].target_months is None
    assert rows[0].updated_at >= rows[0].created_at


def test_config_rejects_duplicate_allocation_accounts(session_factory):
    repo = SQLModelFundConfigRepository(session_factory)
    config = FundConfiguration(
        manual_allocations=(FixedAllocation(1, 10.0), PercentageAllocation(1, 20.0))
    )
    with pytest.raises(ValueError):
        repo.save(config)


# ---------------------------------------------------------------------------
# snapshots
# ---------------------------------------------------------------------------


def test_snapshot_upsert_same_date_overwrites(session_factory):
    repo = SQLModelSnapshotRepository(session_factory)
    first = repo.upsert(
        date(2025, 4, 1), fund_balance=5000.0, monthly_expenses=1000.0, months_of_runway=5.0, notes="start"
    )
    second = repo.upsert(
        date(2025, 4, 1), fund_balance=6000.0, monthly_expenses=1000.0, months_of_runway=6.0
    )

    assert second.snapshot_id == first.snapshot_id
    assert second.created_at == first.created_at
    assert second.fund_balance == 6000.0
    assert second.months_of_runway == 6.0
    assert second.notes == "start"

    with session_factory() as session:
        rows = session.exec(select(EmergencyFundSnapshot)).all()
    assert len(rows) == 1


def test_snapshot_notes_replaced_when_given(session_factory):
    repo = SQLModelSnapshotRepository(session_factory)
    repo.upsert(date(2025, 4, 1), fund_balance=1.0, monthly_expenses=1.0, months_of_runway=1.0, notes="a")
    row = repo.upsert(date(2025, 4, 1), fund_balance=1.0, monthly_expenses=1.0, months_of_runway=1.0, notes="b")
    assert row.notes == "b"


def test_snapshot_list_most_recent_first(session_factory):
    repo = SQLModelSnapshotRepository(session_factory)
    for day in (3, 1, 2):
        repo.upsert(date(2025, 4, day), fund_balance=day, monthly_expenses=1.0, months_of_runway=day)

    assert [s.snapshot_date.day for s in repo.list_recent()] == [3, 2, 1]
    assert [s.snapshot_date.day for s in repo.list_recent(limit=2)] == [3, 2]
    assert repo.get_by_date(date(2025, 4, 2)).fund_balance == 2


def test_snapshot_delete_is_idempotent(session_factory):
    repo = SQLModelSnapshotRepository(session_factory)
    row = repo.upsert(date(2025, 4, 1), fund_balance=1.0, monthly_expenses=1.0, months_of_runway=1.0)

    repo.delete(row.snapshot_id)
    repo.delete(row.snapshot_id)
    repo.delete(424242)

    assert repo.list_recent() == []


def test_concurrent_same_date_upserts_all_succeed(session_factory):
    repo = SQLModelSnapshotRepository(session_factory)
    day = date(2025, 4, 1)
    writers = 8
    barrier = threading.Barrier(writers)

    def capture(balance):
        barrier.wait()
        return repo.upsert(day, fund_balance=balance, monthly_expenses=1000.0, months_of_runway=balance / 1000)

    with ThreadPoolExecutor(max_workers=writers) as pool:
        rows = list(pool.map(capture, [1000.0 * (i + 1) for i in range(writers)]))

    assert len({row.snapshot_id for row in rows}) == 1
    stored = repo.list_recent()
    assert len(stored) == 1
    assert stored[0].fund_balance in {row.fund_balance for row in rows}


def test_timestamps_default_to_utc():
    snapshot = EmergencyFundSnapshot(
        snapshot_date=date(2025, 4, 1), fund_balance=1.0, monthly_expenses=1.0, months_of_runway=1.0
    )
    config_row = EmergencyFundConfig()
    balance = AccountBalanceSnapshot(account_id=1, balance=1.0)

    for stamp in (snapshot.created_at, config_row.created_at, config_row.updated_at, balance.snapshot_time):
        assert stamp.tzinfo is not None
        assert stamp.utcoffset().total_seconds() == 0


def test_config_and_snapshot_writes_persist_timestamps(session_factory):
    SQLModelFundConfigRepository(session_factory).save(FundConfiguration(target_months=3))
    SQLModelSnapshotRepository(session_factory).upsert(
        date(2025, 4, 1), fund_balance=1.0, monthly_expenses=1.0, months_of_runway=1.0
    )

    with session_factory() as session:
        assert session.exec(select(EmergencyFundConfig)).one().updated_at is not None
        assert session.exec(select(EmergencyFundSnapshot)).one().created_at is not None
