"""Async orchestration of a runway evaluation.

Balances, the linked goal and outflow transactions are fetched concurrently
(repository calls run in worker threads); target resolution waits on the
expense estimate and the evaluator waits on everything. Nothing is written
during an evaluation, so a caller may cancel at any await point.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Optional, TypeVar

from ..domain.fund import (
    AccountSummary,
    ExpenseBreakdownEntry,
    ExpensePoint,
    ExpenseTransaction,
    FundConfiguration,
    GoalSpec,
)
from ..domain.repositories import FundConfigRepository, FundDataSource, SnapshotRepository
from ..errors import failures_reported_as
from ..models.snapshot import EmergencyFundSnapshot
from . import snapshots as snapshot_service
from .alerts import StatusAlerter
from .allocation import resolve_fund_balance
from .expenses import expense_breakdown, expense_points, lookback_start, reduce_totals
from .runway import RunwayResult, evaluate_runway
from .targets import DEFAULT_TARGET_MONTHS, resolve_target

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RunwayReport:
    """Everything one evaluation produced, for display or snapshotting."""

    result: RunwayResult
    configuration: FundConfiguration
    goal: Optional[GoalSpec] = None
    auto_target_months: Optional[float] = None
    expense_points: tuple[ExpensePoint, ...] = field(default_factory=tuple)
    as_of: Optional[date] = None


class RunwayEngine:
    """Computes runway from a data source and persists config/snapshots."""

    def __init__(
        self,
        data_source: FundDataSource,
        config_repository: FundConfigRepository,
        snapshot_repository: SnapshotRepository,
        *,
        alerter: Optional[StatusAlerter] = None,
        default_target_months: float = DEFAULT_TARGET_MONTHS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.data_source = data_source
        self.config_repository = config_repository
        self.snapshot_repository = snapshot_repository
        self.alerter = alerter
        self.default_target_months = default_target_months
        self._today = today

    async def _call(self, action: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with failures_reported_as(action):
            return await asyncio.to_thread(fn, *args, **kwargs)

    async def _no_result(self) -> None:
        return None

    async def _outflows(self, config: FundConfiguration, end: date) -> list[ExpenseTransaction]:
        if not config.expense_account_ids:
            return []
        return await self._call(
            "load transactions",
            self.data_source.outflows,
            account_ids=sorted(config.expense_account_ids),
            start=lookback_start(end, config.lookback_months),
            end=end,
        )

    # -- configuration -----------------------------------------------------

    async def load_configuration(self) -> FundConfiguration:
        return await self._call("load configuration", self.config_repository.load)

    async def save_configuration(self, config: FundConfiguration) -> FundConfiguration:
        saved = await self._call("save configuration", self.config_repository.save, config)
        logger.info(
            "Configuration saved",
            extra={"linked_goal_id": saved.linked_goal_id, "estimator": saved.estimator.value},
        )
        return saved

    # -- evaluation --------------------------------------------------------

    async def evaluate(
        self, config: Optional[FundConfiguration] = None, *, as_of: Optional[date] = None
    ) -> RunwayReport:
        """Compute the current runway report without side effects."""

        if config is None:
            config = await self.load_configuration()
        end = as_of or self._today()

        goal_lookup = (
            self._call("load goal", self.data_source.get_goal, config.linked_goal_id)
            if config.linked_goal_id is not None
            else self._no_result()
        )
        balances, goal, outflows = await asyncio.gather(
            self._call("load balances", self.data_source.account_balances),
            goal_lookup,
            self._outflows(config, end),
        )

        if config.linked_goal_id is not None and goal is None:
            logger.warning(
                "Linked goal not found or inactive; using manual allocations",
                extra={"linked_goal_id": config.linked_goal_id},
            )
        rules = goal.allocations if goal is not None else config.manual_allocations
        fund_balance = resolve_fund_balance(rules, balances)

        points = expense_points(
            outflows,
            account_filter=config.expense_account_ids,
            excluded_tags=config.excluded_tags,
            lookback_months=config.lookback_months,
            as_of=end,
        )
        monthly_expenses = reduce_totals([p.total for p in points], config.estimator)

        target = resolve_target(
            config,
            goal,
            monthly_expenses,
            default_target_months=self.default_target_months,
        )
        result = evaluate_runway(
            fund_balance, monthly_expenses, target.target_months, target.target_amount
        )
        logger.info(
            "Runway evaluated",
            extra={
                "fund_balance": result.fund_balance,
                "monthly_expenses": result.monthly_expenses,
                "months_of_runway": result.months_of_runway,
                "status": result.status.value,
            },
        )
        return RunwayReport(
            result=result,
            configuration=config,
            goal=goal,
            auto_target_months=target.auto_target_months,
            expense_points=tuple(points),
            as_of=end,
        )

    async def refresh(
        self, config: Optional[FundConfiguration] = None, *, as_of: Optional[date] = None
    ) -> RunwayReport:
        """Evaluate and pass the result through the alert policy."""

        report = await self.evaluate(config, as_of=as_of)
        if self.alerter is not None:
            self.alerter.observe(report.result)
        return report

    async def breakdown(
        self, config: Optional[FundConfiguration] = None, *, as_of: Optional[date] = None
    ) -> list[ExpenseBreakdownEntry]:
        if config is None:
            config = await self.load_configuration()
        end = as_of or self._today()
        outflows = await self._outflows(config, end)
        return expense_breakdown(
            outflows,
            account_filter=config.expense_account_ids,
            excluded_tags=config.excluded_tags,
            lookback_months=config.lookback_months,
            as_of=end,
        )

    # -- snapshots ---------------------------------------------------------

    async def capture_snapshot(
        self,
        report: Optional[RunwayReport] = None,
        *,
        notes: Optional[str] = None,
        snapshot_date: Optional[date] = None,
    ) -> EmergencyFundSnapshot:
        """Save the given (or a freshly computed) report under its date."""

        if report is None:
            report = await self.evaluate()
        when = snapshot_date or report.as_of or self._today()
        return await asyncio.to_thread(
            snapshot_service.capture_snapshot,
            self.snapshot_repository,
            report.result,
            snapshot_date=when,
            notes=notes,
        )

    async def list_snapshots(self, limit: int = 30) -> list[EmergencyFundSnapshot]:
        return await asyncio.to_thread(
            snapshot_service.list_snapshots, self.snapshot_repository, limit
        )

    async def delete_snapshot(self, snapshot_id: int) -> None:
        await asyncio.to_thread(
            snapshot_service.delete_snapshot, self.snapshot_repository, snapshot_id
        )

    # -- selection lists ---------------------------------------------------

    async def list_accounts(self) -> list[AccountSummary]:
        return await self._call("load accounts", self.data_source.list_accounts)

    async def list_tags(self) -> list[str]:
        return await self._call("load tags", self.data_source.distinct_tags)

    async def list_goals(self) -> list[GoalSpec]:
        return await self._call("load goals", self.data_source.list_active_goals)
