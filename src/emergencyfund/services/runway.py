"""Runway metrics and status classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

CRITICAL_BELOW_PERCENT = 50.0
WARNING_BELOW_PERCENT = 80.0


class RunwayStatus(str, Enum):
    ON_TRACK = "on-track"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def needs_attention(self) -> bool:
        return self is not RunwayStatus.ON_TRACK


@dataclass(frozen=True, slots=True)
class RunwayResult:
    """One evaluation of the fund against its target."""

    fund_balance: float
    monthly_expenses: float
    months_of_runway: float
    target_months: float
    target_amount: float
    progress_percent: float
    remaining_to_target: float
    status: RunwayStatus

    @property
    def runway_percent(self) -> float:
        return runway_percent(self.months_of_runway, self.target_months)


def runway_percent(months_of_runway: float, target_months: float) -> float:
    if target_months <= 0:
        return 0.0
    return 100.0 * months_of_runway / target_months


def classify_status(percent_of_target: float) -> RunwayStatus:
    """Map runway as a percentage of target months onto a status."""

    if percent_of_target < CRITICAL_BELOW_PERCENT:
        return RunwayStatus.CRITICAL
    if percent_of_target < WARNING_BELOW_PERCENT:
        return RunwayStatus.WARNING
    return RunwayStatus.ON_TRACK


def evaluate_runway(
    fund_balance: float,
    monthly_expenses: float,
    target_months: float,
    target_amount: float,
) -> RunwayResult:
    """Compose the runway result; zero divisors yield zero, never inf/NaN."""

    months = fund_balance / monthly_expenses if monthly_expenses > 0 else 0.0
    progress = 100.0 * fund_balance / target_amount if target_amount > 0 else 0.0
    return RunwayResult(
        fund_balance=fund_balance,
        monthly_expenses=monthly_expenses,
        months_of_runway=months,
        target_months=target_months,
        target_amount=target_amount,
        progress_percent=progress,
        remaining_to_target=max(0.0, target_amount - fund_balance),
        status=classify_status(runway_percent(months, target_months)),
    )
