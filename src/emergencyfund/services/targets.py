"""Target resolution: explicit months, or derived from a linked goal."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..domain.fund import FundConfiguration, GoalSpec

DEFAULT_TARGET_MONTHS = 6.0


@dataclass(frozen=True, slots=True)
class TargetResolution:
    """Effective target in months and dollars.

    ``auto_target_months`` is the goal-derived figure, present only when a
    goal is linked and expenses are non-zero, even if an override wins.
    """

    target_months: float
    target_amount: float
    auto_target_months: Optional[float] = None


def resolve_target(
    config: FundConfiguration,
    goal: Optional[GoalSpec],
    monthly_expenses: float,
    *,
    default_target_months: float = DEFAULT_TARGET_MONTHS,
) -> TargetResolution:
    """Pick the effective target; the dollar target always follows from months."""

    explicit = config.target_months
    fallback = explicit if explicit is not None else default_target_months

    if goal is None or monthly_expenses <= 0:
        return TargetResolution(
            target_months=fallback,
            target_amount=fallback * monthly_expenses,
        )

    auto_months = goal.target_amount / monthly_expenses
    # Any saved month count wins over the goal; the override flag only records
    # that the user typed it while a goal was linked.
    target_months = auto_months if explicit is None else explicit
    return TargetResolution(
        target_months=target_months,
        target_amount=target_months * monthly_expenses,
        auto_target_months=auto_months,
    )
