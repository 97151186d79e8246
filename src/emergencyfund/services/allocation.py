"""Fund balance from per-account allocation rules."""

from __future__ import annotations

import math
from typing import Iterable, Mapping

from ..domain.allocation import AllocationRule, FixedAllocation, PercentageAllocation


def rule_contribution(rule: AllocationRule, balance: float) -> float:
    """Return how much of ``balance`` one rule counts toward the fund."""

    if isinstance(rule, PercentageAllocation):
        return balance * rule.value / 100.0
    if isinstance(rule, FixedAllocation):
        # A fixed claim never exceeds what the account holds.
        return min(rule.value, balance)
    raise TypeError(f"Unsupported allocation rule: {rule!r}")


def resolve_fund_balance(
    rules: Iterable[AllocationRule], balances: Mapping[int, float]
) -> float:
    """Sum rule contributions; unknown accounts contribute a zero balance."""

    return math.fsum(
        (rule_contribution(rule, float(balances.get(rule.account_id, 0.0))) for rule in rules),
    )
