"""Domain value types for the runway engine."""

from .allocation import (
    AllocationRule,
    FixedAllocation,
    PercentageAllocation,
    decode_allocations,
    encode_allocations,
)
from .fund import (
    UNTAGGED,
    AccountSummary,
    EstimatorKind,
    ExpenseBreakdownEntry,
    ExpensePoint,
    ExpenseTransaction,
    FundConfiguration,
    GoalSpec,
)

__all__ = [
    "AllocationRule",
    "FixedAllocation",
    "PercentageAllocation",
    "decode_allocations",
    "encode_allocations",
    "UNTAGGED",
    "AccountSummary",
    "EstimatorKind",
    "ExpenseBreakdownEntry",
    "ExpensePoint",
    "ExpenseTransaction",
    "FundConfiguration",
    "GoalSpec",
]
