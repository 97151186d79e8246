"""Value types shared by the runway engine."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from .allocation import AllocationRule

UNTAGGED = "Untagged"


class EstimatorKind(str, Enum):
    """Statistic used to reduce monthly totals to one expense figure."""

    MEAN = "mean"
    MEDIAN = "median"
    TRIMMED_MEAN = "trimmed_mean"

    @classmethod
    def parse(cls, raw: str | None) -> "EstimatorKind":
        if raw is None:
            return cls.MEAN
        try:
            return cls(raw.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown calculation method: {raw!r}") from exc


@dataclass(frozen=True, slots=True)
class FundConfiguration:
    """The installation's saved settings, passed explicitly to the engine.

    ``target_months=None`` means "derive the target from the linked goal".
    """

    linked_goal_id: Optional[int] = None
    target_months: Optional[float] = None
    target_months_is_override: bool = False
    manual_allocations: tuple[AllocationRule, ...] = ()
    expense_account_ids: frozenset[int] = frozenset()
    excluded_tags: frozenset[str] = frozenset()
    lookback_months: int = 6
    estimator: EstimatorKind = EstimatorKind.MEAN

    def __post_init__(self) -> None:
        if self.lookback_months < 1:
            raise ValueError("lookback_months must be at least 1")


@dataclass(frozen=True, slots=True)
class GoalSpec:
    """A savings goal whose allocations and target can drive the fund."""

    id: int
    name: str
    target_amount: float
    allocations: tuple[AllocationRule, ...] = ()
    icon: str = ""


@dataclass(frozen=True, slots=True)
class AccountSummary:
    """An account as offered for fund and expense selection."""

    account_id: int
    name: str
    account_type: str
    institution_name: str
    balance: float


@dataclass(frozen=True, slots=True)
class ExpenseTransaction:
    """A single transaction as seen by the expense estimator."""

    account_id: int
    transaction_date: date
    amount: float
    tags: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class ExpensePoint:
    """Outflow total for one calendar month; ``month`` is its first day."""

    month: date
    total: float


@dataclass(frozen=True, slots=True)
class ExpenseBreakdownEntry:
    tag: str
    monthly_amount: float
    percent_of_total: float


def encode_id_list(values: Iterable[int]) -> str:
    return json.dumps(sorted(int(v) for v in values))


def decode_id_list(raw: str | None) -> frozenset[int]:
    if raw is None or not raw.strip():
        return frozenset()
    payload = json.loads(raw)
    if not isinstance(payload, list):
        raise ValueError("Account id list must be a JSON array")
    return frozenset(int(v) for v in payload)


def encode_tag_list(values: Iterable[str]) -> str:
    return json.dumps(sorted(str(v) for v in values))


def decode_tag_list(raw: str | None) -> frozenset[str]:
    if raw is None or not raw.strip():
        return frozenset()
    payload = json.loads(raw)
    if not isinstance(payload, list):
        raise ValueError("Tag list must be a JSON array")
    return frozenset(str(v) for v in payload)
