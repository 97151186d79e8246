"""Allocation rules and their persisted JSON form.

Persisted lists look like::

    [{"account_id": 3, "allocation_type": "percentage", "allocation_value": 50}]

They are decoded once at the repository boundary into ``PercentageAllocation``
or ``FixedAllocation`` values and never passed around as raw dicts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable, Union

PERCENTAGE = "percentage"
FIXED = "fixed"


@dataclass(frozen=True, slots=True)
class PercentageAllocation:
    """Count ``value`` percent (0-100, not clamped) of the account balance."""

    account_id: int
    value: float

    @property
    def kind(self) -> str:
        return PERCENTAGE


@dataclass(frozen=True, slots=True)
class FixedAllocation:
    """Count a fixed amount, capped at the account balance."""

    account_id: int
    value: float

    @property
    def kind(self) -> str:
        return FIXED


AllocationRule = Union[PercentageAllocation, FixedAllocation]


def make_allocation(account_id: int, kind: str, value: float) -> AllocationRule:
    """Build an allocation rule from its persisted kind string."""

    normalized = (kind or "").strip().lower()
    if normalized == PERCENTAGE:
        return PercentageAllocation(account_id=int(account_id), value=float(value))
    if normalized == FIXED:
        return FixedAllocation(account_id=int(account_id), value=float(value))
    raise ValueError(f"Unknown allocation_type: {kind!r}")


def decode_allocations(raw: str | None) -> list[AllocationRule]:
    """Decode a JSON allocation list; ``None`` or blank means no allocations."""

    if raw is None or not raw.strip():
        return []
    payload = json.loads(raw)
    if not isinstance(payload, list):
        raise ValueError("Allocation list must be a JSON array")

    rules: list[AllocationRule] = []
    for item in payload:
        if not isinstance(item, dict):
            raise ValueError(f"Allocation entry must be an object, got {item!r}")
        try:
            rules.append(
                make_allocation(
                    item["account_id"],
                    item["allocation_type"],
                    item.get("allocation_value", 0),
                )
            )
        except KeyError as exc:
            raise ValueError(f"Allocation entry missing {exc.args[0]!r}") from exc
    return rules


def encode_allocations(rules: Iterable[AllocationRule]) -> str:
    return json.dumps(
        [
            {
                "account_id": rule.account_id,
                "allocation_type": rule.kind,
                "allocation_value": rule.value,
            }
            for rule in rules
        ]
    )


def ensure_unique_accounts(rules: Iterable[AllocationRule]) -> list[AllocationRule]:
    """Return the rules as a list, rejecting a second rule for the same account."""

    seen: set[int] = set()
    result: list[AllocationRule] = []
    for rule in rules:
        if rule.account_id in seen:
            raise ValueError(f"Account {rule.account_id} has more than one allocation rule")
        seen.add(rule.account_id)
        result.append(rule)
    return result
