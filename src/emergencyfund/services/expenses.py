"""Monthly expense baseline and tag breakdown.

Percentiles use linear interpolation between closest ranks: for sorted values
``v[0..n-1]`` the p-th percentile sits at rank ``(n - 1) * p / 100``, blending
the two neighbouring values by the fractional part. The median is the 50th
percentile under that rule; the trimmed mean keeps monthly totals inside the
inclusive [10th, 90th] percentile band computed over the full set.
"""

from __future__ import annotations

import calendar
import math
from collections import defaultdict
from datetime import date
from typing import AbstractSet, Iterable, Optional, Sequence

from ..domain.fund import (
    UNTAGGED,
    EstimatorKind,
    ExpenseBreakdownEntry,
    ExpensePoint,
    ExpenseTransaction,
)

TRIM_LOWER_PERCENTILE = 10.0
TRIM_UPPER_PERCENTILE = 90.0


def lookback_start(as_of: date, lookback_months: int) -> date:
    """Return ``as_of`` moved back by whole calendar months.

    The day is clamped to the target month's length (Mar 31 - 1 month = Feb 28/29).
    """

    if lookback_months < 0:
        raise ValueError("lookback_months must not be negative")
    month_index = as_of.year * 12 + (as_of.month - 1) - lookback_months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(as_of.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def percentile(values: Sequence[float], pct: float) -> float:
    """Continuous percentile with linear interpolation between ranks."""

    if not values:
        raise ValueError("percentile of empty data")
    if not 0.0 <= pct <= 100.0:
        raise ValueError(f"percentile must be within [0, 100], got {pct}")
    ordered = sorted(values)
    rank = (len(ordered) - 1) * pct / 100.0
    lower = math.floor(rank)
    upper = math.ceil(rank)
    if lower == upper:
        return float(ordered[lower])
    fraction = rank - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def trimmed_mean(values: Sequence[float]) -> float:
    """Mean of the values inside the [10th, 90th] percentile band of the same set."""

    if not values:
        return 0.0
    low = percentile(values, TRIM_LOWER_PERCENTILE)
    high = percentile(values, TRIM_UPPER_PERCENTILE)
    kept = [v for v in values if low <= v <= high]
    if not kept:
        # Only two distinct values can leave the band empty; average both.
        kept = list(values)
    return math.fsum(kept) / len(kept)


def reduce_totals(totals: Sequence[float], estimator: EstimatorKind) -> float:
    """Collapse monthly totals into one figure; no data means zero."""

    if not totals:
        return 0.0
    if estimator is EstimatorKind.MEAN:
        return math.fsum(totals) / len(totals)
    if estimator is EstimatorKind.MEDIAN:
        return percentile(totals, 50.0)
    if estimator is EstimatorKind.TRIMMED_MEAN:
        return trimmed_mean(totals)
    raise ValueError(f"Unsupported estimator: {estimator!r}")


def filter_outflows(
    transactions: Iterable[ExpenseTransaction],
    *,
    account_filter: AbstractSet[int],
    excluded_tags: AbstractSet[str],
    start: date,
    end: date,
) -> list[ExpenseTransaction]:
    """Keep outflows from the chosen accounts within ``[start, end)``.

    A transaction carrying any excluded tag is dropped entirely.
    """

    return [
        txn
        for txn in transactions
        if txn.amount < 0
        and txn.account_id in account_filter
        and start <= txn.transaction_date < end
        and not (txn.tags & excluded_tags)
    ]


def monthly_totals(transactions: Iterable[ExpenseTransaction]) -> list[ExpensePoint]:
    """Sum absolute outflows per calendar month; months without data are absent."""

    buckets: dict[date, list[float]] = defaultdict(list)
    for txn in transactions:
        buckets[txn.transaction_date.replace(day=1)].append(abs(txn.amount))
    return [ExpensePoint(month=month, total=math.fsum(amounts)) for month, amounts in sorted(buckets.items())]


def expense_points(
    transactions: Iterable[ExpenseTransaction],
    *,
    account_filter: AbstractSet[int],
    excluded_tags: AbstractSet[str],
    lookback_months: int,
    as_of: Optional[date] = None,
) -> list[ExpensePoint]:
    """Monthly outflow totals for the lookback window ending (exclusive) at ``as_of``."""

    if not account_filter:
        return []
    end = as_of or date.today()
    matching = filter_outflows(
        transactions,
        account_filter=account_filter,
        excluded_tags=excluded_tags,
        start=lookback_start(end, lookback_months),
        end=end,
    )
    return monthly_totals(matching)


def estimate_monthly_expenses(
    transactions: Iterable[ExpenseTransaction],
    *,
    account_filter: AbstractSet[int],
    excluded_tags: AbstractSet[str],
    lookback_months: int,
    estimator: EstimatorKind = EstimatorKind.MEAN,
    as_of: Optional[date] = None,
) -> float:
    """Representative monthly expense over the lookback window."""

    points = expense_points(
        transactions,
        account_filter=account_filter,
        excluded_tags=excluded_tags,
        lookback_months=lookback_months,
        as_of=as_of,
    )
    return reduce_totals([point.total for point in points], estimator)


def expense_breakdown(
    transactions: Iterable[ExpenseTransaction],
    *,
    account_filter: AbstractSet[int],
    excluded_tags: AbstractSet[str],
    lookback_months: int,
    as_of: Optional[date] = None,
) -> list[ExpenseBreakdownEntry]:
    """Per-tag monthly averages over the window, largest first.

    A transaction with several tags counts in full toward each of them, while
    the percentage denominator counts it once, so percentages can exceed 100
    in total. Untagged outflows are reported under ``"Untagged"``.
    """

    if not account_filter:
        return []
    end = as_of or date.today()
    matching = filter_outflows(
        transactions,
        account_filter=account_filter,
        excluded_tags=excluded_tags,
        start=lookback_start(end, lookback_months),
        end=end,
    )

    per_tag: dict[str, list[float]] = defaultdict(list)
    for txn in matching:
        amount = abs(txn.amount)
        for tag in txn.tags or (UNTAGGED,):
            per_tag[tag].append(amount)

    grand_total = math.fsum(abs(txn.amount) for txn in matching)
    entries = []
    for tag, amounts in per_tag.items():
        tag_total = math.fsum(amounts)
        entries.append(
            ExpenseBreakdownEntry(
                tag=tag,
                monthly_amount=tag_total / lookback_months,
                percent_of_total=(tag_total / grand_total * 100.0) if grand_total > 0 else 0.0,
            )
        )
    entries.sort(key=lambda entry: (-entry.monthly_amount, entry.tag))
    return entries
