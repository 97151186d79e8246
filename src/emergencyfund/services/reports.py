"""Chart rendering for the expense breakdown and snapshot history."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from ..domain.fund import ExpenseBreakdownEntry  # noqa: E402
from ..models.snapshot import EmergencyFundSnapshot  # noqa: E402

MAX_LEGEND_ITEMS = 10


def build_breakdown_chart(entries: Sequence[ExpenseBreakdownEntry]) -> Figure:
    """Donut chart of monthly spending per tag.

    Wedges are sized by monthly amount; the legend shows each tag's share of
    total outflows, which may add up to more than 100% for multi-tag spending.
    """

    fig, ax = plt.subplots(figsize=(10, 7))
    if not entries:
        ax.text(0.5, 0.5, "No expense data", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")
        fig.tight_layout()
        return fig

    sizes = [entry.monthly_amount for entry in entries]
    cmap = plt.get_cmap("tab20c")
    colors = [cmap(i / max(len(sizes), 1)) for i in range(len(sizes))]
    wedges, _ = ax.pie(
        sizes,
        labels=None,
        wedgeprops=dict(width=0.45, edgecolor="white", linewidth=1.5),
        startangle=90,
        colors=colors,
    )

    shown = entries[:MAX_LEGEND_ITEMS]
    legend_labels = [
        f"{entry.tag}: ${entry.monthly_amount:,.0f}/mo ({entry.percent_of_total:.1f}%)"
        for entry in shown
    ]
    ax.legend(
        wedges[: len(shown)],
        legend_labels,
        title="Tags",
        loc="center left",
        bbox_to_anchor=(1.02, 0.5),
        fontsize=9,
    )
    ax.text(0, 0, f"${sum(sizes):,.0f}/mo", ha="center", va="center", fontsize=16, fontweight="bold")
    ax.axis("equal")
    ax.set_title("Expense Breakdown", fontsize=16, fontweight="bold", pad=20)
    fig.tight_layout()
    return fig


def build_history_chart(
    snapshots: Iterable[EmergencyFundSnapshot], *, target_months: Optional[float] = None
) -> Figure:
    """Line chart of months of runway across snapshots, oldest to newest."""

    ordered = sorted(snapshots, key=lambda snap: snap.snapshot_date)
    fig, ax = plt.subplots(figsize=(10, 5))
    if not ordered:
        ax.text(0.5, 0.5, "No snapshots yet", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")
        fig.tight_layout()
        return fig

    dates = [snap.snapshot_date for snap in ordered]
    months = [snap.months_of_runway for snap in ordered]
    ax.plot(dates, months, marker="o", color="#2563EB", label="Months of runway")
    if target_months is not None and target_months > 0:
        ax.axhline(target_months, color="#16A34A", linestyle="--", label="Target")
    ax.set_ylabel("Months")
    ax.set_title("Runway History", fontsize=16, fontweight="bold")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    fig.autofmt_xdate()
    fig.tight_layout()
    return fig


def save_figure(fig: Figure, output_path: Path) -> Path:
    """Write ``fig`` as PNG and close it."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fig.savefig(output_path, bbox_inches="tight", dpi=120)
    finally:
        plt.close(fig)
    return output_path
