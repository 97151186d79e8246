"""Chart rendering tests (Agg backend)."""

from __future__ import annotations

from datetime import date

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from emergencyfund.domain.fund import ExpenseBreakdownEntry
from emergencyfund.models import EmergencyFundSnapshot
from emergencyfund.services.reports import build_breakdown_chart, build_history_chart, save_figure


def test_breakdown_chart_renders(tmp_path):
    entries = [
        ExpenseBreakdownEntry(tag="rent", monthly_amount=1500.0, percent_of_total=60.0),
        ExpenseBreakdownEntry(tag="groceries", monthly_amount=600.0, percent_of_total=24.0),
        ExpenseBreakdownEntry(tag="Untagged", monthly_amount=400.0, percent_of_total=16.0),
    ]
    fig = build_breakdown_chart(entries)
    assert isinstance(fig, Figure)

    path = save_figure(fig, tmp_path / "charts" / "breakdown.png")
    assert path.exists()
    assert path.stat().st_size > 0


def test_empty_charts_render():
    assert isinstance(build_breakdown_chart([]), Figure)
    assert isinstance(build_history_chart([]), Figure)


def test_history_chart_with_target(tmp_path):
    snaps = [
        EmergencyFundSnapshot(
            snapshot_date=date(2025, month, 1),
            fund_balance=1000.0 * month,
            monthly_expenses=1000.0,
            months_of_runway=float(month),
        )
        for month in (3, 1, 2)
    ]
    fig = build_history_chart(snaps, target_months=6.0)
    ax = fig.axes[0]
    assert list(ax.lines[0].get_ydata()) == [1.0, 2.0, 3.0]
    assert ax.lines[1].get_ydata()[0] == 6.0

    path = save_figure(fig, tmp_path / "history.png")
    assert path.exists()
    assert plt.fignum_exists(fig.number) is False
