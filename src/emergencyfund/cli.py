"""Command line interface for the emergency fund runway engine."""

from __future__ import annotations

import asyncio
import dataclasses
from pathlib import Path
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .domain.allocation import AllocationRule, ensure_unique_accounts, make_allocation
from .domain.fund import EstimatorKind, FundConfiguration
from .errors import EmergencyFundError
from .logging_config import setup_logging
from .services.engine import RunwayReport
from .services.reports import build_breakdown_chart, build_history_chart, save_figure

STATUS_LABELS = {
    "on-track": "On track",
    "warning": "Warning",
    "critical": "Critical",
}


class EchoNotifier:
    """Print alerts to stderr."""

    def warning(self, message: str, description: str | None = None) -> None:
        text = f"! {message}" + (f": {description}" if description else "")
        click.secho(text, fg="yellow", err=True)


def _run(coro):
    try:
        return asyncio.run(coro)
    except EmergencyFundError as exc:
        raise click.ClickException(str(exc)) from exc


def _context(ctx: click.Context) -> AppContext:
    app = ctx.obj.get("app")
    if app is None:
        config: BaseConfig = ctx.obj["config"]
        app = create_app_context(config, notifier=EchoNotifier())
        ctx.obj["app"] = app
    return app


def parse_allocation(raw: str) -> AllocationRule:
    """Parse ``ACCOUNT_ID:percentage|fixed:VALUE``."""

    parts = raw.split(":")
    if len(parts) != 3:
        raise click.BadParameter(f"expected ACCOUNT_ID:TYPE:VALUE, got {raw!r}")
    account_id, kind, value = parts
    try:
        rule = make_allocation(int(account_id), kind, float(value))
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    if rule.value < 0:
        raise click.BadParameter("allocation value must not be negative")
    return rule


def _echo_report(report: RunwayReport) -> None:
    result = report.result
    click.echo(f"Fund balance:       ${result.fund_balance:,.2f}")
    click.echo(f"Monthly expenses:   ${result.monthly_expenses:,.2f}")
    click.echo(f"Months of runway:   {result.months_of_runway:.1f}")
    click.echo(f"Target:             {result.target_months:.1f} months (${result.target_amount:,.2f})")
    if report.goal is not None:
        click.echo(f"Linked goal:        {report.goal.icon} {report.goal.name}".rstrip())
        if report.auto_target_months is not None:
            click.echo(f"Goal-derived target: {report.auto_target_months:.1f} months")
    click.echo(f"Progress:           {result.progress_percent:.1f}%")
    click.echo(f"Remaining:          ${result.remaining_to_target:,.2f}")
    click.echo(f"Status:             {STATUS_LABELS[result.status.value]}")


@click.group()
@click.option("--database-url", envvar="EMERGENCYFUND_DATABASE_URL", default=None, help="SQLAlchemy URL")
@click.pass_context
def main(ctx: click.Context, database_url: Optional[str]) -> None:
    """Track emergency fund runway based on your actual expenses."""

    config = BaseConfig()
    if database_url:
        config.DATABASE_URL = database_url
    setup_logging(config)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the current runway."""

    app = _context(ctx)
    _echo_report(_run(app.engine.refresh()))


@main.command()
@click.pass_context
def breakdown(ctx: click.Context) -> None:
    """Show monthly spending per tag over the lookback window."""

    app = _context(ctx)
    entries = _run(app.engine.breakdown())
    if not entries:
        click.echo("No expenses in the lookback window.")
        return
    for entry in entries:
        click.echo(f"{entry.tag:<24} ${entry.monthly_amount:>10,.2f}/mo  {entry.percent_of_total:5.1f}%")


@main.command()
@click.option("--notes", default=None, help="Free-text note stored with the snapshot")
@click.pass_context
def snapshot(ctx: click.Context, notes: Optional[str]) -> None:
    """Record today's runway (replaces an earlier snapshot from today)."""

    app = _context(ctx)
    row = _run(app.engine.capture_snapshot(notes=notes))
    click.echo(
        f"Snapshot {row.snapshot_id} saved for {row.snapshot_date.isoformat()}: "
        f"{row.months_of_runway:.1f} months"
    )


@main.command()
@click.option("--limit", default=30, show_default=True, type=click.IntRange(min=1))
@click.pass_context
def history(ctx: click.Context, limit: int) -> None:
    """List recent snapshots, newest first."""

    app = _context(ctx)
    rows = _run(app.engine.list_snapshots(limit))
    if not rows:
        click.echo("No snapshots yet.")
        return
    for row in rows:
        note = f"  {row.notes}" if row.notes else ""
        click.echo(
            f"[{row.snapshot_id}] {row.snapshot_date.isoformat()}  "
            f"${row.fund_balance:,.2f}  ${row.monthly_expenses:,.2f}/mo  "
            f"{row.months_of_runway:.1f} months{note}"
        )


@main.command("delete-snapshot")
@click.argument("snapshot_id", type=int)
@click.pass_context
def delete_snapshot(ctx: click.Context, snapshot_id: int) -> None:
    """Delete a snapshot by id."""

    app = _context(ctx)
    _run(app.engine.delete_snapshot(snapshot_id))
    click.echo(f"Snapshot {snapshot_id} deleted.")


@main.command()
@click.option("--goal", "goal_id", type=int, default=None, help="Link a savings goal")
@click.option("--no-goal", is_flag=True, default=False, help="Unlink the savings goal")
@click.option("--target-months", type=click.FloatRange(min=0, min_open=True), default=None)
@click.option("--auto-target", is_flag=True, default=False, help="Derive target months from the goal")
@click.option(
    "--allocate",
    "allocations",
    multiple=True,
    help="ACCOUNT_ID:percentage|fixed:VALUE; replaces manual allocations",
)
@click.option("--clear-allocations", is_flag=True, default=False)
@click.option("--expense-account", "expense_accounts", multiple=True, type=int)
@click.option("--clear-expense-accounts", is_flag=True, default=False)
@click.option("--exclude-tag", "excluded_tags", multiple=True)
@click.option("--clear-excluded-tags", is_flag=True, default=False)
@click.option("--lookback", type=click.IntRange(min=1), default=None)
@click.option("--method", type=click.Choice([kind.value for kind in EstimatorKind]), default=None)
@click.pass_context
def configure(
    ctx: click.Context,
    goal_id: Optional[int],
    no_goal: bool,
    target_months: Optional[float],
    auto_target: bool,
    allocations: tuple[str, ...],
    clear_allocations: bool,
    expense_accounts: tuple[int, ...],
    clear_expense_accounts: bool,
    excluded_tags: tuple[str, ...],
    clear_excluded_tags: bool,
    lookback: Optional[int],
    method: Optional[str],
) -> None:
    """Update the saved fund configuration; unspecified settings are kept."""

    if goal_id is not None and no_goal:
        raise click.UsageError("--goal and --no-goal are mutually exclusive")
    if target_months is not None and auto_target:
        raise click.UsageError("--target-months and --auto-target are mutually exclusive")

    app = _context(ctx)
    current: FundConfiguration = _run(app.engine.load_configuration())
    changes: dict = {}

    if no_goal:
        changes["linked_goal_id"] = None
    elif goal_id is not None:
        changes["linked_goal_id"] = goal_id
    linked = changes.get("linked_goal_id", current.linked_goal_id)

    if auto_target:
        if linked is None:
            raise click.UsageError("--auto-target requires a linked goal")
        changes["target_months"] = None
        changes["target_months_is_override"] = False
    elif target_months is not None:
        changes["target_months"] = target_months
        changes["target_months_is_override"] = linked is not None

    if clear_allocations:
        changes["manual_allocations"] = ()
    if allocations:
        rules = [parse_allocation(raw) for raw in allocations]
        try:
            changes["manual_allocations"] = tuple(ensure_unique_accounts(rules))
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--allocate") from exc
    if clear_expense_accounts:
        changes["expense_account_ids"] = frozenset()
    if expense_accounts:
        changes["expense_account_ids"] = frozenset(expense_accounts)
    if clear_excluded_tags:
        changes["excluded_tags"] = frozenset()
    if excluded_tags:
        changes["excluded_tags"] = frozenset(excluded_tags)
    if lookback is not None:
        changes["lookback_months"] = lookback
    if method is not None:
        changes["estimator"] = EstimatorKind(method)

    saved = _run(app.engine.save_configuration(dataclasses.replace(current, **changes)))
    click.echo("Configuration saved.")
    click.echo(f"  Linked goal:      {saved.linked_goal_id if saved.linked_goal_id is not None else '-'}")
    target = "auto" if saved.target_months is None else f"{saved.target_months:g}"
    click.echo(f"  Target months:    {target}")
    click.echo(f"  Allocations:      {len(saved.manual_allocations)}")
    click.echo(f"  Expense accounts: {', '.join(str(a) for a in sorted(saved.expense_account_ids)) or '-'}")
    click.echo(f"  Excluded tags:    {', '.join(sorted(saved.excluded_tags)) or '-'}")
    click.echo(f"  Lookback:         {saved.lookback_months} months ({saved.estimator.value})")


@main.command()
@click.pass_context
def accounts(ctx: click.Context) -> None:
    """List accounts and their current balances."""

    app = _context(ctx)
    for account in _run(app.engine.list_accounts()):
        institution = f" ({account.institution_name})" if account.institution_name else ""
        click.echo(
            f"[{account.account_id}] {account.name}{institution} "
            f"{account.account_type}: ${account.balance:,.2f}"
        )


@main.command()
@click.pass_context
def tags(ctx: click.Context) -> None:
    """List transaction tags available for exclusion."""

    app = _context(ctx)
    for tag in _run(app.engine.list_tags()):
        click.echo(tag)


@main.command()
@click.pass_context
def goals(ctx: click.Context) -> None:
    """List active savings goals that can be linked."""

    app = _context(ctx)
    for goal in _run(app.engine.list_goals()):
        label = f"{goal.icon} {goal.name}" if goal.icon else goal.name
        click.echo(f"[{goal.id}] {label}: ${goal.target_amount:,.2f}")


@main.command("export-charts")
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option("--limit", default=90, show_default=True, type=click.IntRange(min=1))
@click.pass_context
def export_charts(ctx: click.Context, output_dir: Path, limit: int) -> None:
    """Write breakdown and runway history charts as PNG files."""

    app = _context(ctx)

    async def _collect():
        report = await app.engine.evaluate()
        entries = await app.engine.breakdown(report.configuration, as_of=report.as_of)
        rows = await app.engine.list_snapshots(limit)
        return report, entries, rows

    report, entries, rows = _run(_collect())
    breakdown_path = save_figure(build_breakdown_chart(entries), output_dir / "breakdown.png")
    history_path = save_figure(
        build_history_chart(rows, target_months=report.result.target_months),
        output_dir / "history.png",
    )
    click.echo(f"Wrote {breakdown_path}")
    click.echo(f"Wrote {history_path}")


if __name__ == "__main__":  # pragma: no cover
    main()
