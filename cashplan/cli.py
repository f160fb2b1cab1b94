"""
Command-Line Interface for CashPlan.

Purpose
-------
Provides a CLI for inspecting a household dataset without writing Python
code: monthly summaries and KPIs, forecasts, plan-vs-actual comparisons,
credit-card installments, surplus allocation and goal progress.

Commands
--------
- summary: Monthly aggregates and KPIs for incomes or expenses
- forecast: Three-scenario projection of the next months
- compare: Planned vs observed comparison for one month
- installments: Installment schedules (and card cycles)
- allocate: Split a surplus across saving goals
- goals: Goal progress and savings summary
- config: Validate, display and create engine configuration files
- info: Package and dependency versions

Example Usage
-------------
    # Income summary as of a given date
    $ cashplan summary --data household.json --kind income --as-of 2025-06-15

    # Expense forecast for six months, written to JSON
    $ cashplan forecast -d household.json --kind expense --months 6 -o forecast.json

    # Create a starter engine configuration
    $ cashplan config create engine.json

    # Show version
    $ cashplan --version
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import click

from .exceptions import CashPlanError

logger = logging.getLogger(__name__)


# Lazy imports for performance
def _import_rich():
    """Lazy import Rich for better startup time."""
    from rich.console import Console
    from rich.table import Table
    from rich.panel import Panel
    return Console(), Table, Panel


def _get_console():
    console, *_ = _import_rich()
    return console


# Version
__version__ = "0.1.0"

_DATE = click.DateTime(formats=["%Y-%m-%d"])


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> None:
    click.echo(message, err=True)
    sys.exit(1)


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value is not None else None


def _window(as_of: date, start: Optional[datetime], end: Optional[datetime]):
    """Default window: first day of the month 11 months back through as_of."""
    from .utils import add_months

    start_d = _as_date(start) or add_months(as_of.replace(day=1), -11)
    end_d = _as_date(end) or as_of
    return start_d, end_d


def _load_engine(ctx: click.Context, data: Optional[Path], config: Optional[Path]):
    """Build a PlanningEngine from CLI options and AppSettings."""
    from .engine import PlanningEngine
    from .config import EngineConfig
    from .serialization import load_dataset, load_engine_config

    settings = ctx.obj["settings"]
    data = data or settings.data_path
    if data is None:
        _fail("Error: no dataset given (use --data or set CASHPLAN_DATA_PATH)")

    try:
        repo = load_dataset(data)
        engine_config = load_engine_config(config) if config else EngineConfig()
    except (CashPlanError, OSError, ValueError) as e:
        _fail(f"Error loading data: {e}")

    if settings.reporting_currency:
        engine_config = engine_config.model_copy(
            update={"reporting_currency": settings.reporting_currency}
        )
    logger.info("Loaded %r", repo)
    return PlanningEngine(repo, engine_config)


def _write_output(ctx: click.Context, payload: Any, output: Optional[Path]) -> None:
    from .serialization import save_json

    if output:
        save_json(payload, output)
        if not ctx.obj.get("quiet", False):
            click.echo(f"Results saved to {output}")


def _money(value: float) -> str:
    from .utils import format_currency

    return format_currency(value)


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

def _data_options(func):
    func = click.option(
        "--output", "-o",
        type=click.Path(path_type=Path),
        default=None,
        help="Write results as JSON to this file"
    )(func)
    func = click.option(
        "--as-of",
        type=_DATE,
        default=None,
        help="Reference date YYYY-MM-DD (default: today)"
    )(func)
    func = click.option(
        "--config", "-c",
        type=click.Path(exists=True, path_type=Path),
        default=None,
        help="Engine configuration file (JSON)"
    )(func)
    func = click.option(
        "--data", "-d",
        type=click.Path(exists=True, path_type=Path),
        default=None,
        help="Household dataset file (JSON)"
    )(func)
    return func


def _window_options(func):
    func = click.option("--end", type=_DATE, default=None, help="Window end (default: as-of)")(func)
    func = click.option(
        "--start", type=_DATE, default=None,
        help="Window start (default: 11 months before as-of, day 1)"
    )(func)
    return func


_KIND = click.option(
    "--kind", "-k",
    type=click.Choice(["income", "expense"]),
    default="income",
    help="Incomes or expenses (default: income)"
)


@click.group()
@click.version_option(version=__version__, prog_name="cashplan")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: CASHPLAN_LOG_LEVEL or WARNING)"
)
@click.pass_context
def main(ctx: click.Context, quiet: bool, log_level: Optional[str]) -> None:
    """
    CashPlan - Household planning and forecasting engine.

    Compares planned against observed incomes and expenses, projects the
    next months, schedules card installments and suggests how to split a
    surplus across saving goals.

    Use 'cashplan COMMAND --help' for command-specific help.
    """
    from .config import AppSettings

    settings = AppSettings()
    level = log_level or ("DEBUG" if settings.debug else settings.log_level)
    _configure_logging(level)

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["console"] = _get_console()


# ---------------------------------------------------------------------------
# summary
# ---------------------------------------------------------------------------

@main.command()
@_data_options
@_window_options
@_KIND
@click.pass_context
def summary(
    ctx: click.Context,
    data: Optional[Path],
    config: Optional[Path],
    as_of: Optional[datetime],
    output: Optional[Path],
    start: Optional[datetime],
    end: Optional[datetime],
    kind: str,
) -> None:
    """
    Monthly aggregates and KPIs.

    Example:
        cashplan summary -d household.json --kind expense --as-of 2025-06-15
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    engine = _load_engine(ctx, data, config)
    ref = _as_date(as_of) or date.today()
    start_d, end_d = _window(ref, start, end)

    try:
        if kind == "income":
            aggregates = engine.income_aggregates(start_d, end_d, as_of=ref)
            kpis = engine.income_kpis(start_d, end_d, as_of=ref)
            breakdown = None
        else:
            aggregates = engine.expense_aggregates(start_d, end_d, as_of=ref)
            kpis = engine.expense_kpis(start_d, end_d, as_of=ref)
            breakdown = engine.expense_breakdown(as_of=ref)
    except CashPlanError as e:
        _fail(f"Error: {e}")

    if not quiet:
        _, Table, Panel = _import_rich()
        table = Table(title=f"{kind.capitalize()}s by month ({engine.config.reporting_currency})")
        table.add_column("Month", style="cyan")
        table.add_column("Planned", justify="right")
        table.add_column("Observed", justify="right")
        table.add_column("Variance", justify="right")
        table.add_column("Variance %", justify="right")
        for a in aggregates:
            table.add_row(
                a.month, _money(a.planned_total), _money(a.observed_total),
                _money(a.variance), f"{a.variance_pct:+.1f}%",
            )
        console.print(table)

        lines = [
            f"Current month ({kpis.current_key}): {_money(kpis.current_month)}",
            f"Previous month ({kpis.previous_key}): {_money(kpis.previous_month)}",
            f"Month over month: {kpis.mom_pct:+.1f}%",
            f"Year to date: {_money(kpis.ytd)}",
            f"Average 3m / 6m / 12m: {_money(kpis.avg_3m)} / "
            f"{_money(kpis.avg_6m)} / {_money(kpis.avg_12m)}",
        ]
        if breakdown is not None:
            lines.append(
                f"Credit / debit: {breakdown.credit_pct:.0f}% / {breakdown.debit_pct:.0f}%"
            )
            for share in breakdown.top_categories:
                lines.append(f"  {share.category}: {_money(share.amount)} ({share.percentage:.0f}%)")
        console.print(Panel("\n".join(lines), title="KPIs"))

    payload = {"aggregates": aggregates, "kpis": kpis}
    if breakdown is not None:
        payload["breakdown"] = breakdown
    _write_output(ctx, payload, output)


# ---------------------------------------------------------------------------
# forecast
# ---------------------------------------------------------------------------

@main.command()
@_data_options
@_window_options
@_KIND
@click.option("--months", "-m", type=int, default=None, help="Months to project")
@click.pass_context
def forecast(
    ctx: click.Context,
    data: Optional[Path],
    config: Optional[Path],
    as_of: Optional[datetime],
    output: Optional[Path],
    start: Optional[datetime],
    end: Optional[datetime],
    kind: str,
    months: Optional[int],
) -> None:
    """
    Project the next months in three scenarios.

    Example:
        cashplan forecast -d household.json --kind expense --months 6
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    engine = _load_engine(ctx, data, config)
    ref = _as_date(as_of) or date.today()
    start_d, end_d = _window(ref, start, end)

    method = engine.forecast_incomes if kind == "income" else engine.forecast_expenses
    try:
        projection = method(start_d, end_d, months=months, as_of=ref)
    except CashPlanError as e:
        _fail(f"Error: {e}")

    if not quiet:
        _, Table, _ = _import_rich()
        table = Table(title=f"{kind.capitalize()} forecast")
        table.add_column("Month", style="cyan")
        table.add_column("Conservative", justify="right")
        table.add_column("Base", justify="right", style="green")
        table.add_column("Optimistic", justify="right")
        for m in projection:
            table.add_row(m.month, _money(m.conservative), _money(m.base), _money(m.optimistic))
        console.print(table)

    _write_output(ctx, projection, output)


# ---------------------------------------------------------------------------
# compare
# ---------------------------------------------------------------------------

_STATUS_STYLE = {"good": "green", "warning": "yellow", "bad": "red"}


@main.command()
@_data_options
@_KIND
@click.option("--month", type=str, default=None, help="Month YYYY-MM (default: as-of month)")
@click.pass_context
def compare(
    ctx: click.Context,
    data: Optional[Path],
    config: Optional[Path],
    as_of: Optional[datetime],
    output: Optional[Path],
    kind: str,
    month: Optional[str],
) -> None:
    """
    Planned vs observed for one month.

    Example:
        cashplan compare -d household.json --kind expense --month 2025-05
    """
    from .utils import month_key

    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    engine = _load_engine(ctx, data, config)
    ref = _as_date(as_of) or date.today()
    month = month or month_key(ref)

    method = engine.compare_incomes if kind == "income" else engine.compare_expenses
    try:
        rows = method(month, as_of=ref)
    except CashPlanError as e:
        _fail(f"Error: {e}")

    if not quiet:
        _, Table, _ = _import_rich()
        table = Table(title=f"{kind.capitalize()}s planned vs observed, {month}")
        table.add_column("Category", style="cyan")
        if kind == "income":
            table.add_column("Source")
        table.add_column("Planned", justify="right")
        table.add_column("Observed", justify="right")
        table.add_column("Variance %", justify="right")
        table.add_column("Status")
        for r in rows:
            cells = [r.category] + ([r.source] if kind == "income" else [])
            style = _STATUS_STYLE[r.status]
            cells += [
                _money(r.planned), _money(r.observed), f"{r.variance_pct:+.1f}%",
                f"[{style}]{r.status}[/{style}]",
            ]
            table.add_row(*cells)
        console.print(table)

    _write_output(ctx, rows, output)


# ---------------------------------------------------------------------------
# installments
# ---------------------------------------------------------------------------

@main.command()
@_data_options
@click.option("--expense", "-e", "expense_id", type=str, default=None, help="Planned expense id")
@click.option("--card", "card_id", type=str, default=None, help="Also show this card's cycle")
@click.pass_context
def installments(
    ctx: click.Context,
    data: Optional[Path],
    config: Optional[Path],
    as_of: Optional[datetime],
    output: Optional[Path],
    expense_id: Optional[str],
    card_id: Optional[str],
) -> None:
    """
    Installment schedule of credit expenses.

    Example:
        cashplan installments -d household.json --card visa --as-of 2025-02-05
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    engine = _load_engine(ctx, data, config)
    ref = _as_date(as_of) or date.today()

    try:
        if expense_id:
            schedule = engine.installments_for(expense_id, as_of=ref)
        else:
            schedule = engine.all_installments(as_of=ref)
        cycle = engine.card_cycle_for(card_id, as_of=ref) if card_id else None
    except CashPlanError as e:
        _fail(f"Error: {e}")

    if not quiet:
        _, Table, Panel = _import_rich()
        table = Table(title="Installments")
        table.add_column("Id", style="cyan")
        table.add_column("#", justify="right")
        table.add_column("Due", justify="right")
        table.add_column("Amount", justify="right")
        table.add_column("Status")
        for i in schedule:
            due = i.due_date.isoformat() + (" *" if i.weekend_adjusted else "")
            table.add_row(
                i.id, f"{i.installment_number}/{i.total_installments}", due,
                f"{i.currency} {i.amount_base:,.2f}", i.status,
            )
        console.print(table)
        if cycle is not None:
            lines = [
                f"Current cutoff: {cycle.current_cutoff.isoformat()}",
                f"Current payment: {cycle.current_payment.isoformat()}",
                f"Next cutoff: {cycle.next_cutoff.isoformat()}",
                f"Next payment: {cycle.next_payment.isoformat()}",
            ]
            for currency, amount in sorted(cycle.due_in_current_payment.items()):
                lines.append(f"Due this payment: {currency} {amount:,.2f}")
            for currency, amount in sorted(cycle.future_installments.items()):
                lines.append(f"Future installments: {currency} {amount:,.2f}")
            console.print(Panel("\n".join(lines), title=f"Card {cycle.card_id}"))

    payload: Any = {"installments": schedule}
    if cycle is not None:
        payload["card_cycle"] = cycle
    _write_output(ctx, payload, output)


# ---------------------------------------------------------------------------
# allocate / goals
# ---------------------------------------------------------------------------

@main.command()
@_data_options
@click.option(
    "--surplus", "-s",
    type=float,
    default=None,
    help="Surplus in reporting currency (default: observed income - expenses of the as-of month)"
)
@click.pass_context
def allocate(
    ctx: click.Context,
    data: Optional[Path],
    config: Optional[Path],
    as_of: Optional[datetime],
    output: Optional[Path],
    surplus: Optional[float],
) -> None:
    """
    Suggest how to split a surplus across saving goals.

    Example:
        cashplan allocate -d household.json --surplus 250000
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    engine = _load_engine(ctx, data, config)
    ref = _as_date(as_of) or date.today()

    try:
        amount = surplus if surplus is not None else engine.month_surplus(as_of=ref)
        suggestion = engine.allocate_surplus(amount, as_of=ref)
    except CashPlanError as e:
        _fail(f"Error: {e}")

    if not quiet:
        _, Table, _ = _import_rich()
        table = Table(title=f"Surplus allocation ({_money(suggestion.total_surplus)})")
        table.add_column("Goal", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column(engine.config.reporting_currency, justify="right", style="green")
        table.add_column("In base", justify="right")
        for a in suggestion.allocations:
            table.add_row(
                a.goal_name, f"{a.score:.3f}", _money(a.amount_reporting),
                f"{a.base_currency} {a.amount_in_base:,.2f}",
            )
        console.print(table)
        console.print(f"Remaining: {_money(suggestion.remaining)}")

    _write_output(ctx, suggestion, output)


@main.command()
@_data_options
@click.pass_context
def goals(
    ctx: click.Context,
    data: Optional[Path],
    config: Optional[Path],
    as_of: Optional[datetime],
    output: Optional[Path],
) -> None:
    """
    Goal progress and savings summary.

    Example:
        cashplan goals -d household.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    engine = _load_engine(ctx, data, config)
    ref = _as_date(as_of) or date.today()

    progress = engine.goal_progress(as_of=ref)
    totals = engine.goal_summary()

    if not quiet:
        _, Table, _ = _import_rich()
        table = Table(title=f"Saving goals ({totals.completed}/{totals.total} completed)")
        table.add_column("Goal", style="cyan")
        table.add_column("Progress", justify="right")
        table.add_column("Remaining", justify="right")
        table.add_column("Due in", justify="right")
        for goal in engine.repository.goals():
            p = progress[goal.id]
            due = f"{p.days_until_due} d" if p.days_until_due is not None else "-"
            table.add_row(
                goal.name, f"{p.progress_pct:.0f}%",
                f"{goal.base_currency} {p.remaining:,.0f}", due,
            )
        console.print(table)
        for currency, saved in sorted(totals.saved_by_currency.items()):
            console.print(f"Saved in {currency}: {saved:,.2f}")

    _write_output(ctx, {"progress": progress, "summary": totals}, output)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

@main.group()
def config() -> None:
    """
    Configuration management commands.

    Validate, display, and create engine configuration files.
    """
    pass


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, config_file: Path) -> None:
    """
    Validate an engine configuration file.

    Example:
        cashplan config validate engine.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .serialization import load_engine_config

    try:
        engine_config = load_engine_config(config_file)
    except (CashPlanError, OSError, ValueError) as e:
        _fail(f"Configuration validation failed: {e}")

    if not quiet:
        _, _, Panel = _import_rich()
        info = (
            "[bold]Engine Configuration Valid[/bold]\n\n"
            f"Reporting currency: {engine_config.reporting_currency}\n"
            f"Rates: {len(engine_config.rates)} currencies\n"
            f"Forecast: {engine_config.forecast_months} months "
            f"(x{engine_config.conservative_factor} / x{engine_config.optimistic_factor})\n"
            f"Variance band: ±{engine_config.comparison_threshold_pct}%"
        )
        console.print(Panel(info, title="Configuration Summary", border_style="green"))


@config.command("show")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.option("--format", "-f", type=click.Choice(["json", "table"]), default="table")
@click.pass_context
def config_show(ctx: click.Context, config_file: Path, format: str) -> None:
    """
    Display configuration details.

    Example:
        cashplan config show engine.json --format table
    """
    console = ctx.obj["console"]

    with open(config_file, "r") as f:
        config_data = json.load(f)

    if format == "json":
        click.echo(json.dumps(config_data, indent=2))
        return

    _, Table, _ = _import_rich()
    rates_table = Table(title=f"Rates to {config_data.get('reporting_currency', '?')}")
    rates_table.add_column("Currency", style="cyan")
    rates_table.add_column("Rate", justify="right")
    for code, rate in sorted(config_data.get("rates", {}).items()):
        rates_table.add_row(code, f"{rate:,.4g}")
    console.print(rates_table)

    options_table = Table(title="Options")
    options_table.add_column("Key", style="cyan")
    options_table.add_column("Value", justify="right")
    for key, value in config_data.items():
        if key not in ("rates", "schema_version"):
            options_table.add_row(key, json.dumps(value))
    console.print(options_table)


@config.command("create")
@click.argument("output_file", type=click.Path(path_type=Path))
@click.option("--reporting-currency", type=str, default=None, help="Reporting currency")
@click.pass_context
def config_create(ctx: click.Context, output_file: Path, reporting_currency: Optional[str]) -> None:
    """
    Create a starter engine configuration file with default values.

    Example:
        cashplan config create engine.json --reporting-currency ARS
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .config import EngineConfig
    from .serialization import save_engine_config

    engine_config = EngineConfig()
    if reporting_currency:
        engine_config = EngineConfig(reporting_currency=reporting_currency)
    save_engine_config(engine_config, output_file)

    if not quiet:
        console.print(f"[green]Created configuration file: {output_file}[/green]")


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display package and dependency information.
    """
    from importlib.metadata import PackageNotFoundError, version

    console = ctx.obj["console"]
    _, _, Panel = _import_rich()

    info_lines = [
        f"CashPlan Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
    ]
    for name in ("numpy", "pandas", "pydantic", "pydantic-settings", "click", "rich"):
        try:
            info_lines.append(f"{name}: {version(name)}")
        except PackageNotFoundError:
            info_lines.append(f"{name}: not installed")

    console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
