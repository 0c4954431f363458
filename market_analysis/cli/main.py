"""
Market Analysis - CLI Application
"""
import math
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from market_analysis.analytics.aggregator import DERIVED_FIELDS, PriceAggregator
from market_analysis.analytics.reducers import AggregationResult
from market_analysis.cli.inputs import (
    RAW_FIELDS,
    parse_date_range,
    parse_field_selection,
    parse_function,
    parse_period_selector,
    parse_symbol,
)
from market_analysis.config import settings
from market_analysis.core.exceptions import InputError, MarketAnalysisError
from market_analysis.data.csv_loader import load_price_record
from market_analysis.logger import logger, logger_manager


T = TypeVar("T")

# Create Typer app
app = typer.Typer(
    name="market-analysis",
    help="Calendar-windowed statistics over daily price series",
    add_completion=False,
)

# Rich console for output
console = Console()


def format_value(value, precision: int) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        return f"{value:.{precision}f}"
    return str(value)


def render_result(result: AggregationResult, precision: int) -> None:
    """Print one ``<timestamp> -> <value>`` line per bucket, ascending."""
    for timestamp in sorted(result):
        console.print(
            f"{timestamp.strftime('%Y-%m-%d')} -> {format_value(result[timestamp], precision)}",
            highlight=False,
            markup=False,
        )


def resolve_input(
    value: Optional[str],
    prompt: str,
    parser: Callable[[str], T],
    interactive: bool
) -> T:
    """Parse ``value``; on failure re-prompt until the parser accepts the input."""
    while True:
        if value is None:
            if not interactive:
                console.print(f"[red]✗[/red] Missing value: {prompt}")
                raise typer.Exit(code=2)
            value = typer.prompt(prompt)
        try:
            return parser(value)
        except InputError as e:
            console.print(f"[red]✗[/red] {e}")
            logger.debug(f"Rejected input for '{prompt}': {value!r}")
            if not interactive:
                raise typer.Exit(code=2)
            value = None


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level for the log file")
):
    """
    Market Analysis CLI

    Weekly (or N-day / N-week) maxima, averages, spreads, deltas and
    percentiles over daily OHLCV history files.
    """
    if version:
        console.print(f"[cyan]{settings.APP_NAME}[/cyan] v{settings.APP_VERSION}")
        raise typer.Exit()

    if log_level:
        try:
            logger_manager.set_level(log_level)
        except ValueError as e:
            console.print(f"[red]✗[/red] {e}")
            raise typer.Exit(code=2)

    if ctx.invoked_subcommand is None:
        console.print(Panel.fit(
            f"[bold cyan]{settings.APP_NAME}[/bold cyan]\n"
            f"[dim]Version {settings.APP_VERSION}[/dim]\n\n"
            f"[yellow]Use --help to see available commands[/yellow]",
            box=box.ROUNDED,
            border_style="cyan"
        ))


@app.command()
def aggregate(
    file: Path = typer.Option(..., "--file", "-f", exists=True, dir_okay=False, help="Daily price CSV file"),
    symbol: Optional[str] = typer.Option(None, "--symbol", "-s", help="Ticker symbol (default: file name)"),
    field: Optional[str] = typer.Option(None, "--field", help="Price field, delta field, or 'first|second'"),
    period: Optional[str] = typer.Option(None, "--period", "-p", help="Aggregation period (weekly, 1w, 2w, 5d)"),
    function: Optional[str] = typer.Option(None, "--function", "-a", help="max, min, avg, sum, median, spread or pNN"),
    start: Optional[str] = typer.Option(None, "--start", help="Start date YYYY-MM-DD"),
    end: Optional[str] = typer.Option(None, "--end", help="End date YYYY-MM-DD"),
    gap_policy: Optional[str] = typer.Option(None, "--gaps", help="skip or empty"),
    precision: Optional[int] = typer.Option(None, "--precision", help="Decimal places in output"),
    interactive: bool = typer.Option(True, "--interactive/--no-interactive", help="Re-prompt on invalid selectors"),
):
    """
    Aggregate one price field per calendar period
    """
    symbol = resolve_input(symbol or file.stem, "Ticker symbol", parse_symbol, interactive)
    selection = resolve_input(field, "Price field", parse_field_selection, interactive)
    period_info = resolve_input(
        period or settings.ANALYSIS.default_period, "Aggregation period", parse_period_selector, interactive
    )
    func = resolve_input(function, "Aggregation function", parse_function, interactive)

    try:
        start_dt, end_dt = parse_date_range(start, end)
    except InputError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=2)

    precision = settings.ANALYSIS.precision if precision is None else precision

    try:
        record = load_price_record(file, symbol, start_dt, end_dt)
        aggregator = PriceAggregator(period_info, gap_policy=gap_policy)
        result = aggregator.aggregate(record, selection, func)
    except (MarketAnalysisError, ValueError) as e:
        console.print(f"[red]✗[/red] Error: {e}")
        logger.error(f"Aggregation failed for {symbol}: {e}")
        raise typer.Exit(code=1)

    render_result(result, precision)


@app.command()
def fields():
    """
    List the fields that can be aggregated
    """
    table = Table(title="Aggregatable Fields", box=box.ROUNDED)
    table.add_column("Field", style="cyan")
    table.add_column("Kind", style="green")

    for name in RAW_FIELDS:
        table.add_row(name, "price" if name != "volume" else "volume")
    for name in sorted(DERIVED_FIELDS):
        table.add_row(name, "delta")
    table.add_row("<first>|<second>", "pair (spread or paired delta)")

    console.print(table)


if __name__ == "__main__":
    app()
