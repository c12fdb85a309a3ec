"""Command-line interface for electricity cost calculation."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .collectors import caruna, spot_prices
from .config import ConfigError, load_config
from .costs import calculate_cost, compare_contracts, rows_between
from .models import CostSummary, UsageRecord, Window
from .prices import PriceIndex, PriceNotFoundError, PriceSourceError, build_price_index, count_entries
from .tariffs import DayNightRate, FlatRate, SpotRate, describe_policy, policy_from_config
from .timeparse import ParseError, TimeParser
from .usage import normalize

console = Console()
# Progress messages go to stderr so --json output stays parseable
status = Console(stderr=True)

# Errors that end a command with a message rather than a traceback
EXPECTED_ERRORS = (
    ConfigError,
    ParseError,
    PriceNotFoundError,
    PriceSourceError,
    spot_prices.SpotPriceFetchError,
    FileNotFoundError,
)


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True), help="Path to energy.yaml")
@click.pass_context
def cli(ctx, config_path):
    """Electricity cost calculation from metered usage and tariffs."""
    ctx.ensure_object(dict)
    try:
        config = load_config(Path(config_path) if config_path else None)
        parser = TimeParser(config.timezone)
    except (ConfigError, ParseError) as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)
    ctx.obj["config"] = config
    ctx.obj["parser"] = parser


def parse_bound(parser: TimeParser, text: str, default_time: str):
    """Parse a window bound given as "D.M.YYYY" or "D.M.YYYY HH:MM"."""
    parts = text.split()
    if len(parts) == 1:
        return parser.parse(parts[0], default_time)
    return parser.parse_datetime(text)


def load_records(ctx, usage_path: str | None) -> list[UsageRecord]:
    """Load and normalize the usage export."""
    path = Path(usage_path) if usage_path else ctx.obj["config"].usage_file
    if path is None:
        raise ConfigError("No usage file given, use --usage or set usage_file in config")

    status.print(f"[cyan]Loading usage from {path}[/cyan]")
    rows = caruna.read_usage_csv(path)
    status.print(f"Parsed {len(rows)} usage rows")
    return normalize(rows, ctx.obj["parser"])


def load_price_index(ctx, spot_files: tuple[str, ...], spot_url: str | None) -> PriceIndex:
    """Load spot price sources from files and/or a URL, later sources winning."""
    config = ctx.obj["config"]
    paths = [Path(p) for p in spot_files] or config.spot_files

    sources = []
    for path in paths:
        status.print(f"[cyan]Loading spot prices from {path}[/cyan]")
        sources.append(spot_prices.load_spot_file(path))
    if spot_url:
        status.print(f"[cyan]Fetching spot prices from {spot_url}[/cyan]")
        sources.append(spot_prices.fetch_spot_prices(spot_url))

    if not sources:
        raise ConfigError("No spot price data, use --spot-file/--spot-url or set spot_files in config")

    index = build_price_index(sources, config.vat_multiplier, config.price_divisor)
    status.print(f"Parsed {count_entries(sources)} spot price rows")
    return index


def summary_to_dict(summary: CostSummary) -> dict:
    return {
        "total_cost_cents": summary.total_cost,
        "total_cost_euros": round(summary.total_cost_euros, 2),
        "total_usage_kwh": summary.total_usage,
        "hours": summary.record_count,
    }


def print_summaries(title: str, summaries: dict[str, CostSummary], descriptions: dict[str, str]) -> None:
    table = Table(title=title)
    table.add_column("Contract", style="cyan")
    table.add_column("Terms", style="dim")
    table.add_column("Cost (€)", justify="right")
    table.add_column("Usage (kWh)", justify="right")
    table.add_column("Hours", justify="right")

    for name, summary in summaries.items():
        table.add_row(
            name,
            descriptions[name],
            f"{summary.total_cost_euros:.2f}",
            str(round(summary.total_usage)),
            str(summary.record_count),
        )

    console.print(table)


window_options = [
    click.option("--from", "from_date", required=True, help="Start (D.M.YYYY [HH:MM])"),
    click.option("--to", "to_date", required=True, help="End, inclusive (D.M.YYYY [HH:MM])"),
    click.option("--usage", "usage_path", type=click.Path(exists=True), help="Usage CSV export"),
    click.option("--spot-file", "spot_files", multiple=True, type=click.Path(exists=True),
                 help="Spot price JSON file (repeatable, later files win)"),
    click.option("--spot-url", help="Fetch spot prices JSON from this URL"),
    click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
]


def with_window_options(f):
    for option in reversed(window_options):
        f = option(f)
    return f


def build_window(ctx, from_date: str, to_date: str) -> Window:
    parser = ctx.obj["parser"]
    start = parse_bound(parser, from_date, "00:00")
    end = parse_bound(parser, to_date, "23:59")
    if start > end:
        raise click.BadParameter(f"{from_date} is after {to_date}", param_hint="--from/--to")
    return Window(start, end)


@cli.command()
@with_window_options
@click.option("--contract", help="Contract name from config")
@click.option("--flat", type=float, help="Flat rate (c/kWh)")
@click.option("--day-night", type=(float, float), default=None, help="Day and night rates (c/kWh)")
@click.option("--spot", is_flag=True, help="Use spot prices")
@click.pass_context
def cost(ctx, from_date, to_date, usage_path, spot_files, spot_url, as_json, contract, flat, day_night, spot):
    """Calculate the cost of usage between two dates under one contract."""
    chosen = [opt for opt in (contract, flat, day_night, spot or None) if opt is not None]
    if len(chosen) != 1:
        raise click.UsageError("Choose exactly one of --contract, --flat, --day-night or --spot")

    try:
        window = build_window(ctx, from_date, to_date)

        if contract:
            settings = ctx.obj["config"].contracts.get(contract)
            if settings is None:
                raise ConfigError(f"Unknown contract {contract!r}")
            index = load_price_index(ctx, spot_files, spot_url) if settings.get("kind") == "spot" else None
            policy = policy_from_config(settings, index)
            name = contract
        elif flat is not None:
            policy, name = FlatRate(rate=flat), "flat"
        elif day_night is not None:
            policy, name = DayNightRate(day_rate=day_night[0], night_rate=day_night[1]), "dayNight"
        else:
            policy, name = SpotRate(index=load_price_index(ctx, spot_files, spot_url)), "spot"

        records = load_records(ctx, usage_path)
        status.print(f"[cyan]Calculating cost from {window.start} to {window.end}[/cyan]")
        summary = calculate_cost(records, window, policy)
    except EXPECTED_ERRORS as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    if as_json:
        click.echo(json.dumps({name: summary_to_dict(summary)}, indent=2))
    else:
        console.print(
            f"[green]Total cost {summary.total_cost_euros:.2f}€, "
            f"usage {round(summary.total_usage)} kWh[/green]"
        )


@cli.command()
@with_window_options
@click.pass_context
def compare(ctx, from_date, to_date, usage_path, spot_files, spot_url, as_json):
    """Compare the cost of every configured contract over the same dates."""
    contracts = ctx.obj["config"].contracts
    if not contracts:
        console.print("[yellow]No contracts configured[/yellow]")
        return

    try:
        window = build_window(ctx, from_date, to_date)
        needs_spot = any(settings.get("kind") == "spot" for settings in contracts.values())
        index = load_price_index(ctx, spot_files, spot_url) if needs_spot else None
        policies = {name: policy_from_config(settings, index) for name, settings in contracts.items()}

        records = load_records(ctx, usage_path)
        summaries = compare_contracts(records, window, policies)
    except EXPECTED_ERRORS as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    if as_json:
        click.echo(json.dumps({name: summary_to_dict(s) for name, s in summaries.items()}, indent=2))
        return

    descriptions = {name: describe_policy(policy) for name, policy in policies.items()}
    print_summaries(f"Contracts {from_date} → {to_date}", summaries, descriptions)

    cheapest = min(summaries, key=lambda name: summaries[name].total_cost)
    console.print(f"[green]Cheapest: {cheapest}[/green]")


@cli.command()
@click.option("--spot-file", "spot_files", multiple=True, type=click.Path(exists=True), help="Spot price JSON file")
@click.option("--spot-url", help="Fetch spot prices JSON from this URL")
@click.pass_context
def prices(ctx, spot_files, spot_url):
    """Show spot price coverage."""
    try:
        index = load_price_index(ctx, spot_files, spot_url)
    except EXPECTED_ERRORS as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    parser = ctx.obj["parser"]
    table = Table(title="Spot Prices")
    table.add_column("Hours", justify="right")
    table.add_column("Range")
    table.add_row(
        str(len(index)),
        f"{parser.format_timestamp(index.start)} → {parser.format_timestamp(index.end)}" if len(index) else "N/A",
    )
    console.print(table)


@cli.command()
@click.option("--usage", "usage_path", type=click.Path(exists=True), help="Usage CSV export")
@click.option("--from", "from_date", help="Only count from this date (D.M.YYYY [HH:MM])")
@click.option("--to", "to_date", help="Only count up to this date, inclusive (D.M.YYYY [HH:MM])")
@click.pass_context
def usage(ctx, usage_path, from_date, to_date):
    """Show usage export statistics, optionally for a date window."""
    try:
        records = load_records(ctx, usage_path)
        if records and (from_date or to_date):
            first = min(r.timestamp for r in records)
            last = max(r.timestamp for r in records)
            window = build_window(
                ctx,
                from_date or ctx.obj["parser"].format_timestamp(first),
                to_date or ctx.obj["parser"].format_timestamp(last),
            )
            records = rows_between(records, window)
    except EXPECTED_ERRORS as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    if not records:
        console.print("[yellow]No usage rows found[/yellow]")
        return

    parser = ctx.obj["parser"]
    first = min(r.timestamp for r in records)
    last = max(r.timestamp for r in records)
    empty = sum(1 for r in records if r.quantity_kwh == 0)

    table = Table(title="Usage")
    table.add_column("Rows", justify="right")
    table.add_column("Range")
    table.add_column("Total (kWh)", justify="right")
    table.add_column("Zero hours", justify="right")
    table.add_row(
        str(len(records)),
        f"{parser.format_timestamp(first)} → {parser.format_timestamp(last)}",
        str(round(sum(r.quantity_kwh for r in records))),
        str(empty),
    )
    console.print(table)


if __name__ == "__main__":
    cli()
