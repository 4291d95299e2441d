"""Table rendering for retrieved journal entries."""

from collections.abc import Sequence
from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .models import BrewingRecord, Coffee


def _format_ts(ts: str | None) -> str:
    if not ts:
        return ""
    try:
        return datetime.fromisoformat(ts).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return ts


def build_coffee_table(coffees: Sequence[Coffee]) -> Table:
    table = Table(show_lines=True, title="Coffees")
    table.add_column("Name")
    table.add_column("Roaster")
    table.add_column("Region/Origin")
    table.add_column("Variety")
    table.add_column("Processing method")
    table.add_column("Decaf")

    for coffee in coffees:
        table.add_row(
            escape(coffee.name),
            escape(coffee.roaster),
            escape(coffee.region),
            escape(coffee.variety),
            escape(coffee.process),
            "yes" if coffee.decaf else "no",
        )
    return table


def build_brewing_table(records: Sequence[BrewingRecord]) -> Table:
    table = Table(show_lines=True, title="Brewings")
    table.add_column("Coffee")
    table.add_column("Roaster")
    table.add_column("Method")
    table.add_column("Grinder")
    table.add_column("Coffee (g)", justify="right")
    table.add_column("Water (g)", justify="right")
    table.add_column("Ratio", justify="right")
    table.add_column("Brewed")

    for record in records:
        table.add_row(
            escape(record.coffee_name),
            escape(record.roaster),
            escape(record.method_name),
            escape(record.grinder_name),
            str(record.coffee_grams),
            str(record.water_grams),
            f"1:{record.ratio}",
            _format_ts(record.brewed_ts),
        )
    return table


def render_coffees(coffees: Sequence[Coffee], console: Console | None = None) -> None:
    """Print coffees as a table, wrapped to the console's width."""
    console = console or Console()
    if not coffees:
        console.print("[dim]No coffees recorded yet.[/dim]")
        return
    console.print(build_coffee_table(coffees))


def render_brewings(records: Sequence[BrewingRecord], console: Console | None = None) -> None:
    """Print brewing sessions as a table, wrapped to the console's width."""
    console = console or Console()
    if not records:
        console.print("[dim]No brewings recorded yet.[/dim]")
        return
    console.print(build_brewing_table(records))
