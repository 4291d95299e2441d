"""
Interactive entry and retrieval workflows.

Each workflow collects all of its input first and writes at most once at
the end, so quitting part way through leaves the journal untouched.
"""

import logging
from collections.abc import Callable
from typing import Any

from rich.console import Console
from rich.markup import escape

from .config import JournalConfig
from .display import render_brewings, render_coffees
from .models import Brewing, Coffee, JournalDatabase, StorageError
from .prompts import EntryCancelled, Prompter
from .suggestions import InputSuggestions

logger = logging.getLogger(__name__)

QUIT_MESSAGE = "Quitting without saving."

RETRIEVE_OPTIONS = {
    0: "Retrieve coffees ordered by last added",
    1: "Retrieve brewings ordered by last brewed",
}


class EntryWorkflow:
    """Prompts for new journal entries and displays past ones."""

    def __init__(
        self,
        config: JournalConfig,
        db: JournalDatabase,
        prompter: Prompter | None = None,
        console: Console | None = None,
    ):
        self.config = config
        self.db = db
        self.console = console or Console()
        self.prompter = prompter or Prompter(console=self.console, quit_input=config.quit_input)
        self.suggestions = InputSuggestions(db, default_limit=config.suggestions.limit)

    def _suggest(self, lookup: Callable[..., list[Any]], *args: Any) -> list[Any]:
        """Run a suggestion lookup; a failed lookup just means no suggestions."""
        try:
            return lookup(*args)
        except StorageError as e:
            logger.warning(f"No suggestions available: {e}")
            return []

    def _announce(self, heading: str) -> None:
        quit_input = escape(self.config.quit_input)
        self.console.print(f"{heading} (Enter [bold]{quit_input}[/bold] to quit):")

    def _quit(self) -> None:
        self.console.print(QUIT_MESSAGE)

    # -------------------------------------------------------------------------
    # Entry
    # -------------------------------------------------------------------------

    def add_coffee(self) -> Coffee | None:
        """Prompt for a new coffee and save it. Returns None if the user quits."""
        self._announce("Adding new coffee")
        ask = self.prompter

        try:
            name = ask.ask_str("Enter coffee name")
            roaster = ask.ask_str(
                "Enter roaster/producer name",
                suggestions=self._suggest(self.suggestions.recent_coffee_roasters, name),
            )
            region = ask.ask_str("Enter origin/region (Format: Region, Country)", allow_empty=True)
            variety = ask.ask_str("Enter variety (Format: Variety 1, Variety 2, ...)", allow_empty=True)
            process = ask.ask_str("Enter processing method", allow_empty=True)
            decaf = ask.ask_bool("Is decaf (true or false)", allow_empty=True)
        except EntryCancelled:
            self._quit()
            return None

        coffee = Coffee(
            name=name,
            roaster=roaster,
            region=region,
            variety=variety,
            process=process,
            decaf=decaf,
        )
        coffee.id = self.db.insert_coffee(coffee)

        self.console.print("[green]Added coffee successfully.[/green]")
        return coffee

    def _ask_coffee_id(self) -> int:
        """Prompt until the name/roaster pair resolves to a recorded coffee."""
        recent_names = self._suggest(self.suggestions.recent_coffee_names)
        while True:
            name = self.prompter.ask_str("Enter coffee name", suggestions=recent_names)
            roaster = self.prompter.ask_str(
                "Enter roaster/producer name",
                suggestions=self._suggest(self.suggestions.recent_coffee_roasters, name),
            )
            coffee_id = self.db.get_coffee_id(name, roaster)
            if coffee_id is not None:
                return coffee_id
            self.console.print(
                f"[yellow]No coffee named {escape(repr(name))} from {escape(repr(roaster))}. "
                "Add it with add-coffee first, or try again.[/yellow]"
            )

    def add_brewing(self) -> Brewing | None:
        """Prompt for a brewing session and save it. Returns None if the user quits."""
        self._announce("Adding new brewing")
        ask = self.prompter
        limits = self.config.entry

        try:
            coffee_id = self._ask_coffee_id()
            method_name = ask.ask_str(
                "Enter brewing method",
                suggestions=self._suggest(self.suggestions.recent_brewing_method_names),
            )
            grinder_name = ask.ask_str(
                "Enter grinder",
                suggestions=self._suggest(self.suggestions.recent_grinder_names),
            )
            coffee_grams = ask.ask_int(
                "Enter coffee weight (g)",
                1,
                limits.max_coffee_grams,
                suggestions=self._suggest(
                    self.suggestions.recent_coffee_weights, method_name, grinder_name
                ),
            )
            water_grams = ask.ask_int(
                "Enter water weight (g)",
                1,
                limits.max_water_grams,
                suggestions=self._suggest(
                    self.suggestions.recent_water_weights, method_name, grinder_name
                ),
            )
        except EntryCancelled:
            self._quit()
            return None

        brewing = Brewing(
            coffee_id=coffee_id,
            method_name=method_name,
            grinder_name=grinder_name,
            coffee_grams=coffee_grams,
            water_grams=water_grams,
        )
        brewing.id = self.db.insert_brewing(brewing)

        self.console.print("[green]Added brewing successfully.[/green]")
        return brewing

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------

    def retrieve(self) -> None:
        """Show the retrieval menu and run the chosen display."""
        self._announce("Retrieving entries")
        try:
            selection = self.prompter.ask_choice(RETRIEVE_OPTIONS)
        except EntryCancelled:
            self._quit()
            return

        if selection == 0:
            self.display_coffees_by_last_added()
        elif selection == 1:
            self.display_brewings_by_last_added()

    def _ask_display_limit(self, noun: str) -> int | None:
        display = self.config.display
        self._announce(f"Displaying {noun} by last added")
        try:
            limit = self.prompter.ask_int(
                f"Enter a limit for the number of {noun} to display "
                f"(Enter for {display.default_limit})",
                1,
                display.max_limit,
                allow_empty=True,
            )
        except EntryCancelled:
            self._quit()
            return None
        return limit or display.default_limit

    def _clamp_display_limit(self, limit: int) -> int:
        display = self.config.display
        if limit <= 0:
            return display.default_limit
        return min(limit, display.max_limit)

    def display_coffees_by_last_added(self, limit: int | None = None) -> None:
        """Render recently added coffees, prompting for a limit if none given."""
        if limit is None:
            limit = self._ask_display_limit("coffees")
            if limit is None:
                return
        limit = self._clamp_display_limit(limit)
        render_coffees(self.db.get_coffees_by_last_added(limit), console=self.console)

    def display_brewings_by_last_added(self, limit: int | None = None) -> None:
        """Render recent brewing sessions, prompting for a limit if none given."""
        if limit is None:
            limit = self._ask_display_limit("brewings")
            if limit is None:
                return
        limit = self._clamp_display_limit(limit)
        render_brewings(self.db.get_brewings_by_last_added(limit), console=self.console)
