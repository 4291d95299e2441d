"""
Line-based prompts for the entry workflows.

Every prompt accepts the quit sentinel (``#`` by default), which raises
EntryCancelled so the calling workflow can abandon the entry before
anything is written.

When suggestions are offered, an empty answer takes the first one and
``:N`` takes the N-th. String answers starting with a backslash are taken
literally minus the backslash, so ``\\:2`` enters the text ``:2``.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

TRUE_INPUTS = {"true", "t", "yes", "y"}
FALSE_INPUTS = {"false", "f", "no", "n"}

# A leading backslash makes the rest of a string answer literal
LITERAL_PREFIX = "\\"


class EntryCancelled(Exception):
    """The user entered the quit sentinel."""


class Prompter:
    """Reads validated values from the user, re-prompting on bad input."""

    def __init__(
        self,
        console: Console | None = None,
        input_fn: Callable[[str], str] | None = None,
        quit_input: str = "#",
    ):
        self.console = console or Console()
        self.input_fn = input_fn or self.console.input
        self.quit_input = quit_input

    def _read(self, label: str) -> str:
        try:
            value = self.input_fn(f"{label}: ").strip()
        except EOFError:
            raise EntryCancelled() from None
        if value == self.quit_input:
            logger.debug(f"Quit sentinel entered at prompt {label!r}")
            raise EntryCancelled()
        return value

    def _warn(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def _show_suggestions(self, suggestions: Sequence[Any]) -> None:
        if not suggestions:
            return
        items = "  ".join(
            f"[bold]:{i}[/bold] {escape(str(value))}" for i, value in enumerate(suggestions, start=1)
        )
        hint = escape(f"Recent (Enter for :1, {LITERAL_PREFIX}:N for a literal ':N'):")
        self.console.print(f"[dim]{hint}[/dim] {items}")

    @staticmethod
    def _pick_suggestion(value: str, suggestions: Sequence[Any]) -> Any | None:
        """
        Resolve an answer against the offered suggestions.

        Returns the chosen suggestion, or None when the answer is a literal
        value. Raises ValueError for a ``:N`` outside the list.
        """
        if not suggestions:
            return None
        if value == "":
            return suggestions[0]
        if value.startswith(":") and value[1:].isdigit():
            index = int(value[1:])
            if not 1 <= index <= len(suggestions):
                raise ValueError(f"Pick a suggestion between :1 and :{len(suggestions)}.")
            return suggestions[index - 1]
        return None

    def ask_str(
        self,
        label: str,
        allow_empty: bool = False,
        suggestions: Sequence[str] | None = None,
    ) -> str:
        """Ask for a string; empty is only accepted when ``allow_empty``."""
        suggestions = list(suggestions or [])
        self._show_suggestions(suggestions)

        while True:
            value = self._read(label)
            if value.startswith(LITERAL_PREFIX):
                value = value[len(LITERAL_PREFIX):]
                picked = None
            else:
                try:
                    picked = self._pick_suggestion(value, suggestions)
                except ValueError as e:
                    self._warn(str(e))
                    continue

            if picked is not None:
                return str(picked)
            if value or allow_empty:
                return value
            self._warn("A value is required.")

    def ask_int(
        self,
        label: str,
        min_value: int,
        max_value: int,
        allow_empty: bool = False,
        suggestions: Sequence[int] | None = None,
    ) -> int:
        """
        Ask for a whole number in ``[min_value, max_value]``.

        An empty answer returns 0 when ``allow_empty`` and nothing is
        suggested, so callers can substitute their own default. Suggestions
        outside the range are not offered.
        """
        suggestions = [s for s in suggestions or [] if min_value <= int(s) <= max_value]
        self._show_suggestions(suggestions)

        while True:
            value = self._read(label)
            try:
                picked = self._pick_suggestion(value, suggestions)
            except ValueError as e:
                self._warn(str(e))
                continue

            if picked is not None:
                return int(picked)
            if value == "":
                if allow_empty:
                    return 0
                self._warn("A value is required.")
                continue

            try:
                number = int(value)
            except ValueError:
                self._warn(f"Enter a whole number between {min_value} and {max_value}.")
                continue

            if min_value <= number <= max_value:
                return number
            self._warn(f"Enter a whole number between {min_value} and {max_value}.")

    def ask_bool(self, label: str, allow_empty: bool = False) -> bool:
        """Ask a yes/no question; empty means False when ``allow_empty``."""
        while True:
            value = self._read(label).lower()
            if value in TRUE_INPUTS:
                return True
            if value in FALSE_INPUTS:
                return False
            if value == "" and allow_empty:
                return False
            self._warn("Enter true or false.")

    def ask_choice(self, options: dict[int, str], label: str = "Enter selection") -> int:
        """Show a numbered menu and return the chosen key."""
        for key, description in sorted(options.items()):
            self.console.print(f"  [bold]{key}[/bold]: {escape(description)}")

        while True:
            value = self._read(label)
            try:
                selection = int(value)
            except ValueError:
                selection = None

            if selection in options:
                return selection
            self._warn(f"Invalid selection: {value!r}")
