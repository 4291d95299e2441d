"""
Configuration for brew-journal.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DB_PATH_ENV = "BREW_JOURNAL_DB"


@dataclass
class SuggestionsConfig:
    """How many recent values to offer at each prompt."""

    limit: int = 5


@dataclass
class DisplayConfig:
    """Table display limits."""

    default_limit: int = 15  # Used when the user leaves the limit empty
    max_limit: int = 60


@dataclass
class EntryConfig:
    """Upper bounds for weights entered at the prompts (grams)."""

    max_coffee_grams: int = 1000
    max_water_grams: int = 10000


@dataclass
class JournalConfig:
    """Complete brew-journal configuration."""

    db_path: Path = field(default_factory=lambda: Path("brew_journal.db"))
    quit_input: str = "#"

    suggestions: SuggestionsConfig = field(default_factory=SuggestionsConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    entry: EntryConfig = field(default_factory=EntryConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JournalConfig":
        """Create config from a dictionary (e.g., from YAML)."""
        config = cls()

        if "db_path" in data:
            config.db_path = Path(data["db_path"])
        if "quit_input" in data:
            quit_input = "" if data["quit_input"] is None else str(data["quit_input"]).strip()
            if not quit_input:
                raise ValueError("quit_input must not be empty")
            config.quit_input = quit_input

        if "suggestions" in data:
            suggestions = data["suggestions"]
            limit = int(suggestions.get("limit") or 0)
            config.suggestions = SuggestionsConfig(
                # 0 or less means "use the default"
                limit=limit if limit > 0 else SuggestionsConfig.limit,
            )

        if "display" in data:
            display = data["display"]
            config.display = DisplayConfig(
                default_limit=display.get("default_limit", 15),
                max_limit=display.get("max_limit", 60),
            )

        if "entry" in data:
            entry = data["entry"]
            config.entry = EntryConfig(
                max_coffee_grams=entry.get("max_coffee_grams", 1000),
                max_water_grams=entry.get("max_water_grams", 10000),
            )

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "JournalConfig":
        """
        Load config from a YAML file.

        A missing file yields the defaults. The BREW_JOURNAL_DB environment
        variable, when set, overrides db_path from the file.
        """
        data: dict[str, Any] = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        config = cls.from_dict(data)

        env_db_path = os.environ.get(DB_PATH_ENV)
        if env_db_path:
            config.db_path = Path(env_db_path)

        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (YAML-compatible)."""
        return {
            "db_path": str(self.db_path),
            "quit_input": self.quit_input,
            "suggestions": {
                "limit": self.suggestions.limit,
            },
            "display": {
                "default_limit": self.display.default_limit,
                "max_limit": self.display.max_limit,
            },
            "entry": {
                "max_coffee_grams": self.entry.max_coffee_grams,
                "max_water_grams": self.entry.max_water_grams,
            },
        }
