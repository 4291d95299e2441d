"""
CLI runner for brew-journal.

Usage:
    brew-journal [OPTIONS] COMMAND
    python -m brew_journal.run [OPTIONS] COMMAND

    # Create or upgrade the journal database
    brew-journal init-db

    # Record a coffee, then a brewing session
    brew-journal add-coffee
    brew-journal add-brewing

    # Browse past entries
    brew-journal retrieve
    brew-journal list-coffees --limit 10
"""

import argparse
import logging
import sqlite3
import sys
from pathlib import Path

import yaml
from rich.console import Console

from .config import JournalConfig
from .migrations import get_current_version, run_migrations
from .models import JournalDatabase, StorageError
from .suggestions import InputSuggestions
from .workflows import EntryWorkflow

logger = logging.getLogger("brew-journal")

SUGGESTION_KINDS = (
    "coffees",
    "methods",
    "grinders",
    "coffee-weights",
    "water-weights",
    "roasters",
)


def init_db(db_path: Path) -> list[int]:
    """Apply pending migrations and print the resulting schema state."""
    print(f"Initializing database: {db_path}")
    applied = run_migrations(db_path, verbose=True)
    if applied:
        print(f"Applied {len(applied)} migration(s).")
    print(f"Current schema version: {get_current_version(db_path)}")

    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.execute(
            "SELECT version, applied_ts FROM schema_migrations ORDER BY version"
        )
        print("\nSchema versions:")
        for row in cursor:
            print(f"  v{row[0]} applied at {row[1]}")

        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        tables = [row[0] for row in cursor if not row[0].startswith("sqlite_")]
        print(f"\nTables: {', '.join(tables)}")
    finally:
        conn.close()

    return applied


def lookup_suggestions(suggestions: InputSuggestions, args: argparse.Namespace) -> list:
    """Run the suggestion lookup named by ``args.kind``."""
    kind = args.kind
    if kind == "coffees":
        return suggestions.recent_coffee_names(args.limit)
    if kind == "methods":
        return suggestions.recent_brewing_method_names(args.limit)
    if kind == "grinders":
        return suggestions.recent_grinder_names(args.limit)
    if kind == "roasters":
        if not args.coffee:
            raise ValueError("--coffee is required for roaster suggestions")
        return suggestions.recent_coffee_roasters(args.coffee, args.limit)

    if not (args.method and args.grinder):
        raise ValueError(f"--method and --grinder are required for {kind} suggestions")
    if kind == "coffee-weights":
        return suggestions.recent_coffee_weights(args.method, args.grinder, args.limit)
    return suggestions.recent_water_weights(args.method, args.grinder, args.limit)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brew-journal",
        description="brew-journal: a personal coffee brewing journal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Create the database
    brew-journal init-db

    # Log a brewing session, with suggestions from past sessions
    brew-journal add-brewing

    # Show doses used with a method/grinder pair
    brew-journal suggest coffee-weights --method V60 --grinder Comandante

    # Use a specific config file
    brew-journal --config ~/.brew_journal.yaml retrieve
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("brew_journal.yaml"),
        help="Path to config file (default: brew_journal.yaml)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Override database path from config",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.add_parser("init-db", help="Create or upgrade the journal database")
    commands.add_parser("add-coffee", help="Record a new coffee")
    commands.add_parser("add-brewing", help="Record a brewing session")
    commands.add_parser("retrieve", help="Choose past entries to display")

    for name, noun in (("list-coffees", "coffees"), ("list-brewings", "brewings")):
        list_parser = commands.add_parser(name, help=f"Display {noun}, most recent first")
        list_parser.add_argument(
            "--limit",
            type=int,
            help=f"Number of {noun} to show (prompted for if omitted)",
        )

    suggest_parser = commands.add_parser("suggest", help="Print recent values for a prompt")
    suggest_parser.add_argument("kind", choices=SUGGESTION_KINDS)
    suggest_parser.add_argument("--method", help="Brewing method name (weights)")
    suggest_parser.add_argument("--grinder", help="Grinder name (weights)")
    suggest_parser.add_argument("--coffee", help="Coffee name (roasters)")
    suggest_parser.add_argument(
        "--limit",
        type=int,
        default=0,
        help="Maximum number of values (default: configured suggestion limit)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # INFO and DEBUG only with --verbose
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = JournalConfig.from_yaml(args.config)
    except (ValueError, yaml.YAMLError) as e:
        logger.error(f"Invalid config {args.config}: {e}")
        return 1
    if args.db:
        config.db_path = args.db

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "init-db":
        init_db(config.db_path)
        return 0

    if not config.db_path.exists():
        logger.error(f"Database not found: {config.db_path}")
        logger.error("Run 'brew-journal init-db' first to create the database.")
        return 1

    db = JournalDatabase(config.db_path)
    console = Console()

    try:
        workflow = EntryWorkflow(config, db, console=console)
        if args.command == "add-coffee":
            workflow.add_coffee()
        elif args.command == "add-brewing":
            workflow.add_brewing()
        elif args.command == "retrieve":
            workflow.retrieve()
        elif args.command == "list-coffees":
            workflow.display_coffees_by_last_added(args.limit)
        elif args.command == "list-brewings":
            workflow.display_brewings_by_last_added(args.limit)
        elif args.command == "suggest":
            for value in lookup_suggestions(workflow.suggestions, args):
                console.print(str(value), markup=False, highlight=False)
    except StorageError as e:
        logger.error(f"{args.command}: {e}")
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
