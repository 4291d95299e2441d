"""
Schema migrations for the journal database.

Each migration is a numbered SQL file in this directory
(e.g. 0002_add_tasting_notes.sql), applied once, in numeric order, and
recorded in the schema_migrations table.
"""

import logging
import re
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_FILE_RE = re.compile(r"^(\d+)_\w+\.sql$")


@dataclass(frozen=True)
class Migration:
    """A numbered SQL migration file."""

    version: int
    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    def apply(self, conn: sqlite3.Connection) -> None:
        """Run the script and record its version."""
        conn.executescript(self.path.read_text())
        conn.execute(
            "INSERT INTO schema_migrations (version, applied_ts) VALUES (?, ?)",
            (self.version, datetime.now(UTC).isoformat()),
        )
        conn.commit()


def get_migrations() -> list[Migration]:
    """All migrations shipped with the package, oldest first."""
    migrations = []
    for path in MIGRATIONS_DIR.glob("*.sql"):
        match = MIGRATION_FILE_RE.match(path.name)
        if match:
            migrations.append(Migration(version=int(match.group(1)), path=path))
    return sorted(migrations, key=lambda m: m.version)


def get_applied_versions(conn: sqlite3.Connection) -> set[int]:
    """Versions already recorded in schema_migrations."""
    try:
        cursor = conn.execute("SELECT version FROM schema_migrations")
    except sqlite3.OperationalError:
        # No schema_migrations table: nothing applied yet
        return set()
    return {row[0] for row in cursor.fetchall()}


def run_migrations(db_path: Path, verbose: bool = True) -> list[int]:
    """
    Bring the journal database up to the latest schema.

    Creates the database file (and its directory) when missing.
    Returns the versions applied by this call.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    applied = []

    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version INTEGER PRIMARY KEY,
                applied_ts TEXT NOT NULL
            )
        """)
        conn.commit()

        already_applied = get_applied_versions(conn)

        for migration in get_migrations():
            if migration.version in already_applied:
                if verbose:
                    print(f"  Skipping migration {migration.version} (already applied)")
                continue

            if verbose:
                print(f"  Applying migration {migration.version}: {migration.name}")
            migration.apply(conn)
            logger.info(f"Applied migration {migration.version} to {db_path}")
            applied.append(migration.version)

        if verbose and not applied:
            print("  No new migrations to apply.")

    finally:
        conn.close()

    return applied


def get_current_version(db_path: Path) -> int:
    """Latest applied version, or 0 for a missing or empty database."""
    if not db_path.exists():
        return 0

    conn = sqlite3.connect(db_path)
    try:
        return max(get_applied_versions(conn), default=0)
    finally:
        conn.close()
