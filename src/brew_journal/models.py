"""
Data models and database operations for brew-journal.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A storage operation failed; ``operation`` names the one that did."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


@dataclass
class Coffee:
    """A coffee in the user's collection."""

    name: str
    roaster: str
    region: str = ""
    variety: str = ""
    process: str = ""
    decaf: bool = False
    id: int | None = None
    added_ts: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Coffee":
        return cls(
            id=row["id"],
            name=row["name"],
            roaster=row["roaster"],
            region=row["region"] or "",
            variety=row["variety"] or "",
            process=row["process"] or "",
            decaf=bool(row["decaf"]),
            added_ts=row["added_ts"],
        )


@dataclass
class BrewingMethod:
    """A brewing method such as "V60" or "espresso"."""

    name: str
    id: int | None = None


@dataclass
class Grinder:
    """A coffee grinder."""

    name: str
    id: int | None = None


@dataclass
class Brewing:
    """A single brewing session.

    Method and grinder are referenced by name; their rows are created on
    first use when the brewing is inserted.
    """

    coffee_id: int
    method_name: str
    grinder_name: str
    coffee_grams: int
    water_grams: int
    id: int | None = None
    brewed_ts: str | None = None


@dataclass
class BrewingRecord:
    """A brewing joined with its coffee, method and grinder, for display."""

    id: int
    coffee_name: str
    roaster: str
    method_name: str
    grinder_name: str
    coffee_grams: int
    water_grams: int
    brewed_ts: str

    @property
    def ratio(self) -> float:
        """Water-to-coffee ratio (e.g. 16.7 for 15g:250g)."""
        return round(self.water_grams / self.coffee_grams, 1)


class JournalDatabase:
    """Database operations for the brewing journal."""

    def __init__(self, db_path: Path):
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        # Transactions are managed explicitly in transaction()
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            conn.execute("ROLLBACK")

    @contextmanager
    def transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        """
        Run a block of statements atomically.

        Commits when the block finishes, rolls back on any exception
        (including KeyboardInterrupt) and always closes the connection.
        sqlite3 errors are re-raised as StorageError naming ``operation``.
        """
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise StorageError(operation, e) from e

        try:
            conn.execute("BEGIN")
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback(conn)
            logger.debug(f"Rolled back {operation}: {e}")
            raise StorageError(operation, e) from e
        except BaseException:
            self._rollback(conn)
            raise
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Coffees
    # -------------------------------------------------------------------------

    def insert_coffee(self, coffee: Coffee) -> int:
        """Insert a coffee and return its id."""
        added_ts = coffee.added_ts or datetime.now(UTC).isoformat()
        with self.transaction("insert_coffee") as conn:
            cursor = conn.execute(
                """
                INSERT INTO coffees (name, roaster, region, variety, process, decaf, added_ts)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    coffee.name,
                    coffee.roaster,
                    coffee.region,
                    coffee.variety,
                    coffee.process,
                    1 if coffee.decaf else 0,
                    added_ts,
                ),
            )
            coffee_id = cursor.lastrowid

        logger.info(f"Inserted coffee {coffee_id}: {coffee.name} ({coffee.roaster})")
        return coffee_id

    def get_coffee_id(self, name: str, roaster: str) -> int | None:
        """Get the most recently added coffee with this name and roaster."""
        with self.transaction("get_coffee_id") as conn:
            row = conn.execute(
                """
                SELECT id FROM coffees
                WHERE name = ? AND roaster = ?
                ORDER BY id DESC
                LIMIT 1
                """,
                (name, roaster),
            ).fetchone()
        return row["id"] if row else None

    def get_coffees_by_last_added(self, limit: int) -> list[Coffee]:
        """Get coffees, most recently added first."""
        with self.transaction("get_coffees_by_last_added") as conn:
            rows = conn.execute(
                "SELECT * FROM coffees ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [Coffee.from_row(row) for row in rows]

    # -------------------------------------------------------------------------
    # Reference rows
    # -------------------------------------------------------------------------

    @staticmethod
    def _upsert_reference(conn: sqlite3.Connection, table: str, name: str) -> int:
        """Return the id of the named row in ``table``, creating it if absent."""
        conn.execute(
            f"INSERT INTO {table} (name) VALUES (?) ON CONFLICT(name) DO NOTHING",
            (name,),
        )
        row = conn.execute(f"SELECT id FROM {table} WHERE name = ?", (name,)).fetchone()
        return row["id"]

    def insert_brewing_method(self, name: str) -> int:
        """Insert a brewing method (or reuse the existing one) and return its id."""
        with self.transaction("insert_brewing_method") as conn:
            return self._upsert_reference(conn, "brewing_methods", name)

    def insert_grinder(self, name: str) -> int:
        """Insert a grinder (or reuse the existing one) and return its id."""
        with self.transaction("insert_grinder") as conn:
            return self._upsert_reference(conn, "grinders", name)

    def get_brewing_methods(self) -> list[BrewingMethod]:
        with self.transaction("get_brewing_methods") as conn:
            rows = conn.execute("SELECT id, name FROM brewing_methods ORDER BY id").fetchall()
        return [BrewingMethod(id=row["id"], name=row["name"]) for row in rows]

    def get_grinders(self) -> list[Grinder]:
        with self.transaction("get_grinders") as conn:
            rows = conn.execute("SELECT id, name FROM grinders ORDER BY id").fetchall()
        return [Grinder(id=row["id"], name=row["name"]) for row in rows]

    # -------------------------------------------------------------------------
    # Brewings
    # -------------------------------------------------------------------------

    def insert_brewing(self, brewing: Brewing) -> int:
        """
        Insert a brewing session and return its id.

        The method and grinder rows are upserted in the same transaction, so
        a failed insert (e.g. an unknown coffee id) leaves no new reference
        rows behind.
        """
        brewed_ts = brewing.brewed_ts or datetime.now(UTC).isoformat()
        with self.transaction("insert_brewing") as conn:
            method_id = self._upsert_reference(conn, "brewing_methods", brewing.method_name)
            grinder_id = self._upsert_reference(conn, "grinders", brewing.grinder_name)
            cursor = conn.execute(
                """
                INSERT INTO brewings
                    (coffee_id, method_id, grinder_id, coffee_grams, water_grams, brewed_ts)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    brewing.coffee_id,
                    method_id,
                    grinder_id,
                    brewing.coffee_grams,
                    brewing.water_grams,
                    brewed_ts,
                ),
            )
            brewing_id = cursor.lastrowid

        logger.info(
            f"Inserted brewing {brewing_id}: coffee {brewing.coffee_id}, "
            f"{brewing.method_name}/{brewing.grinder_name}, "
            f"{brewing.coffee_grams}g:{brewing.water_grams}g"
        )
        return brewing_id

    def get_brewings_by_last_added(self, limit: int) -> list[BrewingRecord]:
        """Get brewing sessions with their names resolved, most recent first."""
        with self.transaction("get_brewings_by_last_added") as conn:
            rows = conn.execute(
                """
                SELECT
                    b.id,
                    c.name AS coffee_name,
                    c.roaster,
                    m.name AS method_name,
                    g.name AS grinder_name,
                    b.coffee_grams,
                    b.water_grams,
                    b.brewed_ts
                FROM brewings AS b
                INNER JOIN coffees AS c ON b.coffee_id = c.id
                INNER JOIN brewing_methods AS m ON b.method_id = m.id
                INNER JOIN grinders AS g ON b.grinder_id = g.id
                ORDER BY b.id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [BrewingRecord(**dict(row)) for row in rows]
