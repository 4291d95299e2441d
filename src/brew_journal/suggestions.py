"""
Input suggestions for the entry workflows.

Each lookup reads the brewing history and returns the values the user is
most likely to type next, most recently used first. Recency is the row id,
never a timestamp or alphabetical order.
"""

import logging
from typing import Any

from .models import JournalDatabase

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_LIMIT = 5

# Distinct values, ordered by the latest brewing that used them.
RECENT_COFFEE_NAMES_SQL = """
    SELECT c.name AS value
    FROM brewings AS b
    INNER JOIN coffees AS c
        ON b.coffee_id = c.id
    GROUP BY c.name
    ORDER BY MAX(b.id) DESC
    LIMIT :limit
"""

RECENT_METHOD_NAMES_SQL = """
    SELECT m.name AS value
    FROM brewings AS b
    INNER JOIN brewing_methods AS m
        ON b.method_id = m.id
    GROUP BY m.name
    ORDER BY MAX(b.id) DESC
    LIMIT :limit
"""

RECENT_GRINDER_NAMES_SQL = """
    SELECT g.name AS value
    FROM brewings AS b
    INNER JOIN grinders AS g
        ON b.grinder_id = g.id
    GROUP BY g.name
    ORDER BY MAX(b.id) DESC
    LIMIT :limit
"""

RECENT_WEIGHTS_SQL = """
    SELECT b.{column} AS value
    FROM brewings AS b
    INNER JOIN brewing_methods AS m
        ON b.method_id = m.id
    INNER JOIN grinders AS g
        ON b.grinder_id = g.id
    WHERE m.name = :method_name AND g.name = :grinder_name
    GROUP BY b.{column}
    ORDER BY MAX(b.id) DESC
    LIMIT :limit
"""

# Not deduplicated: the same name may have been added under several roasters,
# or several times under one.
ROASTERS_BY_COFFEE_NAME_SQL = """
    SELECT roaster AS value
    FROM coffees
    WHERE name = :coffee_name
    ORDER BY id DESC
    LIMIT :limit
"""


class InputSuggestions:
    """Read-only lookups that pre-fill the interactive prompts."""

    def __init__(self, db: JournalDatabase, default_limit: int = DEFAULT_SUGGESTION_LIMIT):
        if default_limit < 1:
            raise ValueError(f"default_limit must be at least 1, got {default_limit}")
        self.db = db
        self.default_limit = default_limit

    def _resolve_limit(self, limit: int) -> int:
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        return limit or self.default_limit

    def _fetch_values(self, operation: str, sql: str, params: dict[str, Any]) -> list[Any]:
        params = {**params, "limit": self._resolve_limit(params["limit"])}
        with self.db.transaction(operation) as conn:
            rows = conn.execute(sql, params).fetchall()
        values = [row["value"] for row in rows]
        logger.debug(f"{operation}: {len(values)} suggestion(s)")
        return values

    def recent_coffee_names(self, limit: int = 0) -> list[str]:
        """Distinct names of recently brewed coffees."""
        return self._fetch_values(
            "recent_coffee_names",
            RECENT_COFFEE_NAMES_SQL,
            {"limit": limit},
        )

    def recent_brewing_method_names(self, limit: int = 0) -> list[str]:
        """Distinct names of recently used brewing methods."""
        return self._fetch_values(
            "recent_brewing_method_names",
            RECENT_METHOD_NAMES_SQL,
            {"limit": limit},
        )

    def recent_grinder_names(self, limit: int = 0) -> list[str]:
        """Distinct names of recently used grinders."""
        return self._fetch_values(
            "recent_grinder_names",
            RECENT_GRINDER_NAMES_SQL,
            {"limit": limit},
        )

    def recent_coffee_weights(self, method_name: str, grinder_name: str, limit: int = 0) -> list[int]:
        """
        Distinct coffee doses (grams) used with this method and grinder.

        Both names must match exactly; a brewing with the same method on
        another grinder does not count.
        """
        return self._fetch_values(
            "recent_coffee_weights",
            RECENT_WEIGHTS_SQL.format(column="coffee_grams"),
            {"method_name": method_name, "grinder_name": grinder_name, "limit": limit},
        )

    def recent_water_weights(self, method_name: str, grinder_name: str, limit: int = 0) -> list[int]:
        """Distinct water weights (grams) used with this method and grinder."""
        return self._fetch_values(
            "recent_water_weights",
            RECENT_WEIGHTS_SQL.format(column="water_grams"),
            {"method_name": method_name, "grinder_name": grinder_name, "limit": limit},
        )

    def recent_coffee_roasters(self, coffee_name: str, limit: int = 0) -> list[str]:
        """Roasters of coffees added under this name, newest coffee first."""
        return self._fetch_values(
            "recent_coffee_roasters",
            ROASTERS_BY_COFFEE_NAME_SQL,
            {"coffee_name": coffee_name, "limit": limit},
        )
