"""Tests for input suggestion lookups."""

import sqlite3

import pytest

from brew_journal.models import Brewing, Coffee, JournalDatabase, StorageError
from brew_journal.suggestions import DEFAULT_SUGGESTION_LIMIT, InputSuggestions


def add_coffee(db: JournalDatabase, name: str, roaster: str = "Roaster") -> int:
    return db.insert_coffee(Coffee(name=name, roaster=roaster))


def log_brewing(
    db: JournalDatabase,
    coffee_id: int,
    method: str = "V60",
    grinder: str = "Comandante",
    coffee_grams: int = 15,
    water_grams: int = 250,
) -> int:
    return db.insert_brewing(
        Brewing(
            coffee_id=coffee_id,
            method_name=method,
            grinder_name=grinder,
            coffee_grams=coffee_grams,
            water_grams=water_grams,
        )
    )


class TestRecentNames:
    """Coffee, method and grinder name suggestions."""

    def test_empty_journal(self, db):
        """No brewings means no suggestions."""
        suggestions = InputSuggestions(db)

        assert suggestions.recent_coffee_names(10) == []
        assert suggestions.recent_brewing_method_names(10) == []
        assert suggestions.recent_grinder_names(10) == []

    def test_coffee_names_distinct_most_recent_first(self, db):
        """A re-brewed coffee moves to the front and appears once."""
        a = add_coffee(db, "A")
        b = add_coffee(db, "B")
        c = add_coffee(db, "C")
        log_brewing(db, a)
        log_brewing(db, b)
        log_brewing(db, c)
        log_brewing(db, a)

        assert InputSuggestions(db).recent_coffee_names(10) == ["A", "C", "B"]

    def test_coffee_names_only_from_brewings(self, db):
        """Coffees that were never brewed are not suggested."""
        a = add_coffee(db, "Brewed")
        add_coffee(db, "Never brewed")
        log_brewing(db, a)

        assert InputSuggestions(db).recent_coffee_names(10) == ["Brewed"]

    def test_same_name_under_two_roasters_appears_once(self, db):
        """Names are deduplicated even when they belong to different coffees."""
        first = add_coffee(db, "Ethiopia Guji", "R1")
        second = add_coffee(db, "Ethiopia Guji", "R2")
        log_brewing(db, first)
        log_brewing(db, second)

        assert InputSuggestions(db).recent_coffee_names(10) == ["Ethiopia Guji"]

    def test_method_names(self, db):
        coffee_id = add_coffee(db, "A")
        log_brewing(db, coffee_id, method="V60")
        log_brewing(db, coffee_id, method="Aeropress")
        log_brewing(db, coffee_id, method="Espresso")
        log_brewing(db, coffee_id, method="V60")

        assert InputSuggestions(db).recent_brewing_method_names(10) == [
            "V60",
            "Espresso",
            "Aeropress",
        ]

    def test_grinder_names(self, db):
        coffee_id = add_coffee(db, "A")
        log_brewing(db, coffee_id, grinder="Comandante")
        log_brewing(db, coffee_id, grinder="Niche Zero")
        log_brewing(db, coffee_id, grinder="Niche Zero")

        assert InputSuggestions(db).recent_grinder_names(10) == ["Niche Zero", "Comandante"]

    def test_recency_not_alphabetical(self, db):
        """Ordering follows insertion, whatever the names."""
        coffee_id = add_coffee(db, "A")
        for method in ("Zebra", "Alpha", "Middle"):
            log_brewing(db, coffee_id, method=method)

        assert InputSuggestions(db).recent_brewing_method_names(10) == ["Middle", "Alpha", "Zebra"]

    @pytest.mark.parametrize("limit", [1, 2, 3])
    def test_respects_limit(self, db, limit):
        """At most `limit` values, all distinct."""
        coffee_id = add_coffee(db, "A")
        for grinder in ("G1", "G2", "G3", "G4", "G2"):
            log_brewing(db, coffee_id, grinder=grinder)

        names = InputSuggestions(db).recent_grinder_names(limit)

        assert len(names) == limit
        assert len(set(names)) == limit
        assert names == ["G2", "G4", "G3"][:limit]


class TestRecentWeights:
    """Weight suggestions filtered by method and grinder."""

    def test_coffee_weights_most_recent_first(self, db):
        """15, 18, 15 gives [15, 18]: the last 15 takes the front."""
        coffee_id = add_coffee(db, "A")
        for grams in (15, 18, 15):
            log_brewing(db, coffee_id, method="V60", grinder="Comandante", coffee_grams=grams)

        weights = InputSuggestions(db).recent_coffee_weights("V60", "Comandante", 10)

        assert weights == [15, 18]

    def test_coffee_weights_require_both_names(self, db):
        """Same method on another grinder (or vice versa) is excluded."""
        coffee_id = add_coffee(db, "A")
        log_brewing(db, coffee_id, method="V60", grinder="Comandante", coffee_grams=15)
        log_brewing(db, coffee_id, method="V60", grinder="Timemore", coffee_grams=20)
        log_brewing(db, coffee_id, method="Aeropress", grinder="Comandante", coffee_grams=12)

        suggestions = InputSuggestions(db)

        assert suggestions.recent_coffee_weights("V60", "Comandante", 10) == [15]
        assert suggestions.recent_coffee_weights("V60", "Timemore", 10) == [20]
        assert suggestions.recent_coffee_weights("Aeropress", "Timemore", 10) == []

    def test_weights_match_case_sensitively(self, db):
        coffee_id = add_coffee(db, "A")
        log_brewing(db, coffee_id, method="V60", grinder="Comandante", coffee_grams=15)

        suggestions = InputSuggestions(db)

        assert suggestions.recent_coffee_weights("v60", "Comandante", 10) == []
        assert suggestions.recent_coffee_weights("V60", "comandante", 10) == []

    def test_water_weights(self, db):
        coffee_id = add_coffee(db, "A")
        for water in (250, 300, 250, 240):
            log_brewing(db, coffee_id, water_grams=water)
        log_brewing(db, coffee_id, grinder="Other", water_grams=500)

        weights = InputSuggestions(db).recent_water_weights("V60", "Comandante", 10)

        assert weights == [240, 250, 300]

    def test_weights_are_ints(self, db):
        coffee_id = add_coffee(db, "A")
        log_brewing(db, coffee_id, coffee_grams=18, water_grams=36)

        suggestions = InputSuggestions(db)

        assert suggestions.recent_coffee_weights("V60", "Comandante", 1) == [18]
        assert suggestions.recent_water_weights("V60", "Comandante", 1) == [36]

    def test_weights_respect_limit(self, db):
        coffee_id = add_coffee(db, "A")
        for grams in (14, 15, 16, 17):
            log_brewing(db, coffee_id, coffee_grams=grams)

        assert InputSuggestions(db).recent_coffee_weights("V60", "Comandante", 2) == [17, 16]


class TestRecentRoasters:
    """Roaster suggestions for a coffee name."""

    def test_most_recently_added_first(self, db):
        add_coffee(db, "A", "R1")
        add_coffee(db, "A", "R2")

        assert InputSuggestions(db).recent_coffee_roasters("A", 10) == ["R2", "R1"]

    def test_duplicates_preserved(self, db):
        """Adding the same coffee twice lists its roaster twice."""
        add_coffee(db, "A", "R1")
        add_coffee(db, "A", "R2")
        add_coffee(db, "A", "R1")

        assert InputSuggestions(db).recent_coffee_roasters("A", 10) == ["R1", "R2", "R1"]

    def test_other_names_excluded(self, db):
        add_coffee(db, "A", "R1")
        add_coffee(db, "B", "R2")

        assert InputSuggestions(db).recent_coffee_roasters("A", 10) == ["R1"]
        assert InputSuggestions(db).recent_coffee_roasters("C", 10) == []

    def test_does_not_need_brewings(self, db):
        """Roasters come from the coffees themselves."""
        add_coffee(db, "A", "R1")

        assert InputSuggestions(db).recent_coffee_roasters("A", 10) == ["R1"]

    def test_respects_limit(self, db):
        for roaster in ("R1", "R2", "R3"):
            add_coffee(db, "A", roaster)

        assert InputSuggestions(db).recent_coffee_roasters("A", 2) == ["R3", "R2"]


class TestLimits:
    """Limit handling shared by every lookup."""

    def test_zero_limit_uses_default(self, db):
        """limit=0 returns the default count, not zero rows."""
        coffee_id = add_coffee(db, "A")
        for method in ("M1", "M2", "M3", "M4"):
            log_brewing(db, coffee_id, method=method)

        suggestions = InputSuggestions(db, default_limit=3)

        assert suggestions.recent_brewing_method_names(0) == ["M4", "M3", "M2"]

    def test_zero_limit_on_every_lookup(self, db):
        coffee_id = add_coffee(db, "A", "R1")
        log_brewing(db, coffee_id)

        suggestions = InputSuggestions(db)

        assert suggestions.recent_coffee_names(0) == ["A"]
        assert suggestions.recent_brewing_method_names(0) == ["V60"]
        assert suggestions.recent_grinder_names(0) == ["Comandante"]
        assert suggestions.recent_coffee_weights("V60", "Comandante", 0) == [15]
        assert suggestions.recent_water_weights("V60", "Comandante", 0) == [250]
        assert suggestions.recent_coffee_roasters("A", 0) == ["R1"]

    def test_default_limit_value(self, db):
        assert InputSuggestions(db).default_limit == DEFAULT_SUGGESTION_LIMIT

    def test_negative_limit_rejected(self, db):
        with pytest.raises(ValueError):
            InputSuggestions(db).recent_coffee_names(-1)

    def test_invalid_default_limit_rejected(self, db):
        with pytest.raises(ValueError):
            InputSuggestions(db, default_limit=0)


class TestFailures:
    """Storage failures and read-only behavior."""

    def test_error_names_failed_lookup(self, tmp_path):
        """A database without the schema fails with the lookup's name."""
        suggestions = InputSuggestions(JournalDatabase(tmp_path / "empty.db"))

        with pytest.raises(StorageError) as exc_info:
            suggestions.recent_grinder_names(5)

        assert exc_info.value.operation == "recent_grinder_names"
        assert "recent_grinder_names" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)

    def test_weight_error_names_lookup(self, tmp_path):
        suggestions = InputSuggestions(JournalDatabase(tmp_path / "empty.db"))

        with pytest.raises(StorageError) as exc_info:
            suggestions.recent_water_weights("V60", "Comandante", 5)

        assert exc_info.value.operation == "recent_water_weights"

    def test_lookups_do_not_write(self, db, db_path):
        coffee_id = add_coffee(db, "A", "R1")
        log_brewing(db, coffee_id)

        def counts():
            conn = sqlite3.connect(db_path)
            try:
                return [
                    conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                    for table in ("coffees", "brewing_methods", "grinders", "brewings")
                ]
            finally:
                conn.close()

        before = counts()
        suggestions = InputSuggestions(db)
        suggestions.recent_coffee_names(5)
        suggestions.recent_coffee_weights("Unknown", "Unknown", 5)
        suggestions.recent_coffee_roasters("Unknown", 5)

        assert counts() == before
