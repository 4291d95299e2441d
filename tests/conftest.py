"""Shared pytest fixtures for brew-journal tests."""

import pytest

from brew_journal.config import DB_PATH_ENV, JournalConfig
from brew_journal.migrations import run_migrations
from brew_journal.models import JournalDatabase


@pytest.fixture(autouse=True)
def clear_db_env(monkeypatch):
    """Keep a developer's BREW_JOURNAL_DB from leaking into tests."""
    monkeypatch.delenv(DB_PATH_ENV, raising=False)


@pytest.fixture
def db_path(tmp_path):
    """Create a temporary database with full schema via migrations.

    Uses the same migration runner as `brew-journal init-db`.
    """
    db_file = tmp_path / "test_journal.db"
    run_migrations(db_file, verbose=False)
    return db_file


@pytest.fixture
def db(db_path):
    return JournalDatabase(db_path)


@pytest.fixture
def config(db_path):
    return JournalConfig(db_path=db_path)
