"""
brew-journal: a personal coffee brewing journal.

Records coffees and brewing sessions in a local SQLite database and
suggests recently used values while entering new ones.
"""

__version__ = "0.1.0"
