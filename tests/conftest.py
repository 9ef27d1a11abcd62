"""Shared fixtures: a migrated on-disk database and tournaments on it."""

import logging

import pytest

from tourney.db import Database
from tourney.tournament import Tournament


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "test.db")
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def tournament(db):
    return Tournament(db.conn)


@pytest.fixture
def stepwise(db):
    """Tournament that commits the match result and each team update separately."""
    return Tournament(db.conn, atomic_results=False)


@pytest.fixture
def restore_logging():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield root
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
