"""
Pytest configuration for cricket-stats tests.
"""

import os

import pytest

from cricket_stats.database import build_engine, configure_engine, create_tables

# Rich consoles are created at CLI import time; give them a wide terminal so
# CliRunner output tables are not truncated to the 80-column default.
os.environ["COLUMNS"] = "200"


@pytest.fixture
def db(tmp_path):
    """Point the package at a fresh SQLite file for one test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'cricket_stats_test.db'}")
    configure_engine(engine)
    create_tables()
    yield engine
    configure_engine(None)
    engine.dispose()
