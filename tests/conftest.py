"""
Shared pytest fixtures.
"""

import tempfile

import pytest

from champsim.tournament.storage import SQLiteChampionshipStore


@pytest.fixture
def temp_store():
    """Create a temporary SQLite store for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield SQLiteChampionshipStore(tmpdir)
