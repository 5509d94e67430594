"""Shared fixtures: an in-memory record store seeded with nested content."""

from pathlib import Path

import pytest

from fluxtree.core.types import COLPOS_FLUXCONTENT
from fluxtree.metadata.loader import TableLoader
from fluxtree.persistence.sqlite import SQLiteAdapter
from fluxtree.providers.registry import ProviderRegistry

METADATA_PATH = Path(__file__).parent.parent / "metadata"


@pytest.fixture(autouse=True)
def clear_provider_registry():
    """Clear provider registry before and after each test."""
    ProviderRegistry.clear()
    yield
    ProviderRegistry.clear()


@pytest.fixture
def tables():
    loader = TableLoader(METADATA_PATH)
    loader.load_all()
    return loader


@pytest.fixture
def store(tables):
    """In-memory store with every configured table created."""
    adapter = SQLiteAdapter(":memory:")
    adapter.connect()
    for table in tables.tables.values():
        adapter.initialize_table(table)
    yield adapter
    adapter.close()


@pytest.fixture
def add(store):
    """Insert a tt_content row on page 1."""

    def _add(uid, **fields):
        return store.insert("tt_content", {"uid": uid, "pid": 1, **fields})

    return _add


@pytest.fixture
def nested(add):
    """10 contains 11, 11 contains 12, 12 contains 13; 30 is an unrelated top-level record."""
    add(10, sorting=256)
    add(11, tx_flux_parent=10, tx_flux_column="main", colPos=COLPOS_FLUXCONTENT, sorting=256)
    add(12, tx_flux_parent=11, tx_flux_column="main", colPos=COLPOS_FLUXCONTENT, sorting=256)
    add(13, tx_flux_parent=12, tx_flux_column="main", colPos=COLPOS_FLUXCONTENT, sorting=256)
    add(30, sorting=512)


def snapshot(store, table="tt_content"):
    """All rows of a table, for asserting nothing was written."""
    return store.query(table)
