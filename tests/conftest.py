import pytest

from intermaint.models import Snapshot
from intermaint.services.store import Store


@pytest.fixture
def store(tmp_path):
    """A seeded store backed by its own SQLite file."""
    return Store.open(tmp_path / "app.db")


@pytest.fixture
def empty_store(tmp_path):
    """A store with no items, warehouses or permissions."""
    s = Store.open(tmp_path / "app.db")
    s.snapshot = Snapshot()
    s.save()
    return s
