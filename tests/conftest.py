"""
Pytest configuration and shared fixtures for Rituals tests.
"""

from datetime import datetime
from pathlib import Path
import sys

import pytest


# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from Rituals.category_view import CategoryView  # noqa: E402
from Rituals.overlay_store import (  # noqa: E402
    Catalog,
    Item,
    KVStore,
    Ledger,
    OverlayStore,
    ProgressStore,
)

RITUALS_ENV_VARS = [
    "RITUALS_DB_PATH",
    "RITUALS_CATALOG_PATH",
    "RITUALS_TIMEZONE",
    "RITUALS_RECENT_LIMIT",
    "RITUALS_LOG_DIR",
]


class FixedClock:
    """Callable clock that tests can move forward."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, moment: datetime) -> None:
        self.moment = moment


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep RITUALS_* settings and the error log inside the test sandbox."""
    for name in RITUALS_ENV_VARS:
        # setenv first so teardown removes anything a .env load adds
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("RITUALS_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture
def project_root_path():
    """Return the project root directory path."""
    return project_root


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 5, 3, 9, 30))


@pytest.fixture
def kv():
    store = KVStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def catalog():
    """Two morning items, two evening items and one sleep item."""
    return Catalog([
        Item(id=1, category="morning", text="Morning praise", count=3, source="Bukhari"),
        Item(id=2, category="morning", text="Seek forgiveness", count=1),
        Item(id=3, category="morning", text="Glorification", count=33, benefit="Light"),
        Item(id=4, category="morning", text="Protection", count=3),
        Item(id=5, category="evening", text="Evening praise", count=1),
        Item(id=6, category="evening", text="Evening refuge", count=3),
        Item(id=7, category="sleep", text="Before sleep", count=1),
    ])


@pytest.fixture
def overlay(kv, catalog, clock):
    return OverlayStore(kv, catalog, clock=clock)


@pytest.fixture
def progress(kv, clock):
    return ProgressStore(kv, clock=clock)


@pytest.fixture
def ledger(kv):
    return Ledger(kv)


@pytest.fixture
def view(overlay, progress, ledger):
    return CategoryView(overlay, progress, ledger)
