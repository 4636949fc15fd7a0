"""Pytest fixtures for tango-crm tests."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from tango_crm.clock import FixedClock
from tango_crm.config import Settings
from tango_crm.opportunities import OpportunityService
from tango_crm.store import SQLiteStore

# Saturday 2025-03-15 08:00 in New York (EDT), 12:00 UTC
NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_db() -> Path:
    """Temporary database path for isolated tests."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    path.unlink(missing_ok=True)


@pytest.fixture
def store(temp_db: Path) -> SQLiteStore:
    """SQLiteStore with temporary database."""
    return SQLiteStore(temp_db)


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at NOW."""
    return FixedClock(NOW)


@pytest.fixture
def settings(temp_db: Path) -> Settings:
    """Default settings pointed at the temporary database."""
    return Settings(db_path=temp_db)


@pytest.fixture
def service(store: SQLiteStore, clock: FixedClock, settings: Settings) -> OpportunityService:
    """OpportunityService over the temporary store and frozen clock."""
    return OpportunityService(store, clock=clock, settings=settings)
