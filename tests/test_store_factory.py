"""Unit tests for open_store."""

from pathlib import Path

import pytest

from tango_crm.config import Settings
from tango_crm.errors import StoreError
from tango_crm.store import RestStore, SQLiteStore, open_store


class TestOpenStore:
    """Tests for open_store."""

    def test_default_is_sqlite(self, temp_db: Path) -> None:
        """Default settings open the SQLite file."""
        store = open_store(Settings(db_path=temp_db))
        assert isinstance(store, SQLiteStore)
        assert store.name == "sqlite"

    def test_rest_backend(self) -> None:
        """rest backend uses the configured URL and key."""
        settings = Settings(store_backend="rest", rest_url="https://crm.example.com", rest_api_key="k")
        store = open_store(settings)
        assert isinstance(store, RestStore)
        assert store.name == "rest"

    def test_rest_without_url_raises(self) -> None:
        """rest backend without a URL is a store error."""
        with pytest.raises(StoreError):
            open_store(Settings(store_backend="rest"))

    def test_unknown_backend_raises(self) -> None:
        """Names outside the known backends are rejected."""
        settings = Settings().model_copy(update={"store_backend": "mongo"})
        with pytest.raises(ValueError, match="Unknown store backend"):
            open_store(settings)
