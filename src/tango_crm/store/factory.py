"""Store adapter selection from settings."""

import logging

from tango_crm.config import Settings

from .base import Store
from .rest_store import RestStore
from .sqlite_store import SQLiteStore

logger = logging.getLogger(__name__)

BACKENDS = ("sqlite", "rest")


def open_store(settings: Settings) -> Store:
    """
    Adapter named by settings.store_backend: the local SQLite file at db_path,
    or the hosted REST API at rest_url. Raises ValueError for any other name.
    """
    backend = settings.store_backend.lower()
    if backend == "sqlite":
        return SQLiteStore(settings.db_path)
    if backend == "rest":
        logger.debug("Using REST store at %s", settings.rest_url)
        return RestStore(settings.rest_url or "", api_key=settings.rest_api_key)
    raise ValueError(f"Unknown store backend: {settings.store_backend}. Available: {list(BACKENDS)}")
