"""Persistence port and its SQLite and REST adapters."""

from tango_crm.store.base import Store, matches
from tango_crm.store.factory import BACKENDS, open_store
from tango_crm.store.rest_store import RestStore
from tango_crm.store.sqlite_store import SQLiteStore

__all__ = [
    "BACKENDS",
    "RestStore",
    "SQLiteStore",
    "Store",
    "matches",
    "open_store",
]
