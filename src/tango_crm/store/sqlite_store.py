"""SQLite-backed document store: one JSON row per record, grouped by collection."""

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from tango_crm.errors import RecordNotFoundError, StoreError

from .base import Store, matches, split_filter_key

logger = logging.getLogger(__name__)


class SQLiteStore(Store):
    """
    Local store for opportunities, clients and activity entries.
    Owner (user_id) equality is pushed into SQL; remaining filters run on the
    decoded records.
    """

    name = "sqlite"

    def __init__(self, db_path: str | Path = "tango_crm.db"):
        self._db_path = Path(db_path)
        self._ensure_schema()

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        with self._session() as conn:
            conn.executescript(schema_path.read_text())

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connection()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self._db_path}: {e}") from e
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise StoreError(f"SQLite error: {e}") from e
        finally:
            conn.close()

    def _serialize(self, record: dict) -> str:
        return json.dumps(record, default=str)

    def _deserialize(self, row: sqlite3.Row) -> dict:
        return json.loads(row["data"])

    def get(self, collection: str, filters: Optional[dict] = None) -> list[dict]:
        sql = "SELECT data FROM records WHERE collection = ?"
        params: list = [collection]
        remaining: dict = {}
        for key, operand in (filters or {}).items():
            field, op = split_filter_key(key)
            if op == "eq" and field in ("id", "user_id") and operand is not None:
                sql += f" AND {field} = ?"
                params.append(operand)
            else:
                remaining[key] = operand
        sql += " ORDER BY created_at DESC"

        with self._session() as conn:
            rows = conn.execute(sql, params).fetchall()
        records = [self._deserialize(r) for r in rows]
        return [r for r in records if matches(r, remaining)]

    def insert(self, collection: str, record: dict) -> dict:
        stored = dict(record)
        stored.setdefault("id", uuid.uuid4().hex)
        with self._session() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO records (id, collection, user_id, data, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        stored["id"],
                        collection,
                        stored.get("user_id"),
                        self._serialize(stored),
                        stored.get("created_at"),
                        stored.get("updated_at"),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise StoreError(f"Duplicate {collection} id: {stored['id']}") from e
        logger.debug("Inserted %s/%s", collection, stored["id"])
        return stored

    def update(
        self,
        collection: str,
        record_id: str,
        patch: dict,
        owner_id: Optional[str] = None,
    ) -> dict:
        with self._session() as conn:
            row = self._fetch_row(conn, collection, record_id, owner_id)
            if row is None:
                raise RecordNotFoundError(collection, record_id)
            merged = {**self._deserialize(row), **patch, "id": record_id}
            conn.execute(
                """
                UPDATE records SET data = ?, user_id = ?, updated_at = ?
                WHERE collection = ? AND id = ?
                """,
                (
                    self._serialize(merged),
                    merged.get("user_id"),
                    merged.get("updated_at"),
                    collection,
                    record_id,
                ),
            )
        return merged

    def delete(self, collection: str, record_id: str, owner_id: Optional[str] = None) -> None:
        sql = "DELETE FROM records WHERE collection = ? AND id = ?"
        params: list = [collection, record_id]
        if owner_id is not None:
            sql += " AND user_id = ?"
            params.append(owner_id)
        with self._session() as conn:
            cursor = conn.execute(sql, params)
            deleted = cursor.rowcount
        if not deleted:
            raise RecordNotFoundError(collection, record_id)

    def _fetch_row(
        self,
        conn: sqlite3.Connection,
        collection: str,
        record_id: str,
        owner_id: Optional[str],
    ) -> Optional[sqlite3.Row]:
        sql = "SELECT data FROM records WHERE collection = ? AND id = ?"
        params: list = [collection, record_id]
        if owner_id is not None:
            sql += " AND user_id = ?"
            params.append(owner_id)
        return conn.execute(sql, params).fetchone()
