"""Store adapter for a hosted PostgREST / Supabase REST API."""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from tango_crm.dates.normalizer import format_utc
from tango_crm.errors import RecordNotFoundError, StoreError

from .base import Store, split_filter_key

logger = logging.getLogger(__name__)


def _literal(value: Any) -> str:
    """Render a filter operand the way PostgREST expects it in a query string."""
    if isinstance(value, datetime):
        return format_utc(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_params(filters: Optional[dict]) -> list[tuple[str, str]]:
    """
    Translate store filters into PostgREST query parameters:
    field -> eq., field__in -> in.(), field__gte -> gte., field__lte -> lte.
    """
    params: list[tuple[str, str]] = []
    for key, operand in (filters or {}).items():
        field, op = split_filter_key(key)
        if op == "eq":
            params.append((field, "is.null" if operand is None else f"eq.{_literal(operand)}"))
        elif op == "in":
            joined = ",".join(_literal(v) for v in operand)
            params.append((field, f"in.({joined})"))
        else:
            params.append((field, f"{op}.{_literal(operand)}"))
    return params


class RestStore(Store):
    """
    Reads and writes collections as tables under {base_url}/rest/v1/.
    Every write asks for the affected rows back (Prefer: return=representation).
    """

    name = "rest"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        if not base_url:
            raise StoreError("REST store requires a base URL")
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        if api_key:
            self._headers["apikey"] = api_key
            self._headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.Client(timeout=30.0)

    def _url(self, collection: str) -> str:
        return f"{self._base_url}/rest/v1/{collection}"

    def _request(
        self,
        method: str,
        collection: str,
        params: Optional[list[tuple[str, str]]] = None,
        json: Any = None,
    ) -> list[dict]:
        try:
            response = self._client.request(
                method,
                self._url(collection),
                params=params,
                json=json,
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{method} {collection} failed: HTTP {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {collection} failed: {e}") from e
        if not response.content:
            return []
        body = response.json()
        return body if isinstance(body, list) else [body]

    def get(self, collection: str, filters: Optional[dict] = None) -> list[dict]:
        params = [("select", "*"), *build_params(filters)]
        return self._request("GET", collection, params=params)

    def insert(self, collection: str, record: dict) -> dict:
        rows = self._request("POST", collection, json=record)
        if not rows:
            raise StoreError(f"Insert into {collection} returned no row")
        logger.debug("Inserted %s/%s", collection, rows[0].get("id"))
        return rows[0]

    def update(
        self,
        collection: str,
        record_id: str,
        patch: dict,
        owner_id: Optional[str] = None,
    ) -> dict:
        rows = self._request("PATCH", collection, params=self._id_params(record_id, owner_id), json=patch)
        if not rows:
            raise RecordNotFoundError(collection, record_id)
        return rows[0]

    def delete(self, collection: str, record_id: str, owner_id: Optional[str] = None) -> None:
        rows = self._request("DELETE", collection, params=self._id_params(record_id, owner_id))
        if not rows:
            raise RecordNotFoundError(collection, record_id)

    def _id_params(self, record_id: str, owner_id: Optional[str]) -> list[tuple[str, str]]:
        filters: dict = {"id": record_id}
        if owner_id is not None:
            filters["user_id"] = owner_id
        return build_params(filters)
