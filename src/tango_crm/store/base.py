"""Abstract persistence port and the filter vocabulary shared by adapters."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from tango_crm.dates.normalizer import parse_utc

FILTER_OPERATORS = ("in", "gte", "lte")


def split_filter_key(key: str) -> tuple[str, str]:
    """'created_at__gte' -> ('created_at', 'gte'); plain keys are equality ('eq')."""
    field, sep, op = key.rpartition("__")
    if sep and op in FILTER_OPERATORS:
        return field, op
    return key, "eq"


def _comparable(value: Any, operand: Any) -> tuple[Any, Any]:
    """Datetime operands are compared against the record value parsed as UTC."""
    if isinstance(operand, datetime):
        return parse_utc(value), parse_utc(operand)
    return value, operand


def matches(record: dict, filters: Optional[dict]) -> bool:
    """True when the record satisfies every filter."""
    for key, operand in (filters or {}).items():
        field, op = split_filter_key(key)
        value = record.get(field)
        if op == "eq":
            if value != operand:
                return False
        elif op == "in":
            if value not in operand:
                return False
        else:
            left, right = _comparable(value, operand)
            if left is None or right is None:
                return False
            try:
                if op == "gte" and not left >= right:
                    return False
                if op == "lte" and not left <= right:
                    return False
            except TypeError:
                return False
    return True


class Store(ABC):
    """
    Document-style store of records grouped into named collections
    (opportunities, clients, opportunity_activities). Records are plain dicts
    keyed by "id". Owner scope is passed in by the caller, either as a
    "user_id" filter or as owner_id on writes.
    """

    name: str = ""

    @abstractmethod
    def get(self, collection: str, filters: Optional[dict] = None) -> list[dict]:
        """
        Records matching all filters. Keys are field names for equality, or
        field__in, field__gte, field__lte.
        """
        pass

    @abstractmethod
    def insert(self, collection: str, record: dict) -> dict:
        """Insert a record and return it as stored."""
        pass

    @abstractmethod
    def update(
        self,
        collection: str,
        record_id: str,
        patch: dict,
        owner_id: Optional[str] = None,
    ) -> dict:
        """Apply patch to one record and return the merged record. Raises RecordNotFoundError."""
        pass

    @abstractmethod
    def delete(self, collection: str, record_id: str, owner_id: Optional[str] = None) -> None:
        """Delete one record. Raises RecordNotFoundError."""
        pass

    def get_one(self, collection: str, record_id: str, owner_id: Optional[str] = None) -> Optional[dict]:
        """Single record by id, optionally scoped to an owner; None if absent."""
        filters: dict = {"id": record_id}
        if owner_id is not None:
            filters["user_id"] = owner_id
        rows = self.get(collection, filters)
        return rows[0] if rows else None
