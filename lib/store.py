# =============================================================================
# lib/store.py - Persistence Store Abstraction
# =============================================================================
# A small table-oriented interface shared by every persistence backend:
# - InMemoryStore: process-local tables (development, tests)
# - SupabaseStore: Supabase/PostgREST tables (see lib/supabase_client.py)
#
# Records are plain dicts with an integer "id" primary key. All operations
# are async so request handlers can await them without blocking other
# requests.
#
# Usage:
#   store = InMemoryStore()
#   brands = store.table("catalog_brands")
#   await brands.insert({"brand": "Azure"})
# =============================================================================

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """
    Error raised by a persistence backend.

    Carries a machine-readable code and, where possible, a hint on how to
    fix the problem.
    """

    def __init__(
        self,
        message: str,
        code: str = "STORE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class Table(ABC):
    """One named collection of records."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def list(
        self,
        limit: int | None = None,
        offset: int = 0,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        """Records matching all equality `filters`, ordered by id."""

    @abstractmethod
    async def count(self, **filters: Any) -> int:
        ...

    @abstractmethod
    async def get(self, record_id: int) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def insert(self, record: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return it with its assigned id."""

    @abstractmethod
    async def update(self, record_id: int, values: dict[str, Any]) -> dict[str, Any] | None:
        """Update a record; returns None if it does not exist."""

    @abstractmethod
    async def delete(self, record_id: int) -> bool:
        ...

    async def first(self, **filters: Any) -> dict[str, Any] | None:
        records = await self.list(limit=1, **filters)
        return records[0] if records else None


class Store(ABC):
    """A set of tables behind one connection."""

    backend = "unknown"

    @abstractmethod
    def table(self, name: str) -> Table:
        ...

    @abstractmethod
    async def ping(self) -> None:
        """Raise StoreError if the backend cannot be reached."""


# =============================================================================
# In-memory backend
# =============================================================================

class InMemoryTable(Table):
    def __init__(self, name: str):
        super().__init__(name)
        self._rows: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    @staticmethod
    def _matches(row: dict[str, Any], filters: dict[str, Any]) -> bool:
        return all(row.get(key) == value for key, value in filters.items())

    async def list(self, limit=None, offset=0, **filters):
        rows = [
            copy.deepcopy(row)
            for _, row in sorted(self._rows.items())
            if self._matches(row, filters)
        ]
        end = None if limit is None else offset + limit
        return rows[offset:end]

    async def count(self, **filters):
        return sum(1 for row in self._rows.values() if self._matches(row, filters))

    async def get(self, record_id):
        row = self._rows.get(record_id)
        return copy.deepcopy(row) if row is not None else None

    async def insert(self, record):
        row = copy.deepcopy(record)
        record_id = row.get("id")
        if record_id is None:
            record_id = self._next_id
            row["id"] = record_id
        elif record_id in self._rows:
            raise StoreError(
                message=f"Duplicate id {record_id} in table {self.name}",
                code="DUPLICATE_KEY",
                details={"table": self.name, "id": record_id},
            )
        self._next_id = max(self._next_id, record_id + 1)
        self._rows[record_id] = row
        return copy.deepcopy(row)

    async def update(self, record_id, values):
        row = self._rows.get(record_id)
        if row is None:
            return None
        row.update({k: copy.deepcopy(v) for k, v in values.items() if k != "id"})
        return copy.deepcopy(row)

    async def delete(self, record_id):
        return self._rows.pop(record_id, None) is not None


class InMemoryStore(Store):
    """
    Process-local store.

    Tables are created on first access. Data lives as long as the store
    object, so every application instance starts empty and relies on
    seeding.
    """

    backend = "memory"

    def __init__(self) -> None:
        self._tables: dict[str, InMemoryTable] = {}

    def table(self, name: str) -> InMemoryTable:
        if name not in self._tables:
            self._tables[name] = InMemoryTable(name)
        return self._tables[name]

    async def ping(self) -> None:
        return None

    async def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        """Copy of every table's rows, keyed by table name."""
        return {name: await table.list() for name, table in sorted(self._tables.items())}
