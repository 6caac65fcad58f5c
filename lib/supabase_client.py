# =============================================================================
# lib/supabase_client.py - Supabase Store Backend
# =============================================================================
# Implements the lib.store Table/Store interface on top of Supabase
# (PostgREST). The supabase client is synchronous, so every query runs in
# a worker thread to keep the event loop free for other requests.
#
# The client is created lazily on first use and shared by all tables of the
# store (one connection pool per process).
#
# Usage:
#   store = SupabaseStore(url, service_key)
#   items = await store.table("catalog_items").list(catalog_brand_id=2)
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Any

from supabase import Client, create_client

from lib.store import Store, StoreError, Table

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for "no rows" on .single()
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(StoreError):
    """Error during Supabase operations."""

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


class SupabaseTable(Table):
    """A single Supabase table accessed through the shared client."""

    def __init__(self, store: SupabaseStore, name: str):
        super().__init__(name)
        self._store = store

    async def _execute(self, operation: str, build_query) -> Any:
        client = self._store.get_client()
        try:
            response = await asyncio.to_thread(lambda: build_query(client.table(self.name)).execute())
        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to {operation} {self.name}: {e}",
                code=f"{operation.upper()}_FAILED",
                suggestion="Check that the table exists and the service key has access to it",
                details={"table": self.name},
            ) from e
        return response

    async def list(self, limit=None, offset=0, **filters):
        def build(query):
            query = query.select("*")
            for column, value in filters.items():
                query = query.eq(column, value)
            query = query.order("id")
            if limit is not None:
                query = query.range(offset, offset + limit - 1)
            return query

        response = await self._execute("select", build)
        rows = (response.data or []) if response is not None else []
        if limit is None and offset:
            rows = rows[offset:]
        return rows

    async def count(self, **filters):
        def build(query):
            query = query.select("id", count="exact")
            for column, value in filters.items():
                query = query.eq(column, value)
            return query

        response = await self._execute("count", build)
        if response is None:
            return 0
        return response.count or 0

    async def get(self, record_id):
        response = await self._execute(
            "select",
            lambda query: query.select("*").eq("id", record_id).single(),
        )
        return response.data if response is not None else None

    async def insert(self, record):
        response = await self._execute("insert", lambda query: query.insert(record))
        rows = response.data if response is not None else None
        if not rows:
            raise SupabaseClientError(
                message=f"Insert into {self.name} returned no rows",
                code="INSERT_FAILED",
                details={"table": self.name},
            )
        return rows[0]

    async def update(self, record_id, values):
        payload = {k: v for k, v in values.items() if k != "id"}
        response = await self._execute(
            "update",
            lambda query: query.update(payload).eq("id", record_id),
        )
        rows = response.data if response is not None else None
        return rows[0] if rows else None

    async def delete(self, record_id):
        response = await self._execute(
            "delete",
            lambda query: query.delete().eq("id", record_id),
        )
        return bool(response is not None and response.data)


class SupabaseStore(Store):
    """
    Store backed by a Supabase project.

    Uses the service_role key, which bypasses Row Level Security. This is
    appropriate for server-side operations only.
    """

    backend = "supabase"

    def __init__(self, url: str, service_key: str):
        self._url = url
        self._service_key = service_key
        self._client: Client | None = None
        self._tables: dict[str, SupabaseTable] = {}

    def get_client(self) -> Client:
        """
        Get or create the shared Supabase client.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if self._client is None:
            try:
                self._client = create_client(self._url, self._service_key)
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check DATABASE__SUPABASE_URL and DATABASE__SUPABASE_SERVICE_KEY",
                ) from e
        return self._client

    def table(self, name: str) -> SupabaseTable:
        if name not in self._tables:
            self._tables[name] = SupabaseTable(self, name)
        return self._tables[name]

    async def ping(self) -> None:
        await self.table("catalog_brands").list(limit=1)
