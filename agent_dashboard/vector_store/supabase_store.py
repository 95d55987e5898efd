"""
Supabase-backed document store client.

Stateless transport: every call is a fresh request to PostgREST, nothing is cached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from agent_dashboard.config import settings
from agent_dashboard.errors import InvalidInput, RequestTimeout, StoreFailed, with_timeout

logger = logging.getLogger(__name__)


class SupabaseDocumentStore:
    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        timeout: float | None = settings.request_timeout_sec,
        client: AsyncClient | None = None,
    ) -> None:
        self.url = url or settings.supabase_url
        self.key = key or (settings.supabase_anon_key.get_secret_value() if settings.supabase_anon_key else None)
        self.timeout = timeout
        self._client = client
        self._lock = asyncio.Lock()

    async def get_client(self) -> AsyncClient:
        if self._client is not None:
            return self._client
        async with self._lock:
            if self._client is None:
                if not self.url or not self.key:
                    raise StoreFailed(
                        "Supabase credentials not configured. "
                        "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
                    )
                self._client = await acreate_client(self.url, self.key)
                logger.info("Supabase client initialised", extra={"url": self.url})
        return self._client

    # --- Table operations ---
    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        client = await self.get_client()
        rows = await self._execute(client.table(table).insert(record), "insert", table)
        if not rows:
            raise StoreFailed(f"Insert into {table} returned no row")
        return rows[0]

    async def insert_many(self, table: str, records: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert all records in one request; PostgREST runs it as a single statement."""
        if not records:
            return []
        client = await self.get_client()
        rows = await self._execute(client.table(table).insert(list(records)), "insert_many", table)
        if len(rows) != len(records):
            raise StoreFailed(f"Batch insert into {table} returned {len(rows)} rows for {len(records)} records")
        return rows

    async def query(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        client = await self.get_client()
        request = client.table(table).select("*")
        for column, value in (filters or {}).items():
            request = request.eq(column, value)
        if order_by:
            request = request.order(order_by, desc=descending)
        return await self._execute(request, "query", table)

    async def update(self, table: str, record_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        if not record_id:
            raise InvalidInput("Record id is required for update operations")
        client = await self.get_client()
        rows = await self._execute(client.table(table).update(updates).eq("id", record_id), "update", table)
        if not rows:
            raise StoreFailed(f"No row with id {record_id} in {table}")
        return rows[0]

    async def delete(self, table: str, record_id: str) -> None:
        if not record_id:
            raise InvalidInput("Record id is required for delete operations")
        client = await self.get_client()
        await self._execute(client.table(table).delete().eq("id", record_id), "delete", table)

    async def rpc(self, function: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        client = await self.get_client()
        return await self._execute(client.rpc(function, params), "rpc", function)

    # --- Helpers ---
    async def _execute(self, request: Any, operation: str, target: str) -> List[Dict[str, Any]]:
        try:
            response = await with_timeout(request.execute(), self.timeout, f"Supabase {operation} on {target}")
        except RequestTimeout:
            logger.error("Supabase request timed out", extra={"operation": operation, "target": target})
            raise
        except httpx.TimeoutException as exc:
            raise RequestTimeout(f"Supabase {operation} on {target} timed out") from exc
        except (APIError, httpx.HTTPError) as exc:
            message = getattr(exc, "message", None) or str(exc)
            logger.error("Supabase %s error on %s: %s", operation, target, message)
            raise StoreFailed(f"Failed to {operation} {target}: {message}") from exc

        data = response.data
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)


__all__ = ["SupabaseDocumentStore"]
