"""Unit tests for the Supabase document store client."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from agent_dashboard.config import settings
from agent_dashboard.errors import InvalidInput, RequestTimeout, StoreFailed
from agent_dashboard.vector_store.supabase_store import SupabaseDocumentStore


def _builder(data=None, error=None):
    """Query builder mock: every chained call returns the builder itself."""
    builder = MagicMock()
    for name in ("insert", "select", "eq", "order", "update", "delete"):
        getattr(builder, name).return_value = builder
    if error is not None:
        builder.execute = AsyncMock(side_effect=error)
    else:
        builder.execute = AsyncMock(return_value=SimpleNamespace(data=data))
    return builder


def _store(builder, timeout=1.0):
    client = MagicMock()
    client.table.return_value = builder
    client.rpc.return_value = builder
    return SupabaseDocumentStore(url="https://example.supabase.co", key="anon", timeout=timeout, client=client), client


class TestTableOperations:
    """Tests for insert, query, update and delete."""

    def test_insert_returns_stored_row(self):
        builder = _builder([{"id": "1", "content": "hello"}])
        store, client = _store(builder)

        row = asyncio.run(store.insert("documents", {"content": "hello"}))

        assert row == {"id": "1", "content": "hello"}
        client.table.assert_called_once_with("documents")
        builder.insert.assert_called_once_with({"content": "hello"})

    def test_insert_without_returned_row_fails(self):
        store, _ = _store(_builder([]))

        with pytest.raises(StoreFailed):
            asyncio.run(store.insert("documents", {"content": "hello"}))

    def test_insert_many_is_one_request(self):
        builder = _builder([{"id": "1"}, {"id": "2"}])
        store, _ = _store(builder)

        rows = asyncio.run(store.insert_many("documents", [{"content": "a"}, {"content": "b"}]))

        assert [r["id"] for r in rows] == ["1", "2"]
        builder.insert.assert_called_once_with([{"content": "a"}, {"content": "b"}])
        builder.execute.assert_awaited_once()

    def test_insert_many_row_count_mismatch(self):
        store, _ = _store(_builder([{"id": "1"}]))

        with pytest.raises(StoreFailed):
            asyncio.run(store.insert_many("documents", [{"content": "a"}, {"content": "b"}]))

    def test_query_applies_filters_and_order(self):
        builder = _builder([{"id": "1"}])
        store, _ = _store(builder)

        rows = asyncio.run(store.query("documents", {"lang": "en"}, order_by="created_at", descending=True))

        assert rows == [{"id": "1"}]
        builder.select.assert_called_once_with("*")
        builder.eq.assert_called_once_with("lang", "en")
        builder.order.assert_called_once_with("created_at", desc=True)

    def test_none_data_is_empty(self):
        store, _ = _store(_builder(None))

        assert asyncio.run(store.query("documents")) == []

    def test_update_filters_by_id(self):
        builder = _builder([{"id": "7", "read": True}])
        store, _ = _store(builder)

        row = asyncio.run(store.update("notifications", "7", {"read": True}))

        assert row["read"] is True
        builder.update.assert_called_once_with({"read": True})
        builder.eq.assert_called_once_with("id", "7")

    def test_update_and_delete_require_id(self):
        store, _ = _store(_builder([]))

        with pytest.raises(InvalidInput):
            asyncio.run(store.update("notifications", "", {"read": True}))
        with pytest.raises(InvalidInput):
            asyncio.run(store.delete("documents", ""))

    def test_delete(self):
        builder = _builder([])
        store, _ = _store(builder)

        asyncio.run(store.delete("documents", "9"))

        builder.delete.assert_called_once_with()
        builder.eq.assert_called_once_with("id", "9")

    def test_rpc_passes_params(self):
        builder = _builder([{"id": "1", "similarity": 0.9}])
        store, client = _store(builder)
        params = {"query_embedding": [0.1], "match_threshold": 0.7, "match_count": 5}

        rows = asyncio.run(store.rpc("match_documents", params))

        assert rows == [{"id": "1", "similarity": 0.9}]
        client.rpc.assert_called_once_with("match_documents", params)


class TestFailures:
    """Tests for error mapping."""

    def test_postgrest_error(self):
        store, _ = _store(_builder(error=APIError({"message": "permission denied"})))

        with pytest.raises(StoreFailed, match="permission denied"):
            asyncio.run(store.query("documents"))

    def test_transport_error(self):
        error = httpx.ConnectError("refused", request=httpx.Request("GET", "https://example.supabase.co"))
        store, _ = _store(_builder(error=error))

        with pytest.raises(StoreFailed):
            asyncio.run(store.query("documents"))

    def test_deadline_exceeded(self):
        async def hang():
            await asyncio.sleep(5)

        builder = _builder([])
        builder.execute = hang
        store, _ = _store(builder, timeout=0.01)

        with pytest.raises(RequestTimeout):
            asyncio.run(store.rpc("match_documents", {}))

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.setattr(settings, "supabase_url", None)
        monkeypatch.setattr(settings, "supabase_anon_key", None)
        store = SupabaseDocumentStore()

        with pytest.raises(StoreFailed, match="credentials not configured"):
            asyncio.run(store.query("documents"))
