"""In-memory doubles for the provider and store clients used across tests."""

import asyncio
import copy
import math
import re
import uuid
import zlib
from datetime import datetime, timezone

from agent_dashboard.errors import EmbeddingFailed, StoreFailed
from agent_dashboard.llm.client import CompletionResult

DIMENSION = 1536


def fake_vector(text):
    """Deterministic bag-of-words vector: texts sharing words are similar."""
    vector = [0.0] * DIMENSION
    words = re.findall(r"\w+", text.lower()) or [text]
    for word in words:
        vector[zlib.crc32(word.encode("utf-8")) % DIMENSION] += 1.0
    norm = math.sqrt(sum(x * x for x in vector))
    return [x / norm for x in vector]


def cosine(a, b):
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeEmbeddingsClient:
    """Stands in for EmbeddingsClient; can delay or fail specific texts."""

    def __init__(self, delays=None, fail_on=()):
        self.delays = delays or {}
        self.fail_on = set(fail_on)
        self.calls = []
        self.completed = []

    async def embed_text(self, text):
        self.calls.append(text)
        await asyncio.sleep(self.delays.get(text, 0))
        if text in self.fail_on:
            raise EmbeddingFailed(f"Failed to create embedding for {text!r}")
        self.completed.append(text)
        return fake_vector(text)


class InMemoryStore:
    """DocumentStore double with a match_documents RPC computing cosine similarity."""

    def __init__(self):
        self.tables = {}
        self.insert_many_calls = 0
        self.rpc_calls = []
        self.fail_with = None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _table(self, name):
        return self.tables.setdefault(name, [])

    async def insert(self, table, record):
        self._check()
        row = copy.deepcopy(record)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self._table(table).append(row)
        return copy.deepcopy(row)

    async def insert_many(self, table, records):
        self._check()
        self.insert_many_calls += 1
        return [await self.insert(table, record) for record in records]

    async def query(self, table, filters=None, order_by=None, descending=False):
        self._check()
        rows = [
            copy.deepcopy(row)
            for row in self._table(table)
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda row: row[order_by], reverse=descending)
        return rows

    async def update(self, table, record_id, updates):
        self._check()
        for row in self._table(table):
            if row["id"] == record_id:
                row.update(updates)
                return copy.deepcopy(row)
        raise StoreFailed(f"No row with id {record_id} in {table}")

    async def delete(self, table, record_id):
        self._check()
        self.tables[table] = [row for row in self._table(table) if row["id"] != record_id]

    async def rpc(self, function, params):
        self._check()
        self.rpc_calls.append((function, params))
        assert function == "match_documents"
        scored = []
        for row in self._table("documents"):
            similarity = cosine(row["embedding"], params["query_embedding"])
            if similarity > params["match_threshold"]:
                scored.append(
                    {
                        "id": row["id"],
                        "content": row["content"],
                        "metadata": copy.deepcopy(row["metadata"]),
                        "similarity": similarity,
                    }
                )
        scored.sort(key=lambda r: r["similarity"], reverse=True)
        return scored[: params["match_count"]]


class FakeLLMClient:
    """Records every completion request and replies with a canned result."""

    def __init__(self, result=None, fragments=("Hello", " world")):
        self.result = result or CompletionResult(success=True, text="grounded answer")
        self.fragments = list(fragments)
        self.calls = []

    async def complete(self, messages, model=None, temperature=None, max_tokens=None):
        self.calls.append([dict(m) for m in messages])
        return self.result

    async def stream(self, messages, model=None, temperature=None, max_tokens=None):
        self.calls.append([dict(m) for m in messages])
        for fragment in self.fragments:
            yield fragment
