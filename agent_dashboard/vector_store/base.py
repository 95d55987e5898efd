"""
Vector store interface and shared types.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Protocol, Sequence


@dataclass
class Document:
    id: str
    content: str
    embedding: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Document":
        return cls(
            id=str(row["id"]),
            content=row["content"],
            embedding=parse_vector(row.get("embedding")),
            metadata=dict(row.get("metadata") or {}),
            created_at=parse_timestamp(row.get("created_at")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "embedding": self.embedding,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class SearchResult:
    id: str
    content: str
    similarity: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SearchResult":
        return cls(
            id=str(row["id"]),
            content=row["content"],
            similarity=float(row["similarity"]),
            metadata=dict(row.get("metadata") or {}),
        )


class DocumentStore(Protocol):
    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def insert_many(self, table: str, records: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ...

    async def query(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        ...

    async def update(self, table: str, record_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def delete(self, table: str, record_id: str) -> None:
        ...

    async def rpc(self, function: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        ...


def parse_vector(value: Any) -> List[float]:
    # pgvector columns come back from PostgREST as "[0.1,0.2,...]"
    if value is None:
        return []
    if isinstance(value, str):
        value = json.loads(value)
    return [float(x) for x in value]


def parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


__all__ = ["Document", "SearchResult", "DocumentStore", "parse_vector", "parse_timestamp"]
