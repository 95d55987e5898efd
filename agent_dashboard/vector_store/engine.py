"""
Vector search engine: document ingestion and similarity retrieval.

Embeddings come from the embeddings client; ranking is delegated to the
store's ``match_documents`` function, which returns rows already ordered by
cosine similarity.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from agent_dashboard.config import settings
from agent_dashboard.embeddings.client import EmbeddingsClient
from agent_dashboard.errors import InvalidInput
from agent_dashboard.vector_store.base import Document, DocumentStore, SearchResult

logger = logging.getLogger(__name__)

DocumentInput = Tuple[str, Optional[Dict[str, Any]]]


class VectorSearchEngine:
    """Sole writer of the documents table."""

    def __init__(
        self,
        store: DocumentStore,
        embeddings_client: EmbeddingsClient,
        table: str = settings.documents_table,
        match_function: str = settings.match_function,
        embed_concurrency: int = settings.embed_concurrency,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.embeddings_client = embeddings_client
        self.table = table
        self.match_function = match_function
        self.embed_concurrency = embed_concurrency
        self.logger = logger_ or logger

    # --- Ingestion ---
    async def add_document(self, content: str, metadata: Mapping[str, Any] | None = None) -> Document:
        content = _check_content(content)
        metadata = _check_metadata(metadata)

        embedding = await self.embeddings_client.embed_text(content)
        document = self._new_document(content, embedding, metadata)
        row = await self.store.insert(self.table, document.to_row())
        stored = Document.from_row(row)
        self.logger.info("Document added", extra={"document_id": stored.id, "chars": len(content)})
        return stored

    async def bulk_add_documents(self, items: Sequence[DocumentInput]) -> List[Document]:
        """
        Embed every item concurrently, then insert them in one batch.

        All-or-nothing: if any embedding fails nothing is written. Returned
        documents follow the input order.
        """
        if not items:
            return []
        prepared = [(_check_content(content), _check_metadata(metadata)) for content, metadata in items]

        semaphore = asyncio.Semaphore(self.embed_concurrency)

        async def embed(content: str) -> List[float]:
            async with semaphore:
                return await self.embeddings_client.embed_text(content)

        outcomes = await asyncio.gather(
            *(embed(content) for content, _ in prepared),
            return_exceptions=True,
        )
        failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        if failures:
            self.logger.error(
                "Bulk ingest aborted, nothing written",
                extra={"requested": len(prepared), "failed": len(failures)},
            )
            raise failures[0]

        documents = [
            self._new_document(content, embedding, metadata)
            for (content, metadata), embedding in zip(prepared, outcomes)
        ]
        rows = await self.store.insert_many(self.table, [doc.to_row() for doc in documents])
        stored = _restore_input_order(documents, [Document.from_row(row) for row in rows])
        self.logger.info("Bulk documents added", extra={"count": len(stored)})
        return stored

    # --- Retrieval ---
    async def search(
        self,
        query: str,
        threshold: float | None = None,
        max_results: int | None = None,
    ) -> List[SearchResult]:
        """Return documents with similarity strictly above ``threshold``, best first."""
        query = _check_content(query, field="query")
        threshold = settings.similarity_threshold if threshold is None else _check_threshold(threshold)
        max_results = settings.max_results if max_results is None else _check_max_results(max_results)

        query_embedding = await self.embeddings_client.embed_text(query)
        rows = await self.store.rpc(
            self.match_function,
            {
                "query_embedding": query_embedding,
                "match_threshold": threshold,
                "match_count": max_results,
            },
        )
        results = [SearchResult.from_row(row) for row in rows]
        results = [r for r in results if r.similarity > threshold]
        results.sort(key=lambda r: r.similarity, reverse=True)
        results = results[:max_results]

        self.logger.info(
            "Search completed",
            extra={
                "threshold": threshold,
                "requested": max_results,
                "returned": len(results),
                "top_score": round(results[0].similarity, 3) if results else None,
            },
        )
        return results

    async def hybrid_search(
        self,
        query: str,
        filters: Mapping[str, Any] | None = None,
        threshold: float | None = None,
        max_results: int | None = None,
    ) -> List[SearchResult]:
        """
        Similarity search with a looser threshold, then keep results whose
        metadata contains every ``filters`` pair. The filter never backfills
        beyond the candidate set.
        """
        candidates = await self.search(
            query,
            threshold=settings.hybrid_threshold if threshold is None else threshold,
            max_results=settings.hybrid_max_results if max_results is None else max_results,
        )
        if not filters:
            return candidates
        matched = [r for r in candidates if metadata_matches(r.metadata, filters)]
        self.logger.info(
            "Hybrid filter applied",
            extra={"candidates": len(candidates), "matched": len(matched), "filters": list(filters)},
        )
        return matched

    async def list_documents(self) -> List[Document]:
        rows = await self.store.query(self.table, order_by="created_at", descending=True)
        return [Document.from_row(row) for row in rows]

    async def delete_document(self, document_id: str) -> None:
        if not document_id:
            raise InvalidInput("Document id is required")
        await self.store.delete(self.table, document_id)
        self.logger.info("Document deleted", extra={"document_id": document_id})

    @staticmethod
    def _new_document(content: str, embedding: List[float], metadata: Dict[str, Any]) -> Document:
        return Document(
            id=str(uuid.uuid4()),
            content=content,
            embedding=embedding,
            metadata=metadata,
            created_at=datetime.now(timezone.utc),
        )


def metadata_matches(metadata: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    return all(key in metadata and json_equal(metadata[key], value) for key, value in filters.items())


def json_equal(left: Any, right: Any) -> bool:
    """Deep equality over JSON values; ``True`` is not equal to ``1``."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, (Mapping, list, tuple)) or isinstance(right, (Mapping, list, tuple)):
        return False
    return left == right


def _restore_input_order(sent: Sequence[Document], stored: List[Document]) -> List[Document]:
    by_id = {doc.id: doc for doc in stored}
    if all(doc.id in by_id for doc in sent):
        return [by_id[doc.id] for doc in sent]
    return stored


def _check_content(value: Any, field: str = "content") -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field} must be a non-empty string")
    return value


def _check_metadata(metadata: Mapping[str, Any] | None) -> Dict[str, Any]:
    if metadata is None:
        return {}
    if not isinstance(metadata, Mapping) or not all(isinstance(k, str) for k in metadata):
        raise InvalidInput("metadata must be a mapping with string keys")
    return dict(metadata)


def _check_threshold(value: float) -> float:
    if isinstance(value, bool) or not 0.0 <= value <= 1.0:
        raise InvalidInput(f"threshold must be within [0, 1], got {value}")
    return float(value)


def _check_max_results(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInput(f"max_results must be a positive integer, got {value}")
    return value


__all__ = ["VectorSearchEngine", "DocumentInput", "metadata_matches", "json_equal"]
