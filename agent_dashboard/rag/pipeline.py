"""
RAG pipeline: retrieve matching documents, build grounding context, ask the LLM.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from agent_dashboard.config import settings
from agent_dashboard.errors import DashboardError, GenerationFailed
from agent_dashboard.llm.client import LLMClient
from agent_dashboard.vector_store.base import SearchResult
from agent_dashboard.vector_store.engine import VectorSearchEngine

logger = logging.getLogger(__name__)

NO_INFORMATION_ANSWER = (
    "I couldn't find any relevant information in the knowledge base. "
    "Please try rephrasing your question or add more context."
)
NO_INFORMATION_SHORT = "I couldn't find any relevant information in the knowledge base."


@dataclass
class RAGAnswer:
    answer: str
    sources: List[SearchResult] = field(default_factory=list)


@dataclass
class IngestResult:
    success: bool
    document_id: str | None = None
    error: str | None = None


class RAGService:
    """Answers questions grounded on the knowledge base. Never falls back to ungrounded generation."""

    def __init__(
        self,
        engine: VectorSearchEngine,
        llm_client: LLMClient,
        threshold: float = settings.rag_threshold,
        max_results: int = settings.rag_max_results,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.engine = engine
        self.llm_client = llm_client
        self.threshold = threshold
        self.max_results = max_results
        self.logger = logger_ or logger

    # --- Public API ---
    async def answer(self, query: str) -> str:
        results = await self.retrieve(query)
        if not results:
            self.logger.info("No documents above threshold, skipping LLM", extra={"threshold": self.threshold})
            return NO_INFORMATION_ANSWER
        return await self._generate(build_system_prompt(results), query)

    async def answer_with_sources(self, query: str) -> RAGAnswer:
        results = await self.retrieve(query)
        if not results:
            return RAGAnswer(answer=NO_INFORMATION_SHORT, sources=[])
        answer = await self._generate(build_sources_prompt(results), query)
        return RAGAnswer(answer=answer, sources=results)

    async def add_knowledge_document(
        self, content: str, metadata: Mapping[str, Any] | None = None
    ) -> IngestResult:
        try:
            document = await self.engine.add_document(content, metadata)
        except DashboardError as exc:
            self.logger.error("Add knowledge document failed: %s", exc)
            return IngestResult(success=False, error=str(exc) or "Failed to add document to knowledge base")
        return IngestResult(success=True, document_id=document.id)

    # --- Steps ---
    async def retrieve(self, query: str) -> List[SearchResult]:
        return await self.engine.search(query, threshold=self.threshold, max_results=self.max_results)

    async def _generate(self, system_prompt: str, query: str) -> str:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": query},
        ]
        result = await self.llm_client.complete(messages)
        if not result.success:
            self.logger.error("Grounded generation failed: %s", result.error)
            raise GenerationFailed(result.error or "Failed to get response")
        return result.text or ""


def build_context(results: Sequence[SearchResult]) -> str:
    """Number documents in ranking order: ``[Document 1]`` is the best match."""
    return "\n\n".join(f"[Document {idx}]\n{item.content}" for idx, item in enumerate(results, start=1))


def build_system_prompt(results: Sequence[SearchResult]) -> str:
    return (
        "You are a helpful assistant with access to a knowledge base. "
        "Answer the user's question based on the following relevant documents. "
        "If the documents don't contain enough information, say so clearly.\n\n"
        f"Relevant Documents:\n{build_context(results)}\n\n"
        "Instructions:\n"
        "- Base your answer primarily on the provided documents\n"
        "- If the documents don't fully answer the question, acknowledge the limitations\n"
        "- Cite which document(s) you're referencing when appropriate\n"
        "- Be concise but thorough"
    )


def build_sources_prompt(results: Sequence[SearchResult]) -> str:
    return (
        "You are a helpful assistant with access to a knowledge base. "
        "Answer the user's question based on the following relevant documents.\n\n"
        f"Relevant Documents:\n{build_context(results)}\n\n"
        "Provide a clear and concise answer based on the documents provided."
    )


__all__ = [
    "RAGService",
    "RAGAnswer",
    "IngestResult",
    "NO_INFORMATION_ANSWER",
    "NO_INFORMATION_SHORT",
    "build_context",
    "build_system_prompt",
]
