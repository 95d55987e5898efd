"""
FastAPI dependencies.

Clients are built once per process; tests swap them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from agent_dashboard.agents.dispatcher import AgentDispatcher, create_dispatcher
from agent_dashboard.embeddings.client import EmbeddingsClient
from agent_dashboard.llm.client import LLMClient
from agent_dashboard.rag.pipeline import RAGService
from agent_dashboard.vector_store import get_document_store
from agent_dashboard.vector_store.base import DocumentStore
from agent_dashboard.vector_store.engine import VectorSearchEngine


@lru_cache(maxsize=1)
def get_llm_client() -> LLMClient:
    return LLMClient()


@lru_cache(maxsize=1)
def get_embeddings_client() -> EmbeddingsClient:
    return EmbeddingsClient()


def get_store() -> DocumentStore:
    return get_document_store()


def get_search_engine(
    store: DocumentStore = Depends(get_store),
    embeddings_client: EmbeddingsClient = Depends(get_embeddings_client),
) -> VectorSearchEngine:
    return VectorSearchEngine(store, embeddings_client)


def get_rag_service(
    engine: VectorSearchEngine = Depends(get_search_engine),
    llm_client: LLMClient = Depends(get_llm_client),
) -> RAGService:
    return RAGService(engine, llm_client)


def get_dispatcher(
    engine: VectorSearchEngine = Depends(get_search_engine),
    llm_client: LLMClient = Depends(get_llm_client),
    store: DocumentStore = Depends(get_store),
) -> AgentDispatcher:
    return create_dispatcher(llm_client=llm_client, engine=engine, store=store)


__all__ = [
    "get_llm_client",
    "get_embeddings_client",
    "get_store",
    "get_search_engine",
    "get_rag_service",
    "get_dispatcher",
]
