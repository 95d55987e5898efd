"""
Vector store abstractions and factories.
"""

from agent_dashboard.embeddings.client import EmbeddingsClient
from agent_dashboard.vector_store.base import Document, DocumentStore, SearchResult
from agent_dashboard.vector_store.engine import VectorSearchEngine
from agent_dashboard.vector_store.supabase_store import SupabaseDocumentStore

_document_store: SupabaseDocumentStore | None = None


def get_document_store() -> SupabaseDocumentStore:
    """
    Shared Supabase store. The underlying client is created on first request.
    """
    global _document_store
    if _document_store is None:
        _document_store = SupabaseDocumentStore()
    return _document_store


def get_search_engine(embeddings_client: EmbeddingsClient | None = None) -> VectorSearchEngine:
    return VectorSearchEngine(get_document_store(), embeddings_client or EmbeddingsClient())


__all__ = [
    "Document",
    "DocumentStore",
    "SearchResult",
    "SupabaseDocumentStore",
    "VectorSearchEngine",
    "get_document_store",
    "get_search_engine",
]
