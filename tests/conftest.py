"""Pytest configuration and shared fixtures."""

import pytest

from agent_dashboard.rag.pipeline import RAGService
from agent_dashboard.vector_store.engine import VectorSearchEngine

from tests.fakes import FakeEmbeddingsClient, FakeLLMClient, InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def embeddings_client():
    return FakeEmbeddingsClient()


@pytest.fixture
def engine(store, embeddings_client):
    return VectorSearchEngine(store, embeddings_client, table="documents", match_function="match_documents")


@pytest.fixture
def llm_client():
    return FakeLLMClient()


@pytest.fixture
def rag_service(engine, llm_client):
    return RAGService(engine, llm_client, threshold=0.7, max_results=3)
