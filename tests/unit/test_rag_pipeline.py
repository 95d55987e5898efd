"""Unit tests for the retrieval-augmented generator."""

import asyncio

import pytest

from agent_dashboard.errors import GenerationFailed, StoreFailed
from agent_dashboard.llm.client import CompletionResult
from agent_dashboard.rag.pipeline import (
    NO_INFORMATION_ANSWER,
    NO_INFORMATION_SHORT,
    RAGService,
    build_context,
    build_system_prompt,
)
from agent_dashboard.vector_store.base import SearchResult

from tests.fakes import FakeLLMClient

FACT = "The capital of France is Paris"


def _seed(engine, *contents):
    for content in contents:
        asyncio.run(engine.add_document(content))


class TestAnswer:
    """Tests for grounded question answering."""

    def test_no_match_skips_llm(self, rag_service, engine, llm_client):
        """Test that nothing above the threshold returns the fallback without generating."""
        _seed(engine, "delta")

        answer = asyncio.run(rag_service.answer("alpha beta"))

        assert answer == NO_INFORMATION_ANSWER
        assert llm_client.calls == []

    def test_empty_knowledge_base(self, rag_service, llm_client):
        """Test an empty store behaves like no match."""
        assert asyncio.run(rag_service.answer("anything")) == NO_INFORMATION_ANSWER
        assert llm_client.calls == []

    def test_context_contains_retrieved_documents(self, rag_service, engine, llm_client):
        """Test the system prompt carries the matching document and the question goes as user message."""
        _seed(engine, FACT, "delta")

        answer = asyncio.run(rag_service.answer(FACT))

        assert answer == "grounded answer"
        [messages] = llm_client.calls
        assert [m["role"] for m in messages] == ["system", "user"]
        assert f"[Document 1]\n{FACT}" in messages[0]["content"]
        assert "delta" not in messages[0]["content"]
        assert messages[1]["content"] == FACT

    def test_context_follows_similarity_rank(self, rag_service, engine, llm_client):
        """Test every match reaches the single LLM call, best match numbered first."""
        _seed(engine, "alpha beta gamma", "delta", "alpha beta")

        asyncio.run(rag_service.answer("alpha beta"))

        [messages] = llm_client.calls
        system = messages[0]["content"]
        assert "[Document 1]\nalpha beta\n\n[Document 2]\nalpha beta gamma\n\n" in system
        assert "[Document 3]" not in system

    def test_answer_returned_verbatim(self, engine):
        """Test the generated text is passed through untouched."""
        llm = FakeLLMClient(result=CompletionResult(success=True, text="  Paris.\n"))
        service = RAGService(engine, llm, threshold=0.7, max_results=3)
        _seed(engine, FACT)

        assert asyncio.run(service.answer(FACT)) == "  Paris.\n"

    def test_generation_failure_raises(self, engine):
        """Test a failed completion surfaces as GenerationFailed."""
        llm = FakeLLMClient(result=CompletionResult(success=False, error="rate limited"))
        service = RAGService(engine, llm, threshold=0.7, max_results=3)
        _seed(engine, FACT)

        with pytest.raises(GenerationFailed, match="rate limited"):
            asyncio.run(service.answer(FACT))

    def test_store_failure_raises(self, rag_service, store):
        """Test retrieval errors are not hidden behind the fallback answer."""
        store.fail_with = StoreFailed("unreachable")

        with pytest.raises(StoreFailed):
            asyncio.run(rag_service.answer("question"))

    def test_retrieval_uses_service_limits(self, engine, store, llm_client):
        """Test the service's threshold and result cap reach the store."""
        service = RAGService(engine, llm_client, threshold=0.4, max_results=2)

        asyncio.run(service.retrieve("alpha"))

        _, params = store.rpc_calls[-1]
        assert params["match_threshold"] == 0.4
        assert params["match_count"] == 2


class TestAnswerWithSources:
    """Tests for answers returned together with their supporting documents."""

    def test_sources_returned(self, rag_service, engine):
        _seed(engine, FACT)

        result = asyncio.run(rag_service.answer_with_sources(FACT))

        assert result.answer == "grounded answer"
        assert [s.content for s in result.sources] == [FACT]

    def test_no_sources(self, rag_service, llm_client):
        result = asyncio.run(rag_service.answer_with_sources("nothing here"))

        assert result.answer == NO_INFORMATION_SHORT
        assert result.sources == []
        assert llm_client.calls == []


class TestAddKnowledgeDocument:
    """Tests for adding documents through the RAG service."""

    def test_success_returns_id(self, rag_service, store):
        result = asyncio.run(rag_service.add_knowledge_document(FACT, {"source": "atlas"}))

        assert result.success
        assert result.document_id == store.tables["documents"][0]["id"]
        assert store.tables["documents"][0]["metadata"] == {"source": "atlas"}

    def test_failure_reported_not_raised(self, rag_service):
        """Test that invalid content is reported in the result."""
        result = asyncio.run(rag_service.add_knowledge_document("   "))

        assert not result.success
        assert result.document_id is None
        assert "content" in result.error


class TestPromptBuilding:
    """Tests for context and prompt assembly."""

    def test_documents_numbered_in_rank_order(self):
        results = [
            SearchResult(id="1", content="best", similarity=0.9),
            SearchResult(id="2", content="second", similarity=0.8),
        ]

        assert build_context(results) == "[Document 1]\nbest\n\n[Document 2]\nsecond"

    def test_system_prompt_includes_instructions(self):
        prompt = build_system_prompt([SearchResult(id="1", content="best", similarity=0.9)])

        assert prompt.startswith("You are a helpful assistant with access to a knowledge base.")
        assert "Relevant Documents:\n[Document 1]\nbest" in prompt
        assert "- Cite which document(s) you're referencing when appropriate" in prompt
