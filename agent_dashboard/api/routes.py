from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from agent_dashboard.agents.dispatcher import AGENTS, AgentDispatcher
from agent_dashboard.api.dependencies import get_dispatcher, get_rag_service, get_search_engine
from agent_dashboard.models.schemas import (
    AgentCard,
    AskRequest,
    AskResponse,
    BulkDocumentsRequest,
    BulkDocumentsResponse,
    ChatRequest,
    ChatResponse,
    DocumentCreate,
    DocumentOut,
    HybridSearchRequest,
    SearchRequest,
    SearchResponse,
    SearchResultOut,
)
from agent_dashboard.rag.pipeline import RAGService
from agent_dashboard.vector_store.base import Document, SearchResult
from agent_dashboard.vector_store.engine import VectorSearchEngine

router = APIRouter(prefix="/api/v1")
logger = logging.getLogger(__name__)


# Agents
@router.get("/agents", response_model=List[AgentCard], summary="List chat agents")
async def list_agents() -> List[AgentCard]:
    return [AgentCard.model_validate(agent, from_attributes=True) for agent in AGENTS]


@router.post("/agents/{agent_id}/chat", response_model=ChatResponse, summary="Send a message to an agent")
async def chat(
    agent_id: str,
    request: ChatRequest,
    dispatcher: AgentDispatcher = Depends(get_dispatcher),
) -> ChatResponse:
    logger.info("Chat request", extra={"agent_id": agent_id, "len": len(request.message)})
    reply = await dispatcher.dispatch(agent_id, request.message)
    return ChatResponse(agent_id=agent_id, reply=reply)


# Documents
@router.post(
    "/documents",
    response_model=DocumentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Embed and store one document",
)
async def add_document(
    request: DocumentCreate,
    engine: VectorSearchEngine = Depends(get_search_engine),
) -> DocumentOut:
    document = await engine.add_document(request.content, request.metadata)
    return _document_out(document)


@router.post(
    "/documents/bulk",
    response_model=BulkDocumentsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Embed and store several documents in one batch",
)
async def bulk_add_documents(
    request: BulkDocumentsRequest,
    engine: VectorSearchEngine = Depends(get_search_engine),
) -> BulkDocumentsResponse:
    documents = await engine.bulk_add_documents([(doc.content, doc.metadata) for doc in request.documents])
    return BulkDocumentsResponse(count=len(documents), ids=[doc.id for doc in documents])


@router.get("/documents", response_model=List[DocumentOut], summary="List stored documents, newest first")
async def list_documents(engine: VectorSearchEngine = Depends(get_search_engine)) -> List[DocumentOut]:
    return [_document_out(document) for document in await engine.list_documents()]


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a document")
async def delete_document(
    document_id: str,
    engine: VectorSearchEngine = Depends(get_search_engine),
) -> None:
    await engine.delete_document(document_id)


# Search
@router.post("/search", response_model=SearchResponse, summary="Similarity search")
async def search(
    request: SearchRequest,
    engine: VectorSearchEngine = Depends(get_search_engine),
) -> SearchResponse:
    results = await engine.search(request.query, threshold=request.threshold, max_results=request.max_results)
    return SearchResponse(results=_results_out(results))


@router.post("/search/hybrid", response_model=SearchResponse, summary="Similarity search with metadata filters")
async def hybrid_search(
    request: HybridSearchRequest,
    engine: VectorSearchEngine = Depends(get_search_engine),
) -> SearchResponse:
    results = await engine.hybrid_search(
        request.query,
        filters=request.filters,
        threshold=request.threshold,
        max_results=request.max_results,
    )
    return SearchResponse(results=_results_out(results))


# RAG
@router.post("/ask", response_model=AskResponse, summary="Answer a question from the knowledge base")
async def ask(request: AskRequest, service: RAGService = Depends(get_rag_service)) -> AskResponse:
    logger.info("Ask request", extra={"len": len(request.question)})
    result = await service.answer_with_sources(request.question)
    return AskResponse(answer=result.answer, sources=_results_out(result.sources))


def _document_out(document: Document) -> DocumentOut:
    return DocumentOut(
        id=document.id,
        content=document.content,
        metadata=document.metadata,
        created_at=document.created_at,
        embedding_dimension=len(document.embedding),
    )


def _results_out(results: List[SearchResult]) -> List[SearchResultOut]:
    return [SearchResultOut.model_validate(result, from_attributes=True) for result in results]


__all__ = ["router"]
