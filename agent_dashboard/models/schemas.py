from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from agent_dashboard.config import settings


# Agents
class AgentCard(BaseModel):
    id: str
    name: str
    description: str
    category: str


class ChatRequest(BaseModel):
    """Chat message for one agent."""

    message: str = Field(..., min_length=1, description="User input")


class ChatResponse(BaseModel):
    agent_id: str
    reply: str


# Documents
class DocumentCreate(BaseModel):
    """Document to embed and store."""

    content: str = Field(..., min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class BulkDocumentsRequest(BaseModel):
    documents: List[DocumentCreate] = Field(..., min_length=1)


class DocumentOut(BaseModel):
    id: str
    content: str
    metadata: Dict[str, Any]
    created_at: datetime | None = None
    embedding_dimension: int = Field(..., ge=0)


class BulkDocumentsResponse(BaseModel):
    count: int = Field(..., ge=0)
    ids: List[str]


# Search
class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    threshold: float = Field(default=settings.similarity_threshold, ge=0.0, le=1.0)
    max_results: int = Field(default=settings.max_results, gt=0)


class HybridSearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    filters: Dict[str, Any] = Field(default_factory=dict, description="Exact-match metadata filters")
    threshold: float = Field(default=settings.hybrid_threshold, ge=0.0, le=1.0)
    max_results: int = Field(default=settings.hybrid_max_results, gt=0)


class SearchResultOut(BaseModel):
    id: str
    content: str
    similarity: float
    metadata: Dict[str, Any]


class SearchResponse(BaseModel):
    results: List[SearchResultOut]


# RAG
class AskRequest(BaseModel):
    """Question answered from the knowledge base."""

    question: str = Field(..., min_length=1, description="User question")


class AskResponse(BaseModel):
    answer: str
    sources: List[SearchResultOut]


class ErrorResponse(BaseModel):
    detail: str
    error_code: str


__all__ = [
    "AgentCard",
    "ChatRequest",
    "ChatResponse",
    "DocumentCreate",
    "BulkDocumentsRequest",
    "DocumentOut",
    "BulkDocumentsResponse",
    "SearchRequest",
    "HybridSearchRequest",
    "SearchResultOut",
    "SearchResponse",
    "AskRequest",
    "AskResponse",
    "ErrorResponse",
]
