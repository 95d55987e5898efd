"""
OpenAI embeddings client.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import openai
from openai import AsyncOpenAI

from agent_dashboard.config import settings
from agent_dashboard.errors import (
    EmbeddingFailed,
    InvalidInput,
    ProviderUnavailable,
    RequestTimeout,
    with_timeout,
)

DEFAULT_EMBEDDING_MODEL = settings.embedding_model_name
DEFAULT_EMBEDDING_DIMENSION = settings.embedding_dimension
DEFAULT_EMBED_BATCH_SIZE = 64

logger = logging.getLogger(__name__)


class EmbeddingsClient:
    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        dimension: int = DEFAULT_EMBEDDING_DIMENSION,
        batch_size: int = DEFAULT_EMBED_BATCH_SIZE,
        timeout: float | None = settings.request_timeout_sec,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.dimension = dimension
        self.batch_size = batch_size
        self.timeout = timeout
        api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed several texts, returning vectors in input order."""
        if not texts:
            return []
        for text in texts:
            self._check_text(text)

        embeddings: List[List[float]] = []
        for i in range(0, len(texts), self.batch_size):
            batch = list(texts[i : i + self.batch_size])
            embeddings.extend(await self._request(batch))
        return embeddings

    async def embed_text(self, text: str) -> List[float]:
        self._check_text(text)
        vectors = await self._request([text])
        return vectors[0]

    @staticmethod
    def _check_text(text: str) -> None:
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput("Text to embed must be a non-empty string")

    async def _request(self, batch: List[str]) -> List[List[float]]:
        try:
            response = await with_timeout(
                self.client.embeddings.create(model=self.model, input=batch),
                self.timeout,
                "Embedding request",
            )
        except RequestTimeout:
            logger.error("Embedding request timed out", extra={"count": len(batch), "timeout": self.timeout})
            raise
        except openai.APITimeoutError as exc:
            raise RequestTimeout(f"Embedding request timed out: {exc}") from exc
        except openai.APIConnectionError as exc:
            logger.error("Embedding provider unreachable: %s", exc)
            raise ProviderUnavailable(f"Failed to create embedding: {exc}") from exc
        except openai.APIError as exc:
            logger.error("Embedding provider error: %s", exc)
            raise EmbeddingFailed(f"Failed to create embedding: {exc}") from exc

        items = sorted(response.data or [], key=lambda item: item.index)
        if len(items) != len(batch):
            raise EmbeddingFailed(f"Expected {len(batch)} embeddings, provider returned {len(items)}")

        vectors = [list(item.embedding) for item in items]
        for vector in vectors:
            if len(vector) != self.dimension:
                raise EmbeddingFailed(
                    f"Embedding has {len(vector)} dimensions, expected {self.dimension}"
                )
        return vectors


__all__ = ["EmbeddingsClient", "DEFAULT_EMBEDDING_MODEL", "DEFAULT_EMBEDDING_DIMENSION"]
