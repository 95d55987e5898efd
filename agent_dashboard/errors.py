"""
Error taxonomy shared by the clients, the search engine and the agents.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


class DashboardError(Exception):
    """Base class for every failure raised by this package."""


class InvalidInput(DashboardError, ValueError):
    """A required field is empty or a parameter is out of range. No network call was made."""


class StoreFailed(DashboardError):
    """The remote document store rejected or failed an operation."""


class ProviderError(DashboardError):
    """The generation/embedding provider failed."""


class EmbeddingFailed(ProviderError):
    """Embedding call errored or returned a malformed vector."""


class GenerationFailed(ProviderError):
    """The provider reported a failed completion."""


class ProviderUnavailable(ProviderError):
    """Network-level failure reaching an external service."""


class RequestTimeout(ProviderUnavailable):
    """An external call did not answer before its deadline."""


async def with_timeout(awaitable: Awaitable[T], timeout: float | None, operation: str) -> T:
    """
    Await ``awaitable`` with a deadline.

    ``timeout=None`` waits forever. A missed deadline becomes ``RequestTimeout``.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise RequestTimeout(f"{operation} timed out after {timeout}s") from exc


__all__ = [
    "DashboardError",
    "InvalidInput",
    "StoreFailed",
    "ProviderError",
    "EmbeddingFailed",
    "GenerationFailed",
    "ProviderUnavailable",
    "RequestTimeout",
    "with_timeout",
]
