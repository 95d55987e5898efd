"""
OpenAI chat LLM client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from agent_dashboard.config import settings
from agent_dashboard.errors import (
    GenerationFailed,
    InvalidInput,
    ProviderUnavailable,
    RequestTimeout,
    with_timeout,
)

DEFAULT_LLM_MODEL = settings.llm_model_name
DEFAULT_TEMPERATURE = settings.llm_temperature
DEFAULT_MAX_TOKENS = settings.llm_max_tokens
ALLOWED_ROLES = ("system", "user", "assistant")

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    success: bool
    text: str | None = None
    error: str | None = None
    usage: Dict[str, int] | None = None


class LLMClient:
    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float | None = settings.request_timeout_sec,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = _check_temperature(temperature)
        self.max_tokens = max_tokens
        self.timeout = timeout
        api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def complete(
        self,
        messages: Sequence[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> CompletionResult:
        """
        Run one chat completion.

        A provider-reported error is captured as ``success=False``; timeouts and
        connection errors are raised as ``RequestTimeout`` / ``ProviderUnavailable``.
        """
        kwargs = self._request_kwargs(messages, model, temperature, max_tokens)
        try:
            response = await with_timeout(
                self.client.chat.completions.create(**kwargs),
                self.timeout,
                "Chat completion",
            )
        except openai.APITimeoutError as exc:
            raise RequestTimeout(f"Chat completion timed out: {exc}") from exc
        except openai.APIConnectionError as exc:
            logger.error("Chat provider unreachable: %s", exc)
            raise ProviderUnavailable(f"Chat provider unreachable: {exc}") from exc
        except openai.APIError as exc:
            logger.error("OpenAI API error: %s", exc)
            return CompletionResult(success=False, error=str(exc) or "Failed to generate response")

        if not response.choices:
            return CompletionResult(success=False, error="Provider returned no choices")

        usage = None
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }
        return CompletionResult(success=True, text=response.choices[0].message.content or "", usage=usage)

    async def stream(
        self,
        messages: Sequence[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[str]:
        """
        Yield completion text fragments in generation order.

        The iterator ends when the provider closes the stream. A provider error
        is raised as ``GenerationFailed``. Every fragment is awaited with the
        client timeout.
        """
        kwargs = self._request_kwargs(messages, model, temperature, max_tokens)
        kwargs["stream"] = True
        try:
            stream = await with_timeout(
                self.client.chat.completions.create(**kwargs),
                self.timeout,
                "Chat stream",
            )
        except openai.APITimeoutError as exc:
            raise RequestTimeout(f"Chat stream timed out: {exc}") from exc
        except openai.APIConnectionError as exc:
            raise ProviderUnavailable(f"Chat provider unreachable: {exc}") from exc
        except openai.APIError as exc:
            logger.error("Streaming error: %s", exc)
            raise GenerationFailed(str(exc) or "Failed to stream response") from exc

        iterator = stream.__aiter__()
        try:
            while True:
                try:
                    chunk = await with_timeout(iterator.__anext__(), self.timeout, "Chat stream fragment")
                except StopAsyncIteration:
                    break
                except openai.APIConnectionError as exc:
                    raise ProviderUnavailable(f"Chat stream interrupted: {exc}") from exc
                except openai.APIError as exc:
                    raise GenerationFailed(str(exc) or "Failed to stream response") from exc

                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        finally:
            await stream.close()

    async def stream_complete(
        self,
        messages: Sequence[Dict[str, str]],
        on_chunk: Callable[[str], Any] | None = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> CompletionResult:
        """Push each fragment to ``on_chunk`` and return the full text."""
        fragments: List[str] = []
        try:
            async for fragment in self.stream(messages, model, temperature, max_tokens):
                fragments.append(fragment)
                if on_chunk is not None:
                    on_chunk(fragment)
        except GenerationFailed as exc:
            return CompletionResult(success=False, error=str(exc))
        return CompletionResult(success=True, text="".join(fragments))

    def _request_kwargs(
        self,
        messages: Sequence[Dict[str, str]],
        model: Optional[str],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        return {
            "model": model or self.model,
            "messages": _check_messages(messages),
            "temperature": self.temperature if temperature is None else _check_temperature(temperature),
            "max_tokens": self.max_tokens if max_tokens is None else max_tokens,
        }


def _check_temperature(value: float) -> float:
    if not 0.0 <= value <= 2.0:
        raise InvalidInput(f"temperature must be within [0, 2], got {value}")
    return value


def _check_messages(messages: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
    if not messages:
        raise InvalidInput("At least one message is required")
    checked: List[Dict[str, str]] = []
    for message in messages:
        role = message.get("role")
        if role not in ALLOWED_ROLES:
            raise InvalidInput(f"Unsupported message role: {role!r}")
        content = message.get("content")
        if not isinstance(content, str):
            raise InvalidInput("Message content must be a string")
        checked.append({"role": role, "content": content})
    return checked


__all__ = [
    "LLMClient",
    "CompletionResult",
    "DEFAULT_LLM_MODEL",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
]
