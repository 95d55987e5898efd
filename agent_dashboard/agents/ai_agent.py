"""
General-purpose chat agent.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Dict, List, Sequence

from agent_dashboard.errors import GenerationFailed
from agent_dashboard.llm.client import CompletionResult, LLMClient

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant. Provide clear, concise, and accurate responses."
EMPTY_RESPONSE = "No response generated"


class AIAgent:
    def __init__(self, llm_client: LLMClient, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> None:
        self.llm_client = llm_client
        self.system_prompt = system_prompt

    async def chat(self, user_input: str) -> str:
        return await self.chat_with_system_prompt(self.system_prompt, user_input)

    async def chat_with_context(self, messages: Sequence[Dict[str, str]]) -> str:
        """Continue a conversation; ``messages`` keeps only role and content."""
        history = [{"role": m["role"], "content": m["content"]} for m in messages]
        return _unwrap(await self.llm_client.complete(history))

    async def chat_with_system_prompt(self, system_prompt: str, user_input: str) -> str:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_input},
        ]
        return _unwrap(await self.llm_client.complete(messages))

    def stream(self, user_input: str) -> AsyncIterator[str]:
        return self.llm_client.stream(
            [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": user_input},
            ]
        )


def _unwrap(result: CompletionResult) -> str:
    if not result.success:
        logger.error("AI agent completion failed: %s", result.error)
        raise GenerationFailed(result.error or "Failed to get response")
    return result.text or EMPTY_RESPONSE


__all__ = ["AIAgent", "DEFAULT_SYSTEM_PROMPT"]
