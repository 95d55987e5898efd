"""Unit tests for the AI and prompt template agents."""

import asyncio

import pytest

from agent_dashboard.agents.ai_agent import DEFAULT_SYSTEM_PROMPT, AIAgent
from agent_dashboard.agents.prompt_agent import BUILTIN_TEMPLATES, TEMPLATE_SYSTEM_PROMPT, PromptAgent
from agent_dashboard.errors import GenerationFailed, InvalidInput
from agent_dashboard.llm.client import CompletionResult

from tests.fakes import FakeLLMClient


class TestAIAgent:
    """Tests for the general chat agent."""

    def test_chat_uses_default_system_prompt(self, llm_client):
        agent = AIAgent(llm_client)

        assert asyncio.run(agent.chat("Hi")) == "grounded answer"
        assert llm_client.calls[0] == [
            {"role": "system", "content": DEFAULT_SYSTEM_PROMPT},
            {"role": "user", "content": "Hi"},
        ]

    def test_chat_with_context_keeps_history(self, llm_client):
        history = [
            {"role": "user", "content": "My name is Sam", "id": "m1"},
            {"role": "assistant", "content": "Hello Sam"},
            {"role": "user", "content": "What is my name?"},
        ]

        asyncio.run(AIAgent(llm_client).chat_with_context(history))

        assert llm_client.calls[0] == [{"role": m["role"], "content": m["content"]} for m in history]

    def test_empty_text_placeholder(self):
        agent = AIAgent(FakeLLMClient(result=CompletionResult(success=True, text="")))

        assert asyncio.run(agent.chat("Hi")) == "No response generated"

    def test_failure_raises(self):
        agent = AIAgent(FakeLLMClient(result=CompletionResult(success=False, error="quota exceeded")))

        with pytest.raises(GenerationFailed, match="quota exceeded"):
            asyncio.run(agent.chat("Hi"))

    def test_stream(self, llm_client):
        agent = AIAgent(llm_client)

        async def collect():
            return [fragment async for fragment in agent.stream("Hi")]

        assert asyncio.run(collect()) == ["Hello", " world"]


class TestPromptTemplates:
    """Tests for template management and formatting."""

    def test_builtin_templates(self, llm_client):
        agent = PromptAgent(AIAgent(llm_client))

        assert agent.list_templates() == ["summarize", "analyze", "translate", "codeReview", "brainstorm", "explain"]
        assert agent.get_template("translate").variables == ("text", "language")
        assert agent.get_template("missing") is None

    def test_format_prompt(self, llm_client):
        agent = PromptAgent(AIAgent(llm_client))

        prompt = agent.format_prompt("translate", {"text": "Hello", "language": "French"})

        assert prompt == "Translate the following text to French:\n\nHello\n\nTranslation:"

    def test_unknown_template(self, llm_client):
        agent = PromptAgent(AIAgent(llm_client))

        with pytest.raises(InvalidInput, match='Template "poem" not found'):
            agent.format_prompt("poem", {})

    def test_missing_variable(self, llm_client):
        agent = PromptAgent(AIAgent(llm_client))

        with pytest.raises(InvalidInput, match="Missing variable: language"):
            agent.format_prompt("translate", {"text": "Hello"})

    def test_add_template_is_per_instance(self, llm_client):
        """Test custom templates do not leak into the built-in set or other agents."""
        agent = PromptAgent(AIAgent(llm_client))
        other = PromptAgent(AIAgent(llm_client))

        agent.add_template("haiku", "Write a haiku about {topic}", ["topic"])

        assert agent.format_prompt("haiku", {"topic": "rain"}) == "Write a haiku about rain"
        assert other.get_template("haiku") is None
        assert "haiku" not in BUILTIN_TEMPLATES

    def test_run_sends_formatted_prompt(self, llm_client):
        agent = PromptAgent(AIAgent(llm_client))

        asyncio.run(agent.run("summarize", {"text": "Long text"}))

        system, user = llm_client.calls[0]
        assert system == {"role": "system", "content": TEMPLATE_SYSTEM_PROMPT}
        assert user["content"].startswith("Summarize the following text in a concise manner:\n\nLong text")
