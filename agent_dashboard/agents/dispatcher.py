"""
Routes a chat message to the selected agent using lightweight string matching.

Whatever goes wrong, the caller gets a reply string back.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List

from agent_dashboard.agents.ai_agent import AIAgent
from agent_dashboard.agents.prompt_agent import PromptAgent
from agent_dashboard.agents.tool_agent import ToolAgent
from agent_dashboard.agents.workflow_agent import WORKFLOW_LOGS_TABLE, WorkflowAction, WorkflowAgent
from agent_dashboard.embeddings.client import EmbeddingsClient
from agent_dashboard.llm.client import LLMClient
from agent_dashboard.rag.pipeline import RAGService
from agent_dashboard.vector_store import get_document_store
from agent_dashboard.vector_store.base import DocumentStore
from agent_dashboard.vector_store.engine import VectorSearchEngine

logger = logging.getLogger(__name__)

NOT_IMPLEMENTED = "Agent not implemented"


@dataclass(frozen=True)
class AgentInfo:
    id: str
    name: str
    description: str
    category: str


AGENTS: List[AgentInfo] = [
    AgentInfo(
        id="ai",
        name="AI Assistant",
        description="General-purpose AI that can answer questions, help with tasks, and engage in natural conversation.",
        category="ai",
    ),
    AgentInfo(
        id="prompt",
        name="Prompt Templates",
        description="Pre-configured prompts for summarization, analysis, translation, code review, and more.",
        category="prompt",
    ),
    AgentInfo(
        id="rag",
        name="Knowledge Base",
        description="RAG-powered agent that retrieves information from your knowledge base using vector search.",
        category="rag",
    ),
    AgentInfo(
        id="workflow",
        name="Workflow Automation",
        description="Automate tasks like database operations, notifications, emails, and webhook calls.",
        category="workflow",
    ),
    AgentInfo(
        id="tool",
        name="External Tools",
        description="Integrates with external APIs: weather, crypto prices, calculator, datetime, and exchange rates.",
        category="tool",
    ),
]

_TEMPLATE_COMMAND = re.compile(r"^(\w+):\s*(.+)$", flags=re.DOTALL)
_TRANSLATE_COMMAND = re.compile(r"^(.+?)\s+to\s+(\w+)$", flags=re.IGNORECASE | re.DOTALL)
_EMAIL_COMMAND = re.compile(r"email\s+to\s+(\S+@[^\s:]+)\s*:\s*(.+)$", flags=re.IGNORECASE | re.DOTALL)
_WEATHER_NOISE = re.compile(r"\b(weather|in|for)\b", flags=re.IGNORECASE)
_CRYPTO_SYMBOL = re.compile(r"\b[A-Z]{3,4}\b")
_CURRENCY_PAIR = re.compile(r"\b([A-Za-z]{3})\s+to\s+([A-Za-z]{3})\b")
_TIMEZONE = re.compile(r"\b([A-Za-z_]+/[A-Za-z_]+|UTC)\b")
_CALCULATION = re.compile(r"[\d+\-*/()]")
_CALCULATION_NOISE = re.compile(r"calculate|what is|=", flags=re.IGNORECASE)

WORKFLOW_HELP = """Workflow Agent Commands:

• "Send notification: [message]" - Send a notification
• "Database insert: [data]" - Insert data into database
• "Send email to [email]: [message]" - Queue an email

Try one of these commands to automate a workflow!"""


class AgentDispatcher:
    def __init__(
        self,
        ai_agent: AIAgent,
        prompt_agent: PromptAgent,
        rag_service: RAGService,
        workflow_agent: WorkflowAgent,
        tool_agent: ToolAgent,
    ) -> None:
        self.ai_agent = ai_agent
        self.prompt_agent = prompt_agent
        self.rag_service = rag_service
        self.workflow_agent = workflow_agent
        self.tool_agent = tool_agent
        self._handlers: Dict[str, Callable[[str], Awaitable[str]]] = {
            "ai": self.ai_agent.chat,
            "prompt": self.handle_prompt,
            "rag": self.handle_rag,
            "workflow": self.handle_workflow,
            "tool": self.handle_tool,
        }

    @staticmethod
    def list_agents() -> List[AgentInfo]:
        return list(AGENTS)

    async def dispatch(self, agent_id: str, message: str) -> str:
        handler = self._handlers.get(agent_id)
        if handler is None:
            return NOT_IMPLEMENTED
        try:
            return await handler(message)
        except Exception as exc:
            logger.exception("Agent %s failed", agent_id)
            return f"Error: {exc}"

    # --- Prompt templates ---
    async def handle_prompt(self, message: str) -> str:
        templates = self.prompt_agent.list_templates()
        lowered = message.lower()

        if "list" in lowered or "available" in lowered:
            numbered = "\n".join(f"{i}. {name}" for i, name in enumerate(templates, start=1))
            return (
                f"Available prompt templates:\n\n{numbered}\n\n"
                "To use a template, specify:\n"
                '- "summarize: [your text]"\n'
                '- "analyze: [your content]"\n'
                '- "translate: [text] to [language]"'
            )

        command = _TEMPLATE_COMMAND.match(message.strip())
        if command:
            template_name, content = command.groups()
            if template_name == "translate":
                translate = _TRANSLATE_COMMAND.match(content.strip())
                if translate:
                    text, language = translate.groups()
                    return await self.prompt_agent.run("translate", {"text": text, "language": language})
            return await self.prompt_agent.run(
                template_name,
                {"text": content, "content": content, "code": content, "topic": content, "concept": content},
            )

        return (
            f"Please specify a template. Available templates: {', '.join(templates)}\n\n"
            'Example: "summarize: Your text here"'
        )

    # --- Knowledge base ---
    async def handle_rag(self, message: str) -> str:
        if message.lower().startswith("add:"):
            result = await self.rag_service.add_knowledge_document(message[4:].strip())
            if result.success:
                return "Document added to knowledge base successfully!"
            return f"Failed to add document: {result.error}"
        return await self.rag_service.answer(message)

    # --- Workflows ---
    async def handle_workflow(self, message: str) -> str:
        lowered = message.lower()

        email = _EMAIL_COMMAND.search(message)
        if email:
            to, body = email.groups()
            action = WorkflowAction(type="email", payload={"to": to, "subject": "Message from dashboard", "body": body})
        elif "database" in lowered or "insert" in lowered:
            action = WorkflowAction(
                type="database",
                payload={
                    "operation": "insert",
                    "table": WORKFLOW_LOGS_TABLE,
                    "data": {
                        "action": "test_insert",
                        "message": message,
                        "created_at": datetime.now(timezone.utc).isoformat(),
                    },
                },
            )
        elif "notification" in lowered or "notify" in lowered:
            action = WorkflowAction(type="notification", payload={"title": "Test Notification", "body": message})
        else:
            return WORKFLOW_HELP

        result = await self.workflow_agent.run(action)
        return f"✓ {result.message}" if result.success else f"✗ {result.message}"

    # --- Tools ---
    async def handle_tool(self, message: str) -> str:
        lowered = message.lower()

        if "weather" in lowered:
            location = " ".join(_WEATHER_NOISE.sub(" ", message).split())
            result = await self.tool_agent.run("weather", {"location": location})
            if not result.success:
                return f"Error: {result.error}"
            data = result.data
            return (
                f"Weather in {data['location']}:\n\n"
                f"🌡️ Temperature: {data['temperature']}\n"
                f"☁️ Condition: {data['condition']}\n"
                f"💧 Humidity: {data['humidity']}\n"
                f"💨 Wind Speed: {data['windSpeed']}\n"
                f"🌡️ Feels Like: {data['feelsLike']}"
            )

        if "crypto" in lowered or "bitcoin" in lowered or "btc" in lowered:
            found = _CRYPTO_SYMBOL.search(message)
            result = await self.tool_agent.run("crypto", {"symbol": found.group(0) if found else "BTC"})
            if not result.success:
                return f"Error: {result.error}"
            return f"💰 {result.data['symbol']} Price: {result.data['price']}"

        if "exchange" in lowered:
            pair = _CURRENCY_PAIR.search(message)
            if not pair:
                return 'Please specify currencies, e.g. "Exchange rate USD to EUR"'
            result = await self.tool_agent.run("exchange", {"from": pair.group(1), "to": pair.group(2)})
            if not result.success:
                return f"Error: {result.error}"
            return f"💱 {result.data['example']}"

        if "time" in lowered or "date" in lowered:
            zone = _TIMEZONE.search(message)
            result = await self.tool_agent.run("datetime", {"timezone": zone.group(1) if zone else None})
            if not result.success:
                return f"Error: {result.error}"
            return f"🕒 {result.data['formatted']} ({result.data['timezone']})"

        if "calculate" in lowered or _CALCULATION.search(message):
            expression = _CALCULATION_NOISE.sub("", message).strip()
            result = await self.tool_agent.run("calculator", {"expression": expression})
            if not result.success:
                return f"Error: {result.error}"
            return f"🧮 {result.data['expression']} = {result.data['result']}"

        return (
            f"Available tools: {', '.join(self.tool_agent.list_tools())}\n\n"
            "Examples:\n"
            '• "Weather in London"\n'
            '• "BTC crypto price"\n'
            '• "Calculate 15 * 32 + 10"\n'
            '• "Exchange rate USD to EUR"\n'
            '• "Time in Europe/Berlin"'
        )


def create_dispatcher(
    llm_client: LLMClient | None = None,
    engine: VectorSearchEngine | None = None,
    store: DocumentStore | None = None,
) -> AgentDispatcher:
    """Wire every agent against the configured OpenAI and Supabase clients."""
    llm_client = llm_client or LLMClient()
    store = store or get_document_store()
    engine = engine or VectorSearchEngine(store, EmbeddingsClient())
    ai_agent = AIAgent(llm_client)
    return AgentDispatcher(
        ai_agent=ai_agent,
        prompt_agent=PromptAgent(ai_agent),
        rag_service=RAGService(engine, llm_client),
        workflow_agent=WorkflowAgent(store),
        tool_agent=ToolAgent(),
    )


__all__ = ["AgentDispatcher", "AgentInfo", "AGENTS", "NOT_IMPLEMENTED", "create_dispatcher"]
