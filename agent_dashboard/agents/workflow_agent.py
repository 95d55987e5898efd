"""
Workflow automation agent: database writes, notifications, queued emails, webhooks.

Every action returns a ``WorkflowResult``; failures are reported, never raised.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Literal, Sequence

import httpx

from agent_dashboard.config import settings
from agent_dashboard.errors import InvalidInput
from agent_dashboard.vector_store.base import DocumentStore

logger = logging.getLogger(__name__)

ActionType = Literal["email", "database", "notification", "webhook"]

NOTIFICATIONS_TABLE = "notifications"
EMAILS_TABLE = "emails"
WORKFLOW_LOGS_TABLE = "workflow_logs"


@dataclass
class WorkflowAction:
    type: ActionType
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WorkflowResult:
    success: bool
    message: str
    data: Any = None


Workflow = Callable[[], Awaitable[List[WorkflowResult]]]


class WorkflowAgent:
    def __init__(
        self,
        store: DocumentStore,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = settings.request_timeout_sec,
    ) -> None:
        self.store = store
        self.http_client = http_client
        self.timeout = timeout

    async def run(self, action: WorkflowAction) -> WorkflowResult:
        handlers = {
            "database": self._database,
            "notification": self._notification,
            "email": self._email,
            "webhook": self._webhook,
        }
        handler = handlers.get(action.type)
        if handler is None:
            return WorkflowResult(success=False, message=f"Unknown action type: {action.type}")
        try:
            return await handler(action.payload)
        except Exception as exc:
            logger.exception("Workflow action %s failed", action.type)
            return WorkflowResult(success=False, message=str(exc) or "Workflow execution failed")

    # --- Actions ---
    async def _database(self, payload: Dict[str, Any]) -> WorkflowResult:
        operation = payload.get("operation")
        table = payload.get("table")
        if not table:
            raise InvalidInput("Table name is required for database operations")

        if operation == "insert":
            row = await self.store.insert(table, payload.get("data") or {})
            return WorkflowResult(success=True, message=f"Successfully inserted document into {table}", data=row)
        if operation == "update":
            record_id = payload.get("id")
            if not record_id:
                raise InvalidInput("Document ID is required for update operations")
            row = await self.store.update(table, record_id, payload.get("data") or {})
            return WorkflowResult(success=True, message=f"Successfully updated document in {table}", data=row)
        raise InvalidInput(f"Unsupported database operation: {operation}")

    async def _notification(self, payload: Dict[str, Any]) -> WorkflowResult:
        title, body, user_id = payload.get("title"), payload.get("body"), payload.get("userId")
        if not title or not body:
            raise InvalidInput("Title and body are required for notifications")

        logger.info("Notification to user %s: %s", user_id or "all", title, extra={"body": body})
        await self.store.insert(
            NOTIFICATIONS_TABLE,
            {"title": title, "body": body, "user_id": user_id, "read": False, "created_at": _now()},
        )
        return WorkflowResult(success=True, message="Notification sent successfully")

    async def _email(self, payload: Dict[str, Any]) -> WorkflowResult:
        to, subject, body = payload.get("to"), payload.get("subject"), payload.get("body")
        if not to or not subject or not body:
            raise InvalidInput("To, subject, and body are required for emails")

        logger.info("Queueing email to %s", to, extra={"subject": subject})
        await self.store.insert(
            EMAILS_TABLE,
            {"to": to, "subject": subject, "body": body, "sent": True, "sent_at": _now()},
        )
        return WorkflowResult(success=True, message=f"Email queued for sending to {to}")

    async def _webhook(self, payload: Dict[str, Any]) -> WorkflowResult:
        url = payload.get("url")
        if not url:
            raise InvalidInput("URL is required for webhook calls")
        method = payload.get("method", "POST")
        headers = {"Content-Type": "application/json", **(payload.get("headers") or {})}
        body = payload.get("body")

        logger.info("Calling webhook", extra={"url": url, "method": method})
        if self.http_client is not None:
            response = await self.http_client.request(method, url, headers=headers, json=body, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, headers=headers, json=body)

        try:
            data = response.json()
        except ValueError:
            data = None
        if response.is_success:
            return WorkflowResult(success=True, message="Webhook called successfully", data=data)
        return WorkflowResult(success=False, message=f"Webhook failed with status {response.status_code}", data=data)


def create_workflow(agent: WorkflowAgent, name: str, actions: Sequence[WorkflowAction]) -> Workflow:
    """Bundle actions into a callable that runs them in order and stops at the first failure."""

    async def workflow() -> List[WorkflowResult]:
        logger.info("Workflow started: %s", name)
        results: List[WorkflowResult] = []
        for action in actions:
            result = await agent.run(action)
            results.append(result)
            logger.info(
                "Workflow %s action %s: %s %s",
                name,
                action.type,
                "ok" if result.success else "failed",
                result.message,
            )
            if not result.success:
                logger.error("Workflow %s failed at action: %s", name, action.type)
                break
        logger.info("Workflow completed: %s", name)
        return results

    return workflow


def schedule_workflow(workflow: Workflow, interval_sec: float) -> "asyncio.Task[None]":
    """Run ``workflow`` every ``interval_sec`` seconds until the returned task is cancelled."""
    if interval_sec <= 0:
        raise InvalidInput("interval_sec must be positive")

    async def loop() -> None:
        while True:
            await asyncio.sleep(interval_sec)
            await workflow()

    return asyncio.create_task(loop())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


__all__ = [
    "WorkflowAgent",
    "WorkflowAction",
    "WorkflowResult",
    "create_workflow",
    "schedule_workflow",
]
