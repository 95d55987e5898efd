"""
Terminal chat with one of the dashboard agents.

Example:
    python -m scripts.chat --agent rag
    python -m scripts.chat --agent tool --message "Weather in London"
"""

from __future__ import annotations

import argparse
import asyncio

from agent_dashboard.agents.dispatcher import AGENTS, create_dispatcher
from agent_dashboard.config import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chat with a dashboard agent.")
    parser.add_argument("--agent", "-a", default="ai", choices=[agent.id for agent in AGENTS])
    parser.add_argument("--message", "-m", help="Send one message and exit")
    return parser.parse_args()


async def repl(agent_id: str, message: str | None) -> None:
    dispatcher = create_dispatcher()
    if message:
        print(await dispatcher.dispatch(agent_id, message))
        return

    print(f"Chatting with '{agent_id}'. Empty line or Ctrl-D to quit.")
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        if not line.strip():
            break
        print(await dispatcher.dispatch(agent_id, line))


def main() -> None:
    setup_logging()
    args = parse_args()
    asyncio.run(repl(args.agent, args.message))


if __name__ == "__main__":
    main()
