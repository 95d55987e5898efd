"""
Smoke test of the RAG pipeline against the configured services.

Example:
    python -m scripts.rag_smoke --question "What is our refund policy?"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from agent_dashboard.config import setup_logging
from agent_dashboard.errors import DashboardError
from agent_dashboard.llm.client import LLMClient
from agent_dashboard.rag.pipeline import RAGService
from agent_dashboard.vector_store import get_search_engine


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="RAG pipeline smoke test.")
    parser.add_argument("--question", "-q", required=True, help="Question for the knowledge base")
    return parser.parse_args()


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    service = RAGService(engine=get_search_engine(), llm_client=LLMClient(), logger_=logger)

    try:
        result = asyncio.run(service.answer_with_sources(args.question))
    except DashboardError:
        logger.exception("RAG smoke failed")
        sys.exit(1)

    print("\n=== RAG Smoke Result ===")
    print(f"answer:\n{result.answer}")
    print("\nSources:")
    if not result.sources:
        print("  <none>")
    for idx, source in enumerate(result.sources, start=1):
        print(f"  [Document {idx}] {source.id}: {source.similarity:.3f}")


if __name__ == "__main__":
    main()
