"""
CLI to bulk-ingest documents into the knowledge base.

Text/Markdown files are split into paragraphs; .jsonl files hold one
{"content": ..., "metadata": {...}} record per line.

Example:
    python -m scripts.ingest_documents --source ./data/docs --batch 32
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from agent_dashboard.config import setup_logging
from agent_dashboard.errors import DashboardError
from agent_dashboard.indexing.pipeline import DEFAULT_INGEST_BATCH, IngestService
from agent_dashboard.vector_store import get_search_engine


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bulk-ingest documents into the knowledge base.")
    parser.add_argument("--source", "-s", required=True, type=Path, help="File or directory to ingest")
    parser.add_argument(
        "--batch",
        type=int,
        default=DEFAULT_INGEST_BATCH,
        help="Documents per bulk insert.",
    )
    return parser.parse_args()


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    service = IngestService(get_search_engine(), batch_size=args.batch, logger_=logger)

    try:
        summary = asyncio.run(service.run(args.source))
    except DashboardError:
        logger.exception("Ingest failed")
        sys.exit(1)

    print(
        f"Ingested documents: {summary.ingested} in {summary.batches} batches "
        f"(elapsed {summary.elapsed_sec:.2f}s)"
    )


if __name__ == "__main__":
    main()
