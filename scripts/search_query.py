"""
CLI to search the knowledge base by text query.

Example:
    python -m scripts.search_query --query "refund policy" --top-k 5 --threshold 0.5
"""

from __future__ import annotations

import argparse
import asyncio
import json

from agent_dashboard.config import settings
from agent_dashboard.vector_store import get_search_engine


def main() -> None:
    parser = argparse.ArgumentParser(description="Search stored documents by text query.")
    parser.add_argument("--query", "-q", required=True, help="Query text")
    parser.add_argument("--top-k", type=int, default=settings.max_results, help="How many results to return")
    parser.add_argument("--threshold", type=float, default=settings.similarity_threshold, help="Minimum similarity")
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="KEY=JSON",
        help="Metadata filter (switches to hybrid search), e.g. --filter 'source=\"faq\"'",
    )
    parser.add_argument("--snippet", type=int, default=300, help="Snippet length")
    args = parser.parse_args()

    engine = get_search_engine()
    if args.filter:
        filters = {}
        for item in args.filter:
            key, _, raw = item.partition("=")
            filters[key] = json.loads(raw)
        results = asyncio.run(
            engine.hybrid_search(args.query, filters=filters, threshold=args.threshold, max_results=args.top_k)
        )
    else:
        results = asyncio.run(engine.search(args.query, threshold=args.threshold, max_results=args.top_k))

    if not results:
        print("No results")
        return

    for idx, result in enumerate(results, start=1):
        snippet = result.content[: args.snippet].replace("\n", " ")
        print(f"\n#{idx} similarity={result.similarity:.4f} id={result.id}")
        print("metadata:", json.dumps(result.metadata, ensure_ascii=False))
        print("text:", snippet + ("..." if len(result.content) > args.snippet else ""))


if __name__ == "__main__":
    main()
