"""
Utility script to inspect stored documents without embeddings.

Usage:
    python -m scripts.inspect_index --limit 5 --offset 0
"""

from __future__ import annotations

import argparse
import asyncio
import json

from agent_dashboard.vector_store import get_search_engine


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect stored documents, newest first.")
    parser.add_argument("--limit", type=int, default=5, help="Number of documents to show")
    parser.add_argument("--offset", type=int, default=0, help="Offset for pagination")
    args = parser.parse_args()

    documents = asyncio.run(get_search_engine().list_documents())
    page = documents[args.offset : args.offset + args.limit]

    print(f"Total documents: {len(documents)}")
    print(f"Showing {len(page)} documents (offset={args.offset}, limit={args.limit})")
    for idx, doc in enumerate(page, start=1):
        created = doc.created_at.isoformat() if doc.created_at else "<unknown>"
        print(f"\n#{idx}: {doc.id} (created {created}, dim={len(doc.embedding)})")
        print("Metadata:", json.dumps(doc.metadata, ensure_ascii=False))
        snippet = doc.content[:400].replace("\n", " ")
        print("Text:", snippet + ("..." if len(doc.content) > 400 else ""))


if __name__ == "__main__":
    main()
