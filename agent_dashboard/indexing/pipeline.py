"""
Ingestion pipeline: load documents from files and bulk-add them to the knowledge base.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

from tqdm import tqdm

from agent_dashboard.errors import InvalidInput
from agent_dashboard.vector_store.engine import DocumentInput, VectorSearchEngine

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}
JSONL_SUFFIX = ".jsonl"
DEFAULT_INGEST_BATCH = 32


def split_paragraphs(text: str) -> List[str]:
    """
    Split text on blank lines (double newline). Empty paragraphs are dropped.
    """
    return [paragraph.strip() for paragraph in text.split("\n\n") if paragraph.strip()]


def load_text_file(path: Path) -> List[DocumentInput]:
    text = path.read_text(encoding="utf-8")
    return [
        (paragraph, {"source_file": path.name, "paragraph_index": idx})
        for idx, paragraph in enumerate(split_paragraphs(text))
    ]


def load_jsonl_file(path: Path) -> List[DocumentInput]:
    items: List[DocumentInput] = []
    with path.open(encoding="utf-8") as handle:
        for line_no, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                record: Dict[str, Any] = json.loads(line)
            except json.JSONDecodeError as exc:
                raise InvalidInput(f"{path.name}:{line_no} is not valid JSON") from exc
            content = record.get("content")
            if not isinstance(content, str) or not content.strip():
                raise InvalidInput(f"{path.name}:{line_no} has no content")
            items.append((content, record.get("metadata") or {}))
    return items


def load_documents(source: Path) -> List[DocumentInput]:
    """Load one file, or every supported file of a directory in name order."""
    if source.is_dir():
        files = sorted(p for p in source.iterdir() if p.suffix in TEXT_SUFFIXES | {JSONL_SUFFIX})
    elif source.is_file():
        files = [source]
    else:
        raise InvalidInput(f"Source not found: {source}")

    items: List[DocumentInput] = []
    for path in files:
        if path.suffix == JSONL_SUFFIX:
            items.extend(load_jsonl_file(path))
        elif path.suffix in TEXT_SUFFIXES:
            items.extend(load_text_file(path))
        else:
            raise InvalidInput(f"Unsupported file type: {path.suffix}")
    logger.info("Loaded documents", extra={"files": len(files), "documents": len(items)})
    return items


@dataclass
class IngestSummary:
    ingested: int
    batches: int
    elapsed_sec: float


class IngestService:
    """Bulk-adds documents in batches; each batch is all-or-nothing."""

    def __init__(
        self,
        engine: VectorSearchEngine,
        batch_size: int = DEFAULT_INGEST_BATCH,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.engine = engine
        self.batch_size = batch_size
        self.logger = logger_ or logging.getLogger(__name__)

    async def run(self, source: Path) -> IngestSummary:
        started = time.time()
        items = load_documents(source)
        ingested, batches = await self.ingest(items)
        elapsed = time.time() - started
        self.logger.info(
            "IngestService completed",
            extra={"ingested": ingested, "batches": batches, "elapsed_sec": round(elapsed, 2)},
        )
        return IngestSummary(ingested=ingested, batches=batches, elapsed_sec=elapsed)

    async def ingest(self, items: List[DocumentInput]) -> Tuple[int, int]:
        ingested = 0
        batches = 0
        for i in tqdm(range(0, len(items), self.batch_size), desc="Ingesting", unit="batch"):
            batch = items[i : i + self.batch_size]
            stored = await self.engine.bulk_add_documents(batch)
            ingested += len(stored)
            batches += 1
            self.logger.info("Ingested batch", extra={"count": len(stored), "offset": i})
        return ingested, batches


__all__ = [
    "IngestService",
    "IngestSummary",
    "load_documents",
    "load_text_file",
    "load_jsonl_file",
    "split_paragraphs",
]
