"""Background ingestion over the configured PDF directories.

Run a pass from the command line::

    PDF_INGESTION_ENABLED=true \\
    PDF_DIRECTORIES='["/data/manuals"]' \\
    python -m ragdoc.ingestion.worker
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from ragdoc.config import Settings
from ragdoc.ingestion.ingestor import DataIngestor
from ragdoc.ingestion.models import IngestionSummary
from ragdoc.ingestion.pdf_directory import PDFDirectorySource

logger = logging.getLogger(__name__)


class IngestionWorker:
    """Scans every configured directory with a :class:`PDFDirectorySource`.

    Parameters
    ----------
    settings:
        Supplies ``pdf_ingestion_enabled``, ``pdf_directories``,
        ``chunk_max_tokens`` and ``ingestion_interval_seconds``.
    ingestor:
        Shared ingestor; its per-source lock keeps overlapping passes over
        one directory from racing.
    """

    def __init__(self, settings: Settings, ingestor: DataIngestor) -> None:
        self._settings = settings
        self._ingestor = ingestor

    def directories(self) -> list[Path]:
        """Configured directories, de-duplicated by resolved path, in config order."""
        seen: set[Path] = set()
        unique: list[Path] = []
        for raw in self._settings.pdf_directories:
            path = Path(raw).expanduser()
            resolved = path.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            unique.append(path)
        return unique

    async def run_once(self, stop_event: asyncio.Event | None = None) -> list[IngestionSummary]:
        """Run one pass per existing directory; return the summaries."""
        if not self._settings.pdf_ingestion_enabled:
            logger.info("PDF ingestion is disabled, skipping ingestion worker execution.")
            return []

        summaries: list[IngestionSummary] = []
        for directory in self.directories():
            if stop_event is not None and stop_event.is_set():
                break
            if not directory.is_dir():
                logger.warning("PDF directory does not exist: %s", directory)
                continue
            source = PDFDirectorySource(directory, max_tokens=self._settings.chunk_max_tokens)
            summary = await self._ingestor.ingest(source, stop_event=stop_event)
            if summary.error:
                logger.error("Failed to ingest from %s: %s", directory, summary.error)
            summaries.append(summary)
        return summaries

    async def run_periodically(self, stop_event: asyncio.Event) -> None:
        """Repeat :meth:`run_once` every ``ingestion_interval_seconds`` until stopped."""
        interval = self._settings.ingestion_interval_seconds
        while not stop_event.is_set():
            await self.run_once(stop_event)
            if interval <= 0:
                return
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=interval)


async def _main() -> None:
    from ragdoc.config import settings
    from ragdoc.ingestion.embedder import get_embedding_function
    from ragdoc.logging_config import configure_logging
    from ragdoc.retrieval.chroma_store import build_collections

    configure_logging(settings.log_level)
    chunks, documents = build_collections()
    worker = IngestionWorker(settings, DataIngestor(chunks, documents, get_embedding_function()))
    await worker.run_periodically(asyncio.Event())


if __name__ == "__main__":
    asyncio.run(_main())
