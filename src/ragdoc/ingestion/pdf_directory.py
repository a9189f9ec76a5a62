"""Ingestion source backed by a directory of PDF files."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from ragdoc.ingestion.base import IngestionSource, SourceReadError
from ragdoc.ingestion.chunker import DEFAULT_MAX_TOKENS, split_pages
from ragdoc.ingestion.loader import iter_pdf_pages
from ragdoc.ingestion.models import IngestedChunk, IngestedDocument

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"


def source_file_id(path: Path) -> str:
    """Document id of a file: its name without the directory."""
    return path.name


def source_file_version(path: Path) -> str:
    """Version marker of a file: its last-modified time as ISO-8601 UTC."""
    mtime = path.stat().st_mtime
    return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat()


class PDFDirectorySource(IngestionSource):
    """Tracks the ``*.pdf`` files directly inside one directory.

    Files are identified by name and versioned by modification time, so
    touching a file is enough to get it re-ingested.  Subdirectories are
    not scanned.

    Parameters
    ----------
    directory:
        Directory to scan.
    max_tokens:
        Chunk size bound forwarded to the chunker.
    """

    def __init__(self, directory: str | Path, *, max_tokens: int = DEFAULT_MAX_TOKENS) -> None:
        self.directory = Path(directory)
        self.max_tokens = max_tokens

    @property
    def source_id(self) -> str:
        return f"{type(self).__name__}:{self.directory}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.directory)!r})"

    # -- IngestionSource overrides --------------------------------------------

    async def list_new_or_modified(
        self, existing: Sequence[IngestedDocument]
    ) -> list[IngestedDocument]:
        current = await asyncio.to_thread(self._scan_versions)
        known = {doc.document_id: doc.document_version for doc in existing}
        return [
            IngestedDocument(
                source_id=self.source_id,
                document_id=document_id,
                document_version=version,
            )
            for document_id, version in current.items()
            if known.get(document_id) != version
        ]

    async def list_deleted(
        self, existing: Sequence[IngestedDocument]
    ) -> list[IngestedDocument]:
        current = await asyncio.to_thread(self._scan_versions)
        return [doc for doc in existing if doc.document_id not in current]

    async def create_chunks(self, document: IngestedDocument) -> list[IngestedChunk]:
        return await asyncio.to_thread(self._extract_chunks, document)

    # -- internals ------------------------------------------------------------

    def _pdf_files(self) -> list[Path]:
        return sorted(
            p for p in self.directory.iterdir() if p.is_file() and p.suffix.lower() == PDF_SUFFIX
        )

    def _scan_versions(self) -> dict[str, str]:
        versions: dict[str, str] = {}
        for path in self._pdf_files():
            try:
                versions[source_file_id(path)] = source_file_version(path)
            except FileNotFoundError:
                # Removed between listing and stat.
                continue
        return versions

    def _extract_chunks(self, document: IngestedDocument) -> list[IngestedChunk]:
        path = self.directory / document.document_id
        try:
            pages = list(iter_pdf_pages(path))
        except (RuntimeError, OSError, ValueError) as exc:
            # PyMuPDF signals corrupt / empty files with RuntimeError subclasses.
            raise SourceReadError(document.document_id, str(exc)) from exc

        chunks = [
            IngestedChunk(
                source_id=document.source_id,
                document_id=document.document_id,
                page_number=page_number,
                index_on_page=index,
                text=text,
            )
            for page_number, index, text in split_pages(pages, self.max_tokens)
        ]
        logger.debug(
            "Extracted %d chunks from %d pages of %s", len(chunks), len(pages), document.document_id
        )
        return chunks
