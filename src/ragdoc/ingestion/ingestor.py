"""Incremental sync of an ingestion source into the vector store.

One pass reconciles the documents stored for a source with what the
source currently holds:

1. ensure the chunk and document collections exist;
2. load the stored documents of the source;
3. remove documents the source no longer has (chunks first, then the
   document record);
4. (re-)ingest new or modified documents: extract and embed the chunks,
   drop the document's old chunks and record, then upsert the new chunks
   and finally the new record.

Documents are processed one at a time.  A pass is idempotent: with no
source changes the second run neither deletes nor writes anything, and
after a failure the next run picks up where it stopped because documents
already written carry the current version marker.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from ragdoc.ingestion.base import IngestionSource, SourceReadError
from ragdoc.ingestion.models import IngestedChunk, IngestedDocument, IngestionSummary
from ragdoc.retrieval.base import VectorCollection
from ragdoc.retrieval.models import MetadataFilter

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class DataIngestor:
    """Runs ingestion passes for any :class:`IngestionSource`.

    Passes over the same ``source_id`` are serialised with a per-source
    lock; passes over different sources may run concurrently.

    Parameters
    ----------
    chunks:
        Collection holding :class:`IngestedChunk` records.
    documents:
        Collection holding :class:`IngestedDocument` records.
    embeddings:
        Embedding provider used to vectorise chunk text.
    """

    def __init__(
        self,
        chunks: VectorCollection[IngestedChunk],
        documents: VectorCollection[IngestedDocument],
        embeddings: Embeddings,
    ) -> None:
        self._chunks = chunks
        self._documents = documents
        self._embeddings = embeddings
        self._locks: dict[str, asyncio.Lock] = {}

    # -- public API -----------------------------------------------------------

    async def ingest(
        self,
        source: IngestionSource,
        *,
        stop_event: asyncio.Event | None = None,
    ) -> IngestionSummary:
        """Run one ingestion pass for *source*.

        Store or embedding failures abort the pass; they are logged and
        reported in the returned summary rather than raised.  Setting
        *stop_event* stops the pass cleanly before the next document.
        """
        source_id = source.source_id
        summary = IngestionSummary(source_id=source_id)
        lock = self._locks.setdefault(source_id, asyncio.Lock())
        async with lock:
            try:
                await self._run_pass(source, summary, stop_event)
            except Exception as exc:
                logger.exception("An error occurred during data ingestion for source %s", source_id)
                summary.error = f"{type(exc).__name__}: {exc}"
        return summary

    # -- internals ------------------------------------------------------------

    async def _run_pass(
        self,
        source: IngestionSource,
        summary: IngestionSummary,
        stop_event: asyncio.Event | None,
    ) -> None:
        await self._chunks.ensure_exists()
        await self._documents.ensure_exists()

        source_id = source.source_id
        existing = await self._documents.get_where([MetadataFilter.equals("source_id", source_id)])
        existing_by_id: dict[str, list[IngestedDocument]] = defaultdict(list)
        for document in existing:
            existing_by_id[document.document_id].append(document)

        for document in await source.list_deleted(existing):
            if _stop_requested(stop_event):
                summary.cancelled = True
                logger.info("Ingestion of source %s cancelled", source_id)
                return
            logger.info("Removing ingested data for %s", document.document_id)
            await self._delete_chunks_for_document(source_id, document.document_id)
            await self._documents.delete([document.key])
            summary.deleted.append(document.document_id)

        # A document_id with several stored records is offered as new, so the
        # rewrite below collapses them to one regardless of their versions.
        settled = [doc for doc in existing if len(existing_by_id[doc.document_id]) == 1]
        for document in await source.list_new_or_modified(settled):
            if _stop_requested(stop_event):
                summary.cancelled = True
                logger.info("Ingestion of source %s cancelled", source_id)
                return
            logger.info("Processing %s", document.document_id)
            try:
                chunks = await source.create_chunks(document)
            except SourceReadError as exc:
                logger.warning("Skipping %s from source %s: %s", exc.document_id, source_id, exc.reason)
                summary.skipped.append(document.document_id)
                continue

            chunks = await self._embed(chunks)
            await self._delete_chunks_for_document(source_id, document.document_id)
            stale_keys = [
                old.key for old in existing_by_id.get(document.document_id, []) if old.key != document.key
            ]
            if stale_keys:
                await self._documents.delete(stale_keys)
            if chunks:
                await self._chunks.upsert(chunks)
            # Written last: a stored document marks its chunks as complete.
            await self._documents.upsert([document])
            summary.ingested.append(document.document_id)
            summary.chunks_written += len(chunks)

        summary.completed = True
        logger.info("Ingestion is up-to-date for source %s", source_id)

    async def _embed(self, chunks: list[IngestedChunk]) -> list[IngestedChunk]:
        if not chunks:
            return []
        vectors = await self._embeddings.aembed_documents([chunk.text for chunk in chunks])
        return [
            chunk.model_copy(update={"vector": list(vector)})
            for chunk, vector in zip(chunks, vectors, strict=True)
        ]

    async def _delete_chunks_for_document(self, source_id: str, document_id: str) -> None:
        stale = await self._chunks.get_where(
            [
                MetadataFilter.equals("source_id", source_id),
                MetadataFilter.equals("document_id", document_id),
            ]
        )
        if stale:
            await self._chunks.delete([chunk.key for chunk in stale])


def _stop_requested(stop_event: asyncio.Event | None) -> bool:
    return stop_event is not None and stop_event.is_set()


async def ingest_data(
    source: IngestionSource,
    *,
    chunks: VectorCollection[IngestedChunk],
    documents: VectorCollection[IngestedDocument],
    embeddings: Embeddings,
    stop_event: asyncio.Event | None = None,
) -> IngestionSummary:
    """Run a single pass for *source* with explicitly supplied collaborators."""
    ingestor = DataIngestor(chunks, documents, embeddings)
    return await ingestor.ingest(source, stop_event=stop_event)
