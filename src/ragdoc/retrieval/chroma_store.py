"""Chroma implementation of the vector-collection abstraction.

The chromadb client is synchronous; every call is pushed to a worker
thread with :func:`asyncio.to_thread` so ingestion and search stay
cooperative.  Vectors are always computed by the caller, so collections
are opened without an embedding function.
"""

from __future__ import annotations

import asyncio
import logging
from abc import abstractmethod
from collections.abc import Sequence
from typing import Any, NamedTuple

import chromadb
from chromadb.config import Settings as ChromaSettings

from ragdoc.config import settings
from ragdoc.ingestion.models import IngestedChunk, IngestedDocument
from ragdoc.retrieval.base import R, VectorCollection
from ragdoc.retrieval.models import SUPPORTED_OPERATORS, MetadataFilter

logger = logging.getLogger(__name__)


def _build_chroma_where(filters: list[MetadataFilter] | None) -> dict[str, Any] | None:
    """Convert a list of :class:`MetadataFilter` to Chroma ``where`` syntax."""
    if not filters:
        return None

    clauses: list[dict[str, Any]] = []
    for f in filters:
        if f.operator not in SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {f.operator!r}")
        clauses.append({f.field: {f"${f.operator}": f.value}})

    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def get_chroma_client(
    *,
    host: str | None = None,
    port: int | None = None,
    persist_directory: str | None = None,
) -> Any:
    """Return a Chroma client built from explicit arguments or the global settings.

    A non-empty *persist_directory* selects an embedded on-disk database;
    otherwise an HTTP client for a Chroma server is returned.
    """
    if persist_directory is None:
        persist_directory = settings.chroma_persist_directory
    if persist_directory:
        return chromadb.PersistentClient(
            path=persist_directory,
            settings=ChromaSettings(anonymized_telemetry=False),
        )
    return chromadb.HttpClient(
        host=host or settings.chroma_host,
        port=port or settings.chroma_port,
        settings=ChromaSettings(anonymized_telemetry=False),
    )


class _ChromaRow(NamedTuple):
    id: str
    embedding: list[float]
    document: str | None
    metadata: dict[str, Any]


def _column(values: Any, count: int, default: Any = None) -> list[Any]:
    # Embeddings come back as numpy arrays, which have no truth value.
    if values is None:
        return [default] * count
    return list(values)


def _as_vector(embedding: Any) -> list[float] | None:
    if embedding is None:
        return None
    return [float(x) for x in embedding]


class ChromaCollection(VectorCollection[R]):
    """Shared plumbing for Chroma-backed collections.

    Subclasses only describe how a record maps to a Chroma row and back.

    Parameters
    ----------
    client:
        A chromadb client (HTTP, persistent or ephemeral).
    collection_name:
        Name of the Chroma collection.
    """

    distance_metric = "cosine"

    def __init__(self, client: Any, collection_name: str) -> None:
        super().__init__(collection_name)
        self._client = client
        self._collection: Any = None

    # -- record mapping -------------------------------------------------------

    @abstractmethod
    def _to_row(self, record: R) -> _ChromaRow: ...

    @abstractmethod
    def _from_row(
        self, key: str, document: str | None, metadata: dict[str, Any], vector: list[float] | None
    ) -> R: ...

    # -- VectorCollection overrides -------------------------------------------

    async def ensure_exists(self) -> None:
        if self._collection is not None:
            return
        self._collection = await asyncio.to_thread(
            self._client.get_or_create_collection,
            name=self.collection_name,
            metadata={"hnsw:space": self.distance_metric},
            embedding_function=None,
        )
        logger.debug("Chroma collection %s ready", self.collection_name)

    async def upsert(self, records: Sequence[R]) -> None:
        if not records:
            return
        collection = await self._handle()
        rows = [self._to_row(record) for record in records]
        documents = [row.document for row in rows]
        await asyncio.to_thread(
            collection.upsert,
            ids=[row.id for row in rows],
            embeddings=[row.embedding for row in rows],
            metadatas=[row.metadata for row in rows],
            documents=documents if all(d is not None for d in documents) else None,
        )

    async def delete(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        collection = await self._handle()
        await asyncio.to_thread(collection.delete, ids=list(keys))

    async def get_where(
        self,
        filters: list[MetadataFilter],
        *,
        limit: int | None = None,
    ) -> list[R]:
        collection = await self._handle()
        results = await asyncio.to_thread(
            collection.get,
            where=_build_chroma_where(filters),
            limit=limit,
            include=["documents", "metadatas", "embeddings"],
        )
        ids = results.get("ids") or []
        docs = _column(results.get("documents"), len(ids))
        metas = _column(results.get("metadatas"), len(ids), {})
        vectors = _column(results.get("embeddings"), len(ids))
        return [
            self._from_row(key, doc, meta or {}, _as_vector(vec))
            for key, doc, meta, vec in zip(ids, docs, metas, vectors)
        ]

    async def search(
        self,
        vector: list[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[R]:
        collection = await self._handle()
        results = await asyncio.to_thread(
            collection.query,
            query_embeddings=[vector],
            n_results=k,
            where=_build_chroma_where(filters),
            include=["documents", "metadatas", "embeddings", "distances"],
        )
        ids = (results.get("ids") or [[]])[0]
        docs, metas, vectors = (
            _column(None if results.get(name) is None else results[name][0], len(ids), default)
            for name, default in (("documents", None), ("metadatas", {}), ("embeddings", None))
        )
        # Chroma returns hits ordered by ascending distance.
        return [
            self._from_row(key, doc, meta or {}, _as_vector(vec))
            for key, doc, meta, vec in zip(ids, docs, metas, vectors)
        ]

    async def _handle(self) -> Any:
        await self.ensure_exists()
        return self._collection


class ChromaDocumentCollection(ChromaCollection[IngestedDocument]):
    """Document records; the stored vector is a fixed placeholder."""

    distance_metric = "l2"

    def _to_row(self, record: IngestedDocument) -> _ChromaRow:
        return _ChromaRow(
            id=record.key,
            embedding=list(record.vector),
            document=None,
            metadata={
                "source_id": record.source_id,
                "document_id": record.document_id,
                "document_version": record.document_version,
            },
        )

    def _from_row(
        self, key: str, document: str | None, metadata: dict[str, Any], vector: list[float] | None
    ) -> IngestedDocument:
        # The stored vector is always the placeholder; the model default restores it.
        return IngestedDocument(
            key=key,
            source_id=metadata.get("source_id", ""),
            document_id=metadata.get("document_id", ""),
            document_version=metadata.get("document_version", ""),
        )


class ChromaChunkCollection(ChromaCollection[IngestedChunk]):
    """Chunk records, searched by cosine similarity of their text embeddings."""

    def _to_row(self, record: IngestedChunk) -> _ChromaRow:
        if record.vector is None:
            raise ValueError(f"Chunk {record.key} of {record.document_id!r} has no vector")
        return _ChromaRow(
            id=record.key,
            embedding=list(record.vector),
            document=record.text,
            metadata={
                "source_id": record.source_id,
                "document_id": record.document_id,
                "page_number": record.page_number,
                "index_on_page": record.index_on_page,
            },
        )

    def _from_row(
        self, key: str, document: str | None, metadata: dict[str, Any], vector: list[float] | None
    ) -> IngestedChunk:
        return IngestedChunk(
            key=key,
            source_id=metadata.get("source_id", ""),
            document_id=metadata.get("document_id", ""),
            page_number=int(metadata.get("page_number", 1)),
            index_on_page=int(metadata.get("index_on_page", 0)),
            text=document or "",
            vector=vector,
        )


def build_collections(
    client: Any | None = None,
) -> tuple[ChromaChunkCollection, ChromaDocumentCollection]:
    """Return the chunk and document collections named in the settings."""
    client = client or get_chroma_client()
    return (
        ChromaChunkCollection(client, settings.chunks_collection),
        ChromaDocumentCollection(client, settings.documents_collection),
    )
