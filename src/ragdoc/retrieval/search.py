"""Semantic search over ingested chunks.

Usage::

    from ragdoc.retrieval.search import SemanticSearch

    search = SemanticSearch(chunks, embeddings)
    hits = await search.search("What is the warranty period?", max_results=5)
    for chunk in hits:
        print(chunk.document_id, chunk.page_number, chunk.text[:80])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ragdoc.ingestion.models import IngestedChunk
from ragdoc.retrieval.base import VectorCollection
from ragdoc.retrieval.models import MetadataFilter

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class SemanticSearch:
    """Nearest-neighbour search over a chunk collection.

    Read-only: safe to use concurrently with other searches and with
    ingestion passes.  Ranking is entirely the vector store's.

    Parameters
    ----------
    chunks:
        The collection populated by :class:`~ragdoc.ingestion.ingestor.DataIngestor`.
    embeddings:
        Must be the same embedding model used at ingestion time.
    default_max_results:
        Used when :meth:`search` is called without ``max_results``.
    """

    def __init__(
        self,
        chunks: VectorCollection[IngestedChunk],
        embeddings: Embeddings,
        *,
        default_max_results: int = 5,
    ) -> None:
        self._chunks = chunks
        self._embeddings = embeddings
        self.default_max_results = default_max_results

    async def search(
        self,
        text: str,
        document_id_filter: str | None = None,
        max_results: int | None = None,
    ) -> list[IngestedChunk]:
        """Return the chunks most similar to *text*, most similar first.

        Parameters
        ----------
        text:
            Free-text query.
        document_id_filter:
            When non-empty, only chunks of this ``document_id`` are returned.
        max_results:
            Upper bound on the number of chunks.

        Returns
        -------
        list[IngestedChunk]
            Possibly empty; never raises for "no match".
        """
        k = self.default_max_results if max_results is None else max_results
        if k <= 0:
            return []
        vector = await self._embeddings.aembed_query(text)
        filters = [MetadataFilter.equals("document_id", document_id_filter)] if document_id_filter else None
        hits = await self._chunks.search(list(vector), k=k, filters=filters)
        logger.debug("Search returned %d chunks (filter=%r, k=%d)", len(hits), document_id_filter, k)
        return hits[:k]
