"""
Retrieval — vector collections and semantic search.

This module wraps the vector store behind a clean interface so that the
ingestion and search layers never need to know which DB is backing them.

Public surface
--------------
- :class:`SemanticSearch` — query text in, nearest chunks out.
- :class:`VectorCollection` — abstract backend (subclass for Qdrant, etc.).
- :class:`ChromaChunkCollection`, :class:`ChromaDocumentCollection` — default Chroma backends.
- :class:`MetadataFilter` — declarative record filter.
"""

from ragdoc.retrieval.base import VectorCollection
from ragdoc.retrieval.models import MetadataFilter
from ragdoc.retrieval.search import SemanticSearch

__all__ = [
    "ChromaChunkCollection",
    "ChromaDocumentCollection",
    "MetadataFilter",
    "SemanticSearch",
    "VectorCollection",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import the Chroma backends to avoid pulling in chromadb at import time."""
    if name in ("ChromaChunkCollection", "ChromaDocumentCollection"):
        from ragdoc.retrieval import chroma_store

        return getattr(chroma_store, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
