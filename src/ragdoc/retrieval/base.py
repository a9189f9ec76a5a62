"""Abstract base class for vector-collection backends.

Adding a new backend (Qdrant, pgvector, Pinecone …) only requires
subclassing :class:`VectorCollection` and implementing the five abstract
coroutines.  The ingestion and search layers are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel

from ragdoc.retrieval.models import MetadataFilter

R = TypeVar("R", bound=BaseModel)


class VectorCollection(ABC, Generic[R]):
    """Keyed collection of records that each carry an embedding vector.

    Records are pydantic models with a string ``key`` field.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    @abstractmethod
    async def ensure_exists(self) -> None:
        """Create the collection if it is missing.  Idempotent."""
        ...

    @abstractmethod
    async def upsert(self, records: Sequence[R]) -> None:
        """Insert or replace *records* by key."""
        ...

    @abstractmethod
    async def delete(self, keys: Sequence[str]) -> None:
        """Delete the records with the given keys; unknown keys are ignored."""
        ...

    @abstractmethod
    async def get_where(
        self,
        filters: list[MetadataFilter],
        *,
        limit: int | None = None,
    ) -> list[R]:
        """Return records matching all *filters* (unordered, at most *limit*)."""
        ...

    @abstractmethod
    async def search(
        self,
        vector: list[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[R]:
        """Return up to *k* records nearest to *vector*, most similar first.

        Parameters
        ----------
        vector:
            Dense query vector, same dimension as the stored vectors.
        k:
            Maximum number of results.
        filters:
            Optional metadata filters applied before ranking.
        """
        ...
