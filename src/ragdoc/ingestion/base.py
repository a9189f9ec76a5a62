"""Capability interface every ingestion source implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ragdoc.ingestion.models import IngestedChunk, IngestedDocument


class SourceReadError(Exception):
    """A single source item could not be read.

    Recoverable: the ingestor logs it, skips the item and keeps the
    item's previously ingested records.
    """

    def __init__(self, document_id: str, reason: str) -> None:
        super().__init__(f"Could not read {document_id!r}: {reason}")
        self.document_id = document_id
        self.reason = reason


class IngestionSource(ABC):
    """Pluggable provider of documents for :class:`~ragdoc.ingestion.ingestor.DataIngestor`.

    Every method receives the caller's snapshot of the documents already
    stored for this source (``existing``) and must not mutate it.
    """

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Stable identifier scoping this source's records."""
        ...

    @abstractmethod
    async def list_new_or_modified(
        self, existing: Sequence[IngestedDocument]
    ) -> list[IngestedDocument]:
        """Return fresh document records for items that are new or whose
        version marker differs from the stored one."""
        ...

    @abstractmethod
    async def list_deleted(
        self, existing: Sequence[IngestedDocument]
    ) -> list[IngestedDocument]:
        """Return the stored documents whose item no longer exists."""
        ...

    @abstractmethod
    async def create_chunks(self, document: IngestedDocument) -> list[IngestedChunk]:
        """Extract freshly keyed chunks for *document*.

        Raises
        ------
        SourceReadError
            When the underlying item is unreadable.
        """
        ...
