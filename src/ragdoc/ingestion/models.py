"""Records persisted by the ingestion core.

Both record types live in their own vector collection and are keyed by a
system-generated ``key``.  Chunks point at their document through
``document_id`` (the source-relative identity), never through the
document's ``key``, so re-ingesting a document replaces its key without
touching the chunk schema.
"""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, Field

# Placeholder vector stored with every document record; some vector
# databases refuse records without one.
DOCUMENT_PLACEHOLDER_VECTOR: list[float] = [0.0, 0.0]


def new_key() -> str:
    return uuid4().hex


class IngestedDocument(BaseModel):
    """Metadata for one source item, used only for change detection.

    Attributes
    ----------
    key:
        Unique record identifier, regenerated on every re-ingestion.
    source_id:
        Identifier of the :class:`~ragdoc.ingestion.base.IngestionSource`
        that produced the record.
    document_id:
        Source-relative identity (e.g. the PDF file name).
    document_version:
        Opaque version marker, compared for equality only.
    """

    key: str = Field(default_factory=new_key)
    source_id: str
    document_id: str
    document_version: str
    vector: list[float] = Field(default_factory=lambda: list(DOCUMENT_PLACEHOLDER_VECTOR))


class IngestedChunk(BaseModel):
    """A searchable span of text extracted from a document.

    Attributes
    ----------
    key:
        Unique record identifier.
    source_id:
        Source of the owning document; scopes chunk deletion.
    document_id:
        ``document_id`` of the owning :class:`IngestedDocument`.
    page_number:
        1-based page the text came from.
    index_on_page:
        0-based position of the chunk among the chunks of its page.
    text:
        Non-empty chunk content.
    vector:
        Embedding of ``text``; ``None`` until the ingestor embeds it.
    """

    key: str = Field(default_factory=new_key)
    source_id: str = ""
    document_id: str
    page_number: int = Field(ge=1)
    index_on_page: int = Field(default=0, ge=0)
    text: str = Field(min_length=1)
    vector: list[float] | None = None


class IngestionSummary(BaseModel):
    """Outcome of one ingestion pass over a single source."""

    source_id: str
    deleted: list[str] = Field(default_factory=list)
    ingested: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    chunks_written: int = 0
    completed: bool = False
    cancelled: bool = False
    error: str | None = None

    @property
    def changed(self) -> bool:
        """``True`` when the pass deleted or (re-)ingested anything."""
        return bool(self.deleted or self.ingested)
