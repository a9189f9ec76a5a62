"""Unit tests for the Chroma-backed collections.

Where-clause tests are pure; collection tests run against an in-process
``chromadb.EphemeralClient`` and are skipped when chromadb cannot import.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from ragdoc.ingestion.models import IngestedChunk, IngestedDocument
from ragdoc.retrieval.models import MetadataFilter


@pytest.fixture(autouse=True)
def _skip_if_chroma_broken() -> None:
    """Skip if chromadb can't be imported (pydantic v1/v2 conflict)."""
    try:
        from ragdoc.retrieval.chroma_store import _build_chroma_where  # noqa: F401
    except Exception:
        pytest.skip("chromadb not importable in this environment")


# ── Where-clause builder ───────────────────────────────────────────────


class TestBuildChromaWhere:
    def test_single_filter(self) -> None:
        from ragdoc.retrieval.chroma_store import _build_chroma_where

        where = _build_chroma_where([MetadataFilter.equals("document_id", "a.pdf")])
        assert where == {"document_id": {"$eq": "a.pdf"}}

    def test_multiple_filters_produce_and(self) -> None:
        from ragdoc.retrieval.chroma_store import _build_chroma_where

        filters = [
            MetadataFilter.equals("source_id", "src"),
            MetadataFilter(field="page_number", operator="gte", value=5),
        ]
        where = _build_chroma_where(filters)
        assert where == {"$and": [{"source_id": {"$eq": "src"}}, {"page_number": {"$gte": 5}}]}

    def test_none_when_empty(self) -> None:
        from ragdoc.retrieval.chroma_store import _build_chroma_where

        assert _build_chroma_where([]) is None
        assert _build_chroma_where(None) is None

    def test_unsupported_operator_raises(self) -> None:
        from ragdoc.retrieval.chroma_store import _build_chroma_where

        with pytest.raises(ValueError, match="Unsupported filter operator"):
            _build_chroma_where([MetadataFilter(field="x", operator="regex", value=".*")])


# ── Collections against an in-process client ───────────────────────────


@pytest.fixture()
def client():
    import chromadb
    from chromadb.config import Settings as ChromaSettings

    return chromadb.EphemeralClient(settings=ChromaSettings(anonymized_telemetry=False))


def _chunk(document_id: str, text: str, vector: list[float], page: int = 1) -> IngestedChunk:
    return IngestedChunk(
        source_id="src",
        document_id=document_id,
        page_number=page,
        index_on_page=0,
        text=text,
        vector=vector,
    )


class TestChromaChunkCollection:
    @pytest.mark.asyncio
    async def test_upsert_get_search_delete(self, client) -> None:
        from ragdoc.retrieval.chroma_store import ChromaChunkCollection

        collection = ChromaChunkCollection(client, f"chunks-{uuid4().hex}")
        await collection.ensure_exists()
        near = _chunk("a.pdf", "pump pressure", [1.0, 0.0, 0.0], page=2)
        far = _chunk("a.pdf", "battery", [0.0, 1.0, 0.0])
        other = _chunk("b.pdf", "pump", [0.9, 0.1, 0.0])
        await collection.upsert([near, far, other])

        stored = await collection.get_where([MetadataFilter.equals("document_id", "a.pdf")])
        assert {c.key for c in stored} == {near.key, far.key}
        round_tripped = next(c for c in stored if c.key == near.key)
        assert (round_tripped.page_number, round_tripped.text, round_tripped.source_id) == (2, "pump pressure", "src")

        assert round_tripped.vector == pytest.approx([1.0, 0.0, 0.0])

        hits = await collection.search([1.0, 0.0, 0.0], k=2)
        assert [h.key for h in hits] == [near.key, other.key]
        assert hits[1].vector == pytest.approx([0.9, 0.1, 0.0])

        filtered = await collection.search(
            [1.0, 0.0, 0.0], k=5, filters=[MetadataFilter.equals("document_id", "b.pdf")]
        )
        assert [h.key for h in filtered] == [other.key]

        await collection.delete([near.key, far.key])
        remaining = await collection.get_where([MetadataFilter.equals("source_id", "src")])
        assert [c.key for c in remaining] == [other.key]

    @pytest.mark.asyncio
    async def test_unembedded_chunk_rejected(self, client) -> None:
        from ragdoc.retrieval.chroma_store import ChromaChunkCollection

        collection = ChromaChunkCollection(client, f"chunks-{uuid4().hex}")
        chunk = IngestedChunk(document_id="a.pdf", page_number=1, text="no vector")
        with pytest.raises(ValueError, match="has no vector"):
            await collection.upsert([chunk])


class TestChromaDocumentCollection:
    @pytest.mark.asyncio
    async def test_documents_scoped_by_source(self, client) -> None:
        from ragdoc.retrieval.chroma_store import ChromaDocumentCollection

        collection = ChromaDocumentCollection(client, f"documents-{uuid4().hex}")
        await collection.ensure_exists()
        await collection.ensure_exists()
        mine = IngestedDocument(source_id="mine", document_id="a.pdf", document_version="v1")
        theirs = IngestedDocument(source_id="theirs", document_id="a.pdf", document_version="v9")
        await collection.upsert([mine, theirs])

        (found,) = await collection.get_where([MetadataFilter.equals("source_id", "mine")])

        assert found.key == mine.key
        assert found.document_version == "v1"


def test_persistent_client_and_named_collections(tmp_path) -> None:
    from ragdoc.config import settings
    from ragdoc.retrieval.chroma_store import build_collections, get_chroma_client

    client = get_chroma_client(persist_directory=str(tmp_path / "chroma"))
    chunks, documents = build_collections(client)

    assert chunks.collection_name == settings.chunks_collection
    assert documents.collection_name == settings.documents_collection
