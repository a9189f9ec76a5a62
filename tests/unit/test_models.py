"""Unit tests for records, filters and settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ragdoc.config import Settings
from ragdoc.ingestion.models import (
    DOCUMENT_PLACEHOLDER_VECTOR,
    IngestedChunk,
    IngestedDocument,
    IngestionSummary,
)
from ragdoc.retrieval.models import MetadataFilter


class TestIngestedDocument:
    def test_keys_are_unique(self) -> None:
        a = IngestedDocument(source_id="s", document_id="a.pdf", document_version="v1")
        b = IngestedDocument(source_id="s", document_id="a.pdf", document_version="v1")
        assert a.key != b.key

    def test_placeholder_vector_not_shared(self) -> None:
        doc = IngestedDocument(source_id="s", document_id="a.pdf", document_version="v1")
        doc.vector.append(1.0)
        assert DOCUMENT_PLACEHOLDER_VECTOR == [0.0, 0.0]


class TestIngestedChunk:
    def test_empty_text_rejected(self) -> None:
        with pytest.raises(ValidationError):
            IngestedChunk(document_id="a.pdf", page_number=1, text="")

    def test_page_numbers_are_one_based(self) -> None:
        with pytest.raises(ValidationError):
            IngestedChunk(document_id="a.pdf", page_number=0, text="x")


class TestIngestionSummary:
    def test_changed_reflects_writes(self) -> None:
        assert not IngestionSummary(source_id="s", skipped=["a.pdf"]).changed
        assert IngestionSummary(source_id="s", deleted=["a.pdf"]).changed
        assert IngestionSummary(source_id="s", ingested=["a.pdf"]).changed


class TestMetadataFilter:
    def test_equals_factory(self) -> None:
        f = MetadataFilter.equals("document_id", "a.pdf")
        assert (f.field, f.operator, f.value) == ("document_id", "eq", "a.pdf")

    def test_one_of_factory(self) -> None:
        f = MetadataFilter.one_of("document_id", ["a.pdf", "b.pdf"])
        assert f.operator == "in"

    def test_matches_models_and_dicts(self) -> None:
        chunk = IngestedChunk(document_id="a.pdf", page_number=3, text="x")
        assert MetadataFilter.equals("document_id", "a.pdf").matches(chunk)
        assert not MetadataFilter.not_equals("document_id", "a.pdf").matches(chunk)
        assert MetadataFilter(field="page_number", operator="gte", value=3).matches(chunk)
        assert MetadataFilter.one_of("document_id", ["b.pdf"]).matches({"document_id": "b.pdf"})

    def test_unsupported_operator_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported filter operator"):
            MetadataFilter(field="page_number", operator="regex", value=".*").matches({"page_number": 1})


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)
        assert s.pdf_ingestion_enabled is False
        assert s.pdf_directories == []
        assert s.chunk_max_tokens == 200

    def test_directories_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PDF_INGESTION_ENABLED", "true")
        monkeypatch.setenv("PDF_DIRECTORIES", '["/data/a", "/data/b"]')
        s = Settings(_env_file=None)
        assert s.pdf_ingestion_enabled is True
        assert s.pdf_directories == ["/data/a", "/data/b"]

    def test_chunk_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, chunk_max_tokens=0)
