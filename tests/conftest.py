"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from ragdoc.ingestion.models import IngestedChunk, IngestedDocument
from tests.fakes import InMemoryCollection, KeywordEmbeddings


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


@pytest.fixture()
def chunk_store() -> InMemoryCollection[IngestedChunk]:
    return InMemoryCollection("chunks")


@pytest.fixture()
def document_store() -> InMemoryCollection[IngestedDocument]:
    return InMemoryCollection("documents")


@pytest.fixture()
def embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()
