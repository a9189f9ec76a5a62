"""Embedding collaborator used for chunks and queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ragdoc.config import settings

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings


def get_embedding_function(model_name: str | None = None) -> Embeddings:
    """Return the configured sentence-transformer embedding function.

    Imported lazily so that tests and the search path can run with a fake
    :class:`~langchain_core.embeddings.Embeddings` without loading torch.
    """
    from langchain_huggingface import HuggingFaceEmbeddings

    return HuggingFaceEmbeddings(model_name=model_name or settings.embedding_model)
