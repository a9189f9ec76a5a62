"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_persist_directory: str = Field(
        default="",
        description=(
            "Local directory for an embedded Chroma database. Leave empty to "
            "talk to a Chroma server at chroma_host:chroma_port."
        ),
    )
    chunks_collection: str = "data-ragdoc-chunks"
    documents_collection: str = "data-ragdoc-documents"

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # PDF ingestion
    pdf_ingestion_enabled: bool = False
    pdf_directories: list[str] = Field(
        default_factory=list,
        description="Directories scanned for *.pdf files (JSON list in env).",
    )
    chunk_max_tokens: int = Field(default=200, description="Upper bound on estimated tokens per chunk")
    ingestion_interval_seconds: float = Field(
        default=0.0,
        description="Delay between ingestion passes; 0 runs a single pass.",
    )

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("chunk_max_tokens")
    @classmethod
    def _positive_chunk_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"chunk_max_tokens must be positive, got {value}")
        return value


# Module-level singleton; import `settings` wherever needed.
settings = Settings()
