"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for local vLLM)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="LLM model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible API. Leave empty to use OpenAI cloud, "
            "e.g. 'http://localhost:8001/v1' for a local vLLM server."
        ),
    )

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_path: str = Field(
        default="",
        description="Local persistence directory. When set, an embedded PersistentClient is used instead of HTTP.",
    )
    chroma_collection: str = "documents"
    upsert_batch_size: int = Field(default=5000, gt=0, description="Max records per Chroma upsert call")

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embed_batch_size: int = Field(default=16, gt=0)

    # Corpus & chunking
    rag_data_dir: str = Field(default="data", description="Root of the category-organised document tree")
    chunk_length: int = Field(default=500, gt=0)
    chunk_overlap: int = Field(default=50, ge=0)

    # Retrieval
    retrieval_k: int = Field(default=5, gt=0)

    # Serving
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_chunking(self) -> Settings:
        if self.chunk_overlap >= self.chunk_length:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_length ({self.chunk_length})"
            )
        return self

    @property
    def embedding_model_tag(self) -> str:
        """Short model name stored alongside every vector, e.g. ``all-MiniLM-L6-v2``."""
        return self.embedding_model.rstrip("/").rsplit("/", 1)[-1]


# Singleton: import `settings` wherever needed.
settings = Settings()
