"""
Ingestion — document loading, chunking, embedding and indexing.

This module converts raw files (plain text, Markdown, PDF, Word) found
under a category directory tree into embedded chunks stored in the
vector index under deterministic IDs.
"""

from corpus_rag.ingestion.chunker import chunk_documents, chunk_text
from corpus_rag.ingestion.identity import chunk_id
from corpus_rag.ingestion.models import Chunk, Document, EmbeddedChunk
from corpus_rag.ingestion.pipeline import IngestionPipeline, IngestionResult

__all__ = [
    "Chunk",
    "Document",
    "EmbeddedChunk",
    "IngestionPipeline",
    "IngestionResult",
    "chunk_documents",
    "chunk_id",
    "chunk_text",
]
