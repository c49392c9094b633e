"""Process-wide application context.

The embedding model, the vector-index connection and the chat model are
expensive to build, so they are constructed once at startup and handed
to every pipeline component explicitly.  Tests build an ``AppContext``
from fakes with :meth:`AppContext.create`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from corpus_rag.config import Settings, settings
from corpus_rag.generation.answer import AnswerGenerator
from corpus_rag.ingestion.embedder import ChunkEmbedder
from corpus_rag.ingestion.pipeline import IngestionPipeline
from corpus_rag.retrieval.retriever import ContextRetriever

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings
    from langchain_core.language_models import BaseChatModel

    from corpus_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Shared clients plus the pipelines wired on top of them."""

    settings: Settings
    store: VectorStoreBase
    embedder: ChunkEmbedder
    ingestion: IngestionPipeline
    retriever: ContextRetriever
    generator: AnswerGenerator

    @classmethod
    def create(
        cls,
        config: Settings,
        *,
        store: VectorStoreBase,
        embeddings: Embeddings,
        llm: BaseChatModel,
    ) -> AppContext:
        """Wire the pipelines around already-constructed clients."""
        embedder = ChunkEmbedder(embeddings, batch_size=config.embed_batch_size)
        return cls(
            settings=config,
            store=store,
            embedder=embedder,
            ingestion=IngestionPipeline(
                embedder,
                store,
                chunk_length=config.chunk_length,
                chunk_overlap=config.chunk_overlap,
                model_tag=config.embedding_model_tag,
            ),
            retriever=ContextRetriever(embedder, store, default_k=config.retrieval_k),
            generator=AnswerGenerator(llm),
        )


def build_context(config: Settings = settings) -> AppContext:
    """Connect to Chroma, load the embedding model and the chat model."""
    from corpus_rag.generation.llm import get_llm
    from corpus_rag.ingestion.embedder import get_embedding_function
    from corpus_rag.retrieval.chroma_store import ChromaVectorStore, make_client

    logger.info(
        "Building application context (collection=%s, embedding_model=%s, llm=%s)",
        config.chroma_collection,
        config.embedding_model,
        config.llm_model_name,
    )
    store = ChromaVectorStore(
        config.chroma_collection,
        client=make_client(host=config.chroma_host, port=config.chroma_port, path=config.chroma_path),
        upsert_batch_size=config.upsert_batch_size,
    )
    return AppContext.create(
        config,
        store=store,
        embeddings=get_embedding_function(config.embedding_model),
        llm=get_llm(config=config),
    )
