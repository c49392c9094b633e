"""FastAPI application exposing upload, question answering and re-indexing.

Error bodies always carry a stable ``error`` key (plus ``details`` for
internal failures); tracebacks are logged, never returned.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from corpus_rag.config import Settings, settings
from corpus_rag.context import AppContext, build_context
from corpus_rag.errors import EmbeddingFailure, NoChunksCreated, NoMatchingDocuments
from corpus_rag.ingestion.loader import extract_text, normalize_category, store_upload
from corpus_rag.ingestion.models import Document
from corpus_rag.retrieval.models import MetadataFilter
from corpus_rag.serving.schemas import (
    MessageResponse,
    PromptRequest,
    PromptResponse,
    RechunkRequest,
    RechunkResponse,
    Source,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def get_context(request: Request) -> AppContext:
    """Dependency returning the process-wide :class:`AppContext`."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context is not initialised")
    return context


# ── Routes ────────────────────────────────────────────────────────────
@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(ctx: AppContext = Depends(get_context)) -> JSONResponse:
    """Readiness probe — checks the vector index connection."""
    if await asyncio.to_thread(ctx.store.health_check):
        return JSONResponse({"status": "ready"})
    return JSONResponse(status_code=503, content={"status": "unavailable"})


@router.post("/upload", response_model=MessageResponse)
async def upload(
    category: str | None = Form(default=None),
    file: UploadFile | None = File(default=None),
    ctx: AppContext = Depends(get_context),
) -> Any:
    """Store one file under its category, then chunk, embed and index it."""
    if not category or not category.strip() or file is None or not file.filename:
        return _error(400, "category and file are required")

    try:
        category = normalize_category(category)
        path = await store_upload(ctx.settings.rag_data_dir, category, file.filename, await file.read())
    except ValueError as exc:
        return _error(400, str(exc))
    except Exception as exc:
        logger.exception("Storing upload failed")
        return _error(500, "Upload failed", details=str(exc))

    text = await asyncio.to_thread(extract_text, path)
    if not text.strip():
        return _error(400, "Uploaded file has no extractable text.")

    document = Document(filename=path.name, category=category, content=text)
    try:
        # Configured length and overlap, the same parameters as a default /rechunk.
        result = await ctx.ingestion.ingest_document(document)
    except NoChunksCreated:
        return _error(400, "No chunks could be created from this file.")
    except EmbeddingFailure:
        logger.error("No chunk of %s/%s could be embedded", category, path.name)
        return _error(500, "Failed to generate embeddings for file.")
    except Exception as exc:
        logger.exception("Upload failed for %s/%s", category, path.name)
        return _error(500, "Upload failed", details=str(exc))

    logger.info(
        "Ingested upload %s/%s: %d stored, %d skipped",
        category,
        path.name,
        result.stored,
        result.skipped,
    )
    return MessageResponse(message="File uploaded and processed.")


@router.post("/prompt", response_model=PromptResponse)
async def prompt(
    request: PromptRequest | None = None,
    ctx: AppContext = Depends(get_context),
) -> Any:
    """Answer a question from the indexed documents."""
    question = (request.question or "").strip() if request else ""
    if not question:
        return _error(400, "question is required")

    filters = None
    if request.category:
        filters = [MetadataFilter.equals("category", request.category)]

    try:
        retrieved = await ctx.retriever.retrieve(question, filters=filters)
    except EmbeddingFailure as exc:
        logger.error("Could not embed question %.80r", question)
        return _error(500, "Failed to embed question", details=str(exc))
    except Exception as exc:
        logger.exception("Prompt failed")
        return _error(500, "Prompt failed", details=str(exc))

    answer = await ctx.generator.answer(question, retrieved.text)
    return PromptResponse(
        answer=answer,
        sources=[
            Source(filename=c.filename, category=c.category, chunk_index=c.chunk_index)
            for c in retrieved.chunks
        ],
    )


@router.post("/rechunk", response_model=RechunkResponse)
async def rechunk(
    request: RechunkRequest | None = None,
    ctx: AppContext = Depends(get_context),
) -> Any:
    """Reload documents from the corpus root and re-ingest them."""
    request = request or RechunkRequest()
    chunk_length = request.chunk_length or ctx.settings.chunk_length
    chunk_overlap = (
        request.chunk_overlap if request.chunk_overlap is not None else ctx.settings.chunk_overlap
    )
    if chunk_overlap >= chunk_length:
        return _error(400, "chunkOverlap must be smaller than chunkLength")

    try:
        result = await ctx.ingestion.ingest_corpus(
            ctx.settings.rag_data_dir,
            category=request.specific_category or None,
            filename=request.specific_file or None,
            chunk_length=chunk_length,
            chunk_overlap=chunk_overlap,
        )
    except NoMatchingDocuments:
        return JSONResponse(status_code=404, content={"message": "No matching documents found"})
    except Exception as exc:
        logger.exception("Rechunk failed")
        return _error(500, "Rechunk failed", details=str(exc))

    return RechunkResponse(
        message="Rechunk completed",
        documents=result.documents,
        chunks=result.chunks,
        chunk_length=chunk_length,
        chunk_overlap=chunk_overlap,
    )


# ── Application factory ───────────────────────────────────────────────
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return _error(400, "Invalid request", details=details)


def create_app(context: AppContext | None = None, config: Settings = settings) -> FastAPI:
    """Build the API.

    Parameters
    ----------
    context:
        Pre-built context (tests).  When omitted, one is built from
        *config* during application startup and reused by every request.
    config:
        Settings used when *context* is omitted.
    """
    if context is not None:
        config = context.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: ANN202
        if getattr(app.state, "context", None) is None:
            app.state.context = await asyncio.to_thread(build_context, config)
        yield

    app = FastAPI(
        title="Corpus RAG API",
        version="0.1.0",
        description="Upload documents, ask questions answered only from them.",
        lifespan=lifespan,
    )
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)
    return app


app = create_app()
