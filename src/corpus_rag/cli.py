"""Command-line entry point.

    corpus-rag ingest [--root DIR] [--chunk-length N] [--chunk-overlap N]
                      [--category CAT] [--file NAME]
    corpus-rag serve  [--host HOST] [--port PORT]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from corpus_rag.config import settings
from corpus_rag.errors import CorpusRagError, NoMatchingDocuments

logger = logging.getLogger("corpus_rag")


def _ingest(args: argparse.Namespace) -> int:
    from corpus_rag.context import build_context

    context = build_context(settings)
    try:
        result = asyncio.run(
            context.ingestion.ingest_corpus(
                args.root,
                category=args.category,
                filename=args.file,
                chunk_length=args.chunk_length,
                chunk_overlap=args.chunk_overlap,
            )
        )
    except NoMatchingDocuments:
        print(f"No matching documents found under {args.root}", file=sys.stderr)
        return 1
    except CorpusRagError as exc:
        logger.error("Ingestion failed: %s", exc)
        return 1

    print(
        f"Ingested {result.documents} documents → {result.chunks} chunks "
        f"({result.stored} stored, {result.skipped} skipped)"
    )
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("corpus_rag.serving.app:app", host=args.host, port=args.port, reload=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="corpus-rag", description="Document RAG service")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="(Re)index every document under the corpus root")
    ingest.add_argument("--root", default=settings.rag_data_dir, help="Corpus root directory")
    ingest.add_argument("--chunk-length", type=int, default=settings.chunk_length)
    ingest.add_argument("--chunk-overlap", type=int, default=settings.chunk_overlap)
    ingest.add_argument("--category", default=None, help="Only this exact category")
    ingest.add_argument("--file", default=None, help="Only files with this name")
    ingest.set_defaults(func=_ingest)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=3000)
    serve.set_defaults(func=_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "ingest" and not 0 <= args.chunk_overlap < args.chunk_length:
        print("--chunk-overlap must be >= 0 and < --chunk-length", file=sys.stderr)
        return 2
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
