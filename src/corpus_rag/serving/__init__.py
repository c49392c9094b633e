"""
Serving — FastAPI application exposing the RAG service over HTTP.

Run with ``corpus-rag serve`` or ``uvicorn corpus_rag.serving.app:app``.
"""
