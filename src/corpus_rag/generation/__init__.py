"""
Generation — context-bound answers from a chat model.

Public API
----------
- :class:`AnswerGenerator` — answer a question from retrieved context.
- :func:`get_llm` — build the configured chat model.
- :data:`NOT_AVAILABLE` — the fixed fallback answer.
"""

from corpus_rag.generation.answer import AnswerGenerator
from corpus_rag.generation.llm import get_llm
from corpus_rag.generation.prompts import NOT_AVAILABLE, build_answer_prompt

__all__ = [
    "NOT_AVAILABLE",
    "AnswerGenerator",
    "build_answer_prompt",
    "get_llm",
]
