"""Answer generation constrained to retrieved context."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from corpus_rag.generation.prompts import NOT_AVAILABLE, build_answer_prompt

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)


def _message_text(content: Any) -> str:
    """Flatten a chat message ``content`` (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


def normalize_answer(text: str) -> str:
    """Strip whitespace and map quoted variants of the fallback to the exact sentence."""
    answer = text.strip()
    if answer.strip("\"'`“” ") == NOT_AVAILABLE:
        return NOT_AVAILABLE
    return answer


class AnswerGenerator:
    """Asks the chat model to answer strictly from the supplied context.

    Never raises for model problems: an error or an empty reply yields
    :data:`~corpus_rag.generation.prompts.NOT_AVAILABLE`.
    """

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    async def answer(self, question: str, context: str) -> str:
        prompt = build_answer_prompt(question, context)
        try:
            response = await self._llm.ainvoke(prompt)
        except Exception:
            logger.exception("Answer generation failed; returning fallback")
            return NOT_AVAILABLE

        text = normalize_answer(_message_text(getattr(response, "content", None)))
        if not text:
            logger.warning("Model returned an empty answer; returning fallback")
            return NOT_AVAILABLE
        return text
