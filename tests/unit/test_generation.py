"""Unit tests for prompt construction, answer generation and LLM wiring."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from corpus_rag.config import Settings
from corpus_rag.generation.answer import AnswerGenerator, normalize_answer
from corpus_rag.generation.llm import get_llm
from corpus_rag.generation.prompts import NOT_AVAILABLE, build_answer_prompt
from corpus_rag.retrieval.retriever import NO_CONTEXT

CONTEXT = "Source: a.txt\nCategory: finance\nChunk: 1\n\nFees dropped.\n" + "-" * 48 + "\n"


class TestPrompt:
    def test_returns_system_then_human(self) -> None:
        messages = build_answer_prompt("What happened to fees?", CONTEXT)
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)

    def test_system_message_demands_exact_fallback(self) -> None:
        system = build_answer_prompt("q", CONTEXT)[0].content
        assert f'"{NOT_AVAILABLE}"' in system
        assert "ONLY" in system

    def test_human_message_carries_question_and_context(self) -> None:
        human = build_answer_prompt("What happened to fees?", CONTEXT)[1].content
        assert human == f"Question:\nWhat happened to fees?\n\nContext:\n{CONTEXT}"

    def test_placeholder_context_passes_through(self) -> None:
        human = build_answer_prompt("q", NO_CONTEXT)[1].content
        assert human.endswith("Context:\nNo relevant documents found.")


class TestNormalizeAnswer:
    @pytest.mark.parametrize(
        "raw",
        [
            NOT_AVAILABLE,
            f'"{NOT_AVAILABLE}"',
            f"  '{NOT_AVAILABLE}'\n",
            f"“{NOT_AVAILABLE}”",
        ],
    )
    def test_fallback_variants_become_exact(self, raw: str) -> None:
        assert normalize_answer(raw) == NOT_AVAILABLE

    def test_regular_answer_is_stripped_only(self) -> None:
        assert normalize_answer('  Fees "dropped".  ') == 'Fees "dropped".'


class TestAnswerGenerator:
    @pytest.mark.asyncio
    async def test_returns_model_answer(self) -> None:
        generator = AnswerGenerator(FakeListChatModel(responses=["Fees dropped by 10%."]))
        assert await generator.answer("What happened to fees?", CONTEXT) == "Fees dropped by 10%."

    @pytest.mark.asyncio
    async def test_passes_prompt_to_model(self) -> None:
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=AIMessage(content="Fees dropped."))

        await AnswerGenerator(llm).answer("What happened to fees?", CONTEXT)

        (messages,), _ = llm.ainvoke.call_args
        assert messages == build_answer_prompt("What happened to fees?", CONTEXT)

    @pytest.mark.asyncio
    async def test_model_error_returns_fallback(self) -> None:
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("rate limited"))
        assert await AnswerGenerator(llm).answer("q", CONTEXT) == NOT_AVAILABLE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   \n", []])
    async def test_empty_reply_returns_fallback(self, content) -> None:
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=AIMessage(content=content))
        assert await AnswerGenerator(llm).answer("q", CONTEXT) == NOT_AVAILABLE

    @pytest.mark.asyncio
    async def test_content_parts_are_joined(self) -> None:
        llm = MagicMock()
        llm.ainvoke = AsyncMock(
            return_value=AIMessage(content=[{"type": "text", "text": "Fees "}, {"type": "text", "text": "dropped."}])
        )
        assert await AnswerGenerator(llm).answer("q", CONTEXT) == "Fees dropped."

    @pytest.mark.asyncio
    async def test_quoted_fallback_is_normalised(self) -> None:
        generator = AnswerGenerator(FakeListChatModel(responses=[f'"{NOT_AVAILABLE}"']))
        assert await generator.answer("Who won the match?", NO_CONTEXT) == NOT_AVAILABLE


class TestGetLlm:
    def test_cloud_mode(self) -> None:
        config = Settings(_env_file=None, openai_api_key="sk-test", llm_model_name="gpt-4o-mini", llm_base_url="")
        with patch("corpus_rag.generation.llm.ChatOpenAI") as chat_cls:
            get_llm(config=config)
        chat_cls.assert_called_once_with(model="gpt-4o-mini", temperature=0.0, api_key="sk-test")

    def test_compatible_endpoint_gets_dummy_key(self) -> None:
        config = Settings(
            _env_file=None,
            openai_api_key="",
            llm_model_name="llama3",
            llm_base_url="http://localhost:8001/v1",
        )
        with patch("corpus_rag.generation.llm.ChatOpenAI") as chat_cls:
            get_llm(temperature=0.2, config=config)
        chat_cls.assert_called_once_with(
            model="llama3",
            temperature=0.2,
            base_url="http://localhost:8001/v1",
            api_key="EMPTY",
        )
