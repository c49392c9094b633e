"""Chat-model factory for answer generation.

``ChatOpenAI`` talks to the OpenAI API by default.  Setting
``LLM_BASE_URL`` points it at any server that speaks the same chat
completions protocol instead.
"""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

from corpus_rag.config import Settings, settings

logger = logging.getLogger(__name__)


def get_llm(temperature: float = 0.0, config: Settings = settings) -> ChatOpenAI:
    """Build the answering model from *config*.

    Parameters
    ----------
    temperature:
        Sampling temperature; answers default to deterministic decoding.
    config:
        Source of the model name, API key and optional base URL.
    """
    kwargs: dict = {"model": config.llm_model_name, "temperature": temperature}

    if not config.llm_base_url:
        kwargs["api_key"] = config.openai_api_key
        return ChatOpenAI(**kwargs)

    logger.info("Answering with %s at %s", config.llm_model_name, config.llm_base_url)
    # Self-hosted endpoints often skip auth, but the client rejects an empty key.
    return ChatOpenAI(**kwargs, base_url=config.llm_base_url, api_key=config.openai_api_key or "EMPTY")
