"""Prompt template for context-bound answering.

The fallback sentence is part of the public contract: clients compare
answers against it verbatim to detect "not in my documents".
"""

from __future__ import annotations

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

NOT_AVAILABLE = "The answer is not available in the provided documents."

ANSWER_SYSTEM = f"""\
You are a retrieval-augmented assistant.
Answer ONLY using the provided context.
Do not use prior knowledge and do not guess.
If the answer is not present in the context, reply exactly:
"{NOT_AVAILABLE}"
"""


def build_answer_prompt(question: str, context: str) -> list[BaseMessage]:
    """Assemble the messages for one context-bound generation call.

    Parameters
    ----------
    question:
        The user question.
    context:
        Labelled context blocks from the retriever (or the
        "No relevant documents found." placeholder).

    Returns
    -------
    list[BaseMessage]
        A list of LangChain message objects ready for ``.ainvoke()``.
    """
    return [
        SystemMessage(content=ANSWER_SYSTEM),
        HumanMessage(content=f"Question:\n{question}\n\nContext:\n{context}"),
    ]
