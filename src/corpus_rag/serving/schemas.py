"""Request / response schemas for the HTTP API.

Wire names are camelCase (``chunkIndex``, ``chunkLength`` …); Python
attributes are snake_case and both spellings are accepted on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PromptRequest(_CamelModel):
    """Incoming question, optionally restricted to one category."""

    question: str | None = None
    category: str | None = None


class Source(_CamelModel):
    """Provenance of one chunk used as context."""

    filename: str | None = None
    category: str | None = None
    chunk_index: int | None = Field(default=None, alias="chunkIndex")


class PromptResponse(_CamelModel):
    """Answer plus the chunks it was grounded on, nearest first."""

    answer: str
    sources: list[Source] = []


class RechunkRequest(_CamelModel):
    """Parameters for rebuilding (part of) the index from the corpus root."""

    chunk_length: int | None = Field(default=None, alias="chunkLength", gt=0)
    chunk_overlap: int | None = Field(default=None, alias="chunkOverlap", ge=0)
    specific_file: str | None = Field(default=None, alias="specificFile")
    specific_category: str | None = Field(default=None, alias="specificCategory")


class RechunkResponse(_CamelModel):
    message: str
    documents: int
    chunks: int
    chunk_length: int = Field(alias="chunkLength")
    chunk_overlap: int = Field(alias="chunkOverlap")


class MessageResponse(BaseModel):
    message: str
