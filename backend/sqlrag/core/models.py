from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    temperature: float


class CompletionMessage(BaseModel):
    content: str | None = None


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionResponse(BaseModel):
    choices: list[CompletionChoice] = Field(default_factory=list)


class GeneratedQuery(BaseModel):
    """Shape the model is asked to answer with: ``{"query": "<SQL>"}``."""
    query: str


class QueryResponse(BaseModel):
    answer: str
    sql: str
    columns: list[str] = Field(default_factory=list)
    result_text: str = ""


class ErrorDetail(BaseModel):
    error_code: str
    message: str
    details: dict[str, str] | None = None
