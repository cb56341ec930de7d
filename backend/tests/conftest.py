"""Shared fakes for the database capability and the model endpoint."""

from __future__ import annotations

from contextlib import contextmanager
import json
import os
import sys
from typing import Any, Sequence

import httpx
import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlrag.core.config import get_settings
from sqlrag.core.exceptions import QueryExecutionError
from sqlrag.llm.client import ModelClient
from sqlrag.schema.descriptor import SCHEMA_QUERY


def completion(content: str) -> dict[str, Any]:
    """Build a chat completions envelope holding one candidate."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


class FakeDatabase:
    """In-memory ``Database``: answers the schema query and canned statements."""

    def __init__(
        self,
        schema_rows: Sequence[tuple[str, str]] = (),
        results: dict[str, tuple[list[str], list[Sequence[Any]]]] | None = None,
    ) -> None:
        self.schema_rows = list(schema_rows)
        self.results = results or {}
        self.executed: list[str] = []
        self.deadlines: list[Any] = []
        self.closed = False

    def query(self, sql: str, deadline=None) -> tuple[list[str], list[Sequence[Any]]]:
        self.executed.append(sql)
        self.deadlines.append(deadline)
        if sql == SCHEMA_QUERY:
            return ["table_name", "column_name"], list(self.schema_rows)
        if sql not in self.results:
            raise QueryExecutionError(f"Invalid SQL query: {sql}")
        return self.results[sql]

    def close(self) -> None:
        self.closed = True


class FakeModel:
    """Queue of completion contents served through ``httpx.MockTransport``."""

    def __init__(self, *contents: str) -> None:
        self.contents = list(contents)
        self.requests: list[dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if not self.contents:
            return httpx.Response(500, json={"error": "no more canned responses"})
        return httpx.Response(200, json=completion(self.contents.pop(0)))

    def prompts(self) -> list[str]:
        return [req["messages"][0]["content"] for req in self.requests]

    def client(self, **kwargs: Any) -> ModelClient:
        http_client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return ModelClient(api_key="test-key", http_client=http_client, **kwargs)


def db_factory(database: FakeDatabase):
    @contextmanager
    def factory(connection, deadline=None):
        try:
            yield database
        finally:
            database.close()

    return factory


@pytest.fixture
def settings(tmp_path):
    """Settings whose metadata path points at a file that does not exist yet."""
    return get_settings(extra_metadata_path=str(tmp_path / "metadata.json"))


@pytest.fixture
def users_db() -> FakeDatabase:
    return FakeDatabase(
        schema_rows=[("users", "id")],
        results={"SELECT COUNT(*) FROM users;": (["count"], [(42,)])},
    )
