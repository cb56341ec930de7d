"""Unit tests for SQL generation and answer composition."""

from __future__ import annotations

import httpx
import pytest

from conftest import FakeModel
from sqlrag.core.exceptions import ExtractionParseError, NoCandidatesError
from sqlrag.llm.answer_composer import compose_answer
from sqlrag.llm.prompts import build_explanation_prompt, build_sql_prompt
from sqlrag.llm.sql_generator import extract_query, generate_sql

SCHEMA_TEXT = "Table: users\nColumns: id, name\n"


class TestExtractQuery:
    """Tests for extract_query."""

    def test_fenced_json(self):
        assert extract_query('```json\n{"query": "SELECT 1;"}\n```') == "SELECT 1;"

    def test_plain_json(self):
        assert extract_query('{"query": "SELECT 1;"}') == "SELECT 1;"

    def test_malformed_json_carries_candidate(self):
        content = '```json\n{"query": "SELECT 1;"\n```'
        with pytest.raises(ExtractionParseError) as exc_info:
            extract_query(content)
        assert exc_info.value.candidate == content
        assert content in str(exc_info.value)

    def test_prose_without_json(self):
        with pytest.raises(ExtractionParseError) as exc_info:
            extract_query("Sorry, I cannot help with that.")
        assert exc_info.value.candidate == "Sorry, I cannot help with that."

    def test_nested_fragment_in_query_is_extracted(self):
        content = '{"query": "```json {\\"inner\\": 1} ```"}'
        assert extract_query(content) == '{"inner": 1}'

    def test_query_without_braces_is_untouched(self):
        content = 'Result:\n{"query": "SELECT name FROM users WHERE id = 1;"}'
        assert extract_query(content) == "SELECT name FROM users WHERE id = 1;"

    def test_empty_query_is_rejected(self):
        with pytest.raises(ExtractionParseError):
            extract_query('{"query": ""}')


class TestGenerateSql:
    """Tests for generate_sql."""

    def test_returns_query_from_fenced_response(self):
        model = FakeModel('```json\n{"query": "SELECT 1;"}\n```')
        assert generate_sql("one", SCHEMA_TEXT, {}, model.client()) == "SELECT 1;"

    def test_prompt_embeds_schema_metadata_and_question(self):
        model = FakeModel('{"query": "SELECT COUNT(*) FROM users;"}')
        generate_sql("how many users are there", SCHEMA_TEXT, {"users": "people"}, model.client())

        prompt = model.prompts()[0]
        assert SCHEMA_TEXT in prompt
        assert "{'users': 'people'}" in prompt
        assert "User's request: how many users are there" in prompt
        assert '{ "query": "<SQL query here>" }' in prompt

    def test_model_errors_propagate(self):
        model = FakeModel()

        def empty_choices(request):
            return httpx.Response(200, json={"choices": []})

        model.handler = empty_choices
        with pytest.raises(NoCandidatesError):
            generate_sql("one", SCHEMA_TEXT, {}, model.client())


class TestPrompts:
    """Tests for prompt builders."""

    def test_sql_prompt_with_empty_metadata(self):
        prompt = build_sql_prompt(SCHEMA_TEXT, {}, "count users")
        assert "\n{}\n" in prompt

    def test_explanation_prompt_embeds_results_verbatim(self):
        prompt = build_explanation_prompt(SCHEMA_TEXT, {}, "count users", "SELECT 1;", "count: 42")
        assert "count: 42" in prompt
        assert "SELECT 1;" in prompt
        assert "count users" in prompt


class TestComposeAnswer:
    """Tests for compose_answer."""

    def test_returns_content_verbatim_but_stripped(self):
        model = FakeModel("  There are 42 users.\n")
        answer = compose_answer("how many users", "SELECT 1;", "count: 42", SCHEMA_TEXT, {}, model.client())
        assert answer == "There are 42 users."
        assert "count: 42" in model.prompts()[0]

    def test_free_text_with_braces_is_not_extracted(self):
        model = FakeModel("The result {count: 42} means 42 users.")
        answer = compose_answer("q", "SELECT 1;", "count: 42", SCHEMA_TEXT, {}, model.client())
        assert answer == "The result {count: 42} means 42 users."
