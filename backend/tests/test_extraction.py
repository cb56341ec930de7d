"""Unit tests for JSON extraction and strict query decoding."""

from __future__ import annotations

import pytest

from sqlrag.llm.extraction import QueryDecodeResult, decode_query, find_json


class TestFindJson:
    """Tests for find_json."""

    def test_strips_markdown_fence(self):
        text = '```json\n{"query": "SELECT 1;"}\n```'
        assert find_json(text) == '{"query": "SELECT 1;"}'

    def test_strips_surrounding_prose(self):
        text = 'Here is your query: {"query": "SELECT * FROM users"} Hope this helps!'
        assert find_json(text) == '{"query": "SELECT * FROM users"}'

    def test_spans_first_open_to_last_close(self):
        """No depth balancing: the cut runs to the very last closing brace."""
        text = 'x {"a": {"b": 1}} and {"c": 2} y'
        assert find_json(text) == '{"a": {"b": 1}} and {"c": 2}'

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "SELECT 1",
            "only an opening { brace",
            "only a closing } brace",
            "wrong } order {",
        ],
    )
    def test_returns_input_when_no_usable_braces(self, text):
        assert find_json(text) == text

    def test_brace_at_index_zero_is_not_extracted(self):
        """Text starting with '{' is returned unchanged, trailing prose included."""
        text = '{"query": "SELECT 1;"} trailing words'
        assert find_json(text) == text

    def test_idempotent_on_extracted_object(self):
        text = 'prefix {"query": "SELECT 1;"} suffix'
        once = find_json(text)
        assert find_json(once) == once

    def test_index_zero_input_keeps_suffix_on_every_pass(self):
        """Idempotence holds but extraction never happens for index-0 input."""
        text = '{"query": "SELECT 1;"}\n```'
        assert find_json(find_json(text)) == text


class TestDecodeQuery:
    """Tests for decode_query."""

    def test_valid_object(self):
        result = decode_query('{"query": "SELECT 1;"}')
        assert result == QueryDecodeResult(query="SELECT 1;")
        assert result.ok

    def test_invalid_json_reports_reason(self):
        result = decode_query('{"query": "SELECT 1;"')
        assert not result.ok
        assert result.query is None
        assert result.reason

    def test_missing_query_field(self):
        result = decode_query('{"sql": "SELECT 1;"}')
        assert not result.ok
        assert "query" in result.reason

    def test_non_string_query(self):
        result = decode_query('{"query": 42}')
        assert not result.ok

    def test_extra_fields_are_ignored(self):
        result = decode_query('{"query": "SELECT 1;", "explanation": "one"}')
        assert result.ok
        assert result.query == "SELECT 1;"
