"""Prompt templates for the two model calls."""

from __future__ import annotations

from typing import Mapping

from ..schema.metadata import render_metadata

SQL_GENERATION_PROMPT = """
You are an AI that generates PostgreSQL SQL queries based on a user's natural language request.
The database schema is as follows:

{schema}

Additionally, here is some extra information that might help interpret specific tables or columns:

{metadata}

If the prompt is a valid postgres query, then take it literally and
just return json with the query field set to the prompt.
The SQL queries can be complex, joined, with subqueries, etc;
because the schema can be consulted to figure it out.
http response must be application/json, with the sql query in it:
{{ "query": "<SQL query here>" }}

User's request: {question}
"""

EXPLANATION_PROMPT = """
We are doing RAG against a database with this schema

{schema}

with some extra metadata possibly

{metadata}

The user prompt was

{question}

The query that was run is

{sql}

And the resulting rows were

{results}

Explain the result to the user in plain language, answering their request.
"""


def build_sql_prompt(schema_text: str, metadata: Mapping[str, str], question: str) -> str:
    return SQL_GENERATION_PROMPT.format(
        schema=schema_text,
        metadata=render_metadata(metadata),
        question=question,
    )


def build_explanation_prompt(
    schema_text: str,
    metadata: Mapping[str, str],
    question: str,
    sql: str,
    result_text: str,
) -> str:
    return EXPLANATION_PROMPT.format(
        schema=schema_text,
        metadata=render_metadata(metadata),
        question=question,
        sql=sql,
        results=result_text,
    )
