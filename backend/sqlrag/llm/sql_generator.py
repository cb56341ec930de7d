"""SQL query generation: question in, SQL string out."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..core.exceptions import ExtractionParseError
from ..core.retry import Deadline
from .client import ModelClient
from .extraction import decode_query, find_json
from .prompts import build_sql_prompt

logger = logging.getLogger(__name__)


def extract_query(content: str) -> str:
    """Pull the SQL string out of raw model content.

    Raises:
        ExtractionParseError: If no ``{"query": ...}`` object can be decoded,
            or the decoded query is empty
    """
    candidate = find_json(content)
    result = decode_query(candidate)
    if not result.ok:
        logger.error(f"Failed to parse JSON response: {result.reason}")
        logger.error(f"Attempted to parse: {candidate[:200]}...")
        raise ExtractionParseError(result.reason or "invalid JSON", candidate)

    # The query field itself sometimes carries another fenced JSON fragment
    query = find_json(result.query or "").strip()
    if not query:
        raise ExtractionParseError("query field is empty", candidate)
    return query


def generate_sql(
    question: str,
    schema_text: str,
    metadata: Mapping[str, str],
    client: ModelClient,
    deadline: Optional[Deadline] = None,
) -> str:
    """Generate a SQL query answering ``question``.

    Args:
        question: User's natural-language request (or a literal SQL query)
        schema_text: Output of ``format_schema``
        metadata: Extra metadata mapping, possibly empty
        client: Model client used for the round trip
        deadline: Optional time budget for the model call
    """
    logger.info(f"Generating SQL for question: {question[:100]}...")

    prompt = build_sql_prompt(schema_text, metadata, question)
    content = client.complete(prompt, deadline=deadline)
    logger.debug(f"Raw SQL generation response: {content[:200]}...")

    sql = extract_query(content)
    logger.info(f"Generated SQL length: {len(sql)} chars")
    return sql
