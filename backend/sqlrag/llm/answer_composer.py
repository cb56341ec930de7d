"""Answer composition using LLM."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..core.retry import Deadline
from .client import ModelClient
from .prompts import build_explanation_prompt

logger = logging.getLogger(__name__)


def compose_answer(
    question: str,
    sql: str,
    result_text: str,
    schema_text: str,
    metadata: Mapping[str, str],
    client: ModelClient,
    deadline: Optional[Deadline] = None,
) -> str:
    """Compose natural language answer from the flattened query results."""
    prompt = build_explanation_prompt(schema_text, metadata, question, sql, result_text)

    logger.info(f"Composing answer for {len(result_text.splitlines())} result lines")

    content = client.complete(prompt, deadline=deadline)

    answer = content.strip()
    logger.info(f"Composed answer length: {len(answer)} chars")

    return answer
