"""LLM interaction module.

Contains the chat completions client, prompts, and the two model stages:
- SQL generation
- Answer composition
"""

from .answer_composer import compose_answer
from .client import ModelClient, parse_envelope
from .extraction import QueryDecodeResult, decode_query, find_json
from .prompts import EXPLANATION_PROMPT, SQL_GENERATION_PROMPT, build_explanation_prompt, build_sql_prompt
from .sql_generator import extract_query, generate_sql

__all__ = [
    "compose_answer",
    "ModelClient",
    "parse_envelope",
    "QueryDecodeResult",
    "decode_query",
    "find_json",
    "EXPLANATION_PROMPT",
    "SQL_GENERATION_PROMPT",
    "build_explanation_prompt",
    "build_sql_prompt",
    "extract_query",
    "generate_sql",
]
