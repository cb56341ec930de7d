"""SQL RAG Assistant.

Answers plain-language questions about a PostgreSQL database: the model writes
the SQL, the database runs it, and the model explains the rows.

Package Structure:
    core/       - Core infrastructure (config, db, results, retry, models, exceptions)
    schema/     - Schema introspection, schema formatting, extra metadata
    llm/        - LLM interaction (client, prompts, JSON extraction, SQL generation, answers)
    pipeline    - The staged run tying everything together
"""

from .core.config import DatabaseConnection, Settings, get_settings
from .core.exceptions import (
    DatabaseError,
    ExtractionParseError,
    LLMError,
    MetadataLoadError,
    PipelineError,
    SqlRagError,
)
from .core.results import execute_query, format_result_set
from .core.retry import Deadline, RetryPolicy
from .llm.answer_composer import compose_answer
from .llm.client import ModelClient
from .llm.extraction import decode_query, find_json
from .llm.sql_generator import generate_sql
from .pipeline import PipelineResult, RagPipeline, Stage
from .schema.descriptor import SchemaDescriptor, format_schema, load_schema
from .schema.metadata import load_extra_metadata

__all__ = [
    "DatabaseConnection",
    "Settings",
    "get_settings",
    "DatabaseError",
    "ExtractionParseError",
    "LLMError",
    "MetadataLoadError",
    "PipelineError",
    "SqlRagError",
    "execute_query",
    "format_result_set",
    "Deadline",
    "RetryPolicy",
    "compose_answer",
    "ModelClient",
    "decode_query",
    "find_json",
    "generate_sql",
    "PipelineResult",
    "RagPipeline",
    "Stage",
    "SchemaDescriptor",
    "format_schema",
    "load_schema",
    "load_extra_metadata",
]
