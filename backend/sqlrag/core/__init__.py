"""Core infrastructure module.

Contains configuration, database access, result materialization, retry policy,
models, and exceptions.
"""

from .config import DatabaseConnection, Settings, get_settings
from .db import Database, OdbcDatabase, connect, get_db_connection
from .exceptions import (
    ConnectError,
    DatabaseError,
    DeadlineExceededError,
    EnvelopeParseError,
    ExtractionParseError,
    LLMError,
    MetadataLoadError,
    NoCandidatesError,
    PipelineError,
    QueryExecutionError,
    RowScanError,
    SchemaIntrospectionError,
    SqlRagError,
    TransportError,
)
from .models import ChatMessage, CompletionRequest, CompletionResponse, GeneratedQuery, QueryResponse
from .results import (
    ResultSet,
    ValueKind,
    classify_value,
    execute_query,
    format_result_set,
    materialize_rows,
    stringify_value,
)
from .retry import NO_RETRY, Deadline, RetryPolicy

__all__ = [
    # Config
    "DatabaseConnection",
    "Settings",
    "get_settings",
    # Database
    "Database",
    "OdbcDatabase",
    "connect",
    "get_db_connection",
    # Results
    "ResultSet",
    "ValueKind",
    "classify_value",
    "execute_query",
    "format_result_set",
    "materialize_rows",
    "stringify_value",
    # Retry
    "NO_RETRY",
    "Deadline",
    "RetryPolicy",
    # Exceptions
    "ConnectError",
    "DatabaseError",
    "DeadlineExceededError",
    "EnvelopeParseError",
    "ExtractionParseError",
    "LLMError",
    "MetadataLoadError",
    "NoCandidatesError",
    "PipelineError",
    "QueryExecutionError",
    "RowScanError",
    "SchemaIntrospectionError",
    "SqlRagError",
    "TransportError",
    # Models
    "ChatMessage",
    "CompletionRequest",
    "CompletionResponse",
    "GeneratedQuery",
    "QueryResponse",
]
