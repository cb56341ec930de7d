"""Custom exceptions for the application."""

from __future__ import annotations


class SqlRagError(Exception):
    """Base class for every error raised by the assistant."""

    pass


class DatabaseError(SqlRagError):
    """Raised when a database operation fails."""

    pass


class ConnectError(DatabaseError):
    """Raised when the database is unreachable or the DSN is rejected."""

    pass


class SchemaIntrospectionError(DatabaseError):
    """Raised when the table/column listing cannot be read."""

    pass


class QueryExecutionError(DatabaseError):
    """Raised when the generated SQL is rejected or fails on the server."""

    pass


class RowScanError(DatabaseError):
    """Raised when result rows cannot be fetched or converted."""

    pass


class LLMError(SqlRagError):
    """Raised when LLM returns unexpected response format or fails."""

    pass


class TransportError(LLMError):
    """Raised when the model endpoint is unreachable or answers non-2xx."""

    pass


class EnvelopeParseError(LLMError):
    """Raised when the completion envelope is not the expected JSON."""

    pass


class NoCandidatesError(LLMError):
    """Raised when the completion envelope has an empty choices list."""

    pass


class ExtractionParseError(LLMError):
    """Raised when the model content does not decode to ``{"query": ...}``.

    The offending candidate text is kept on the exception so it can be
    logged or shown to the operator.
    """

    def __init__(self, reason: str, candidate: str) -> None:
        super().__init__(f"failed to parse JSON response: {reason}\n{candidate}")
        self.reason = reason
        self.candidate = candidate


class MetadataLoadError(SqlRagError):
    """Raised when the extra metadata file is missing or malformed."""

    pass


class DeadlineExceededError(SqlRagError):
    """Raised when the run's time budget is spent before a blocking call."""

    pass


class PipelineError(SqlRagError):
    """Raised when a pipeline stage fails.

    ``stage`` is the stage that was being attempted when the failure happened;
    ``completed_stage`` is the last one that finished.
    """

    def __init__(self, stage: str, cause: BaseException, completed_stage: str | None = None) -> None:
        super().__init__(f"pipeline failed at stage '{stage}': {cause}")
        self.stage = stage
        self.completed_stage = completed_stage
        self.cause = cause
