from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, NoReturn

from fastapi import Depends, FastAPI, HTTPException, Query

from .core.config import get_settings
from .core.exceptions import DatabaseError, DeadlineExceededError, LLMError, PipelineError
from .core.models import ErrorDetail, QueryResponse
from .pipeline import RagPipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="SQL RAG Assistant", version="0.1.0")


@lru_cache(maxsize=1)
def get_pipeline() -> RagPipeline:
    return RagPipeline(get_settings())


# --- Structured Error Response ---

def raise_error(status_code: int, error_code: str, message: str, details: dict | None = None) -> NoReturn:
    """Raise HTTPException with structured error detail."""
    raise HTTPException(
        status_code=status_code,
        detail=ErrorDetail(error_code=error_code, message=message, details=details).model_dump()
    )


def raise_pipeline_error(exc: PipelineError) -> NoReturn:
    """Translate a failed run into a structured HTTP error."""
    details = {"stage": exc.stage}
    if exc.completed_stage:
        details["completed_stage"] = exc.completed_stage
    cause = exc.cause
    if isinstance(cause, DeadlineExceededError):
        raise_error(504, "deadline_exceeded", str(cause), details)
    if isinstance(cause, LLMError):
        raise_error(502, "llm_error", f"LLM service error: {cause}", details)
    if isinstance(cause, DatabaseError):
        raise_error(500, "database_error", f"Database query failed: {cause}", details)
    raise_error(500, "pipeline_error", str(exc), details)


# --- API Endpoints ---

@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/schema/summary")
def schema_summary(pipeline: RagPipeline = Depends(get_pipeline)) -> dict[str, Any]:
    try:
        schema = pipeline.describe_schema()
    except PipelineError as exc:
        logger.error(f"Schema summary failed: {exc}")
        raise_pipeline_error(exc)
    return {
        "tables": len(schema),
        "columns": {table: len(columns) for table, columns in schema.items()},
    }


@app.get("/api/query", response_model=QueryResponse)
def query_llm(
    q: str = Query(..., min_length=1, max_length=2000, description="Question in plain language"),
    timeout: float | None = Query(default=None, gt=0, description="Total time budget in seconds"),
    pipeline: RagPipeline = Depends(get_pipeline),
) -> QueryResponse:
    """
    Query the database using natural language.

    - **q**: Your question (e.g., "How many users are there?")
    - **timeout**: Optional time budget for the whole run

    Returns the SQL query, the flattened results and a natural language answer.
    """
    message = q.strip()
    if not message:
        raise_error(400, "empty_query", "Query parameter 'q' is required")

    logger.info(f"Query request: {message[:100]}...")

    try:
        result = pipeline.run(message, timeout=timeout)
    except PipelineError as exc:
        raise_pipeline_error(exc)

    logger.info("Query complete")

    return QueryResponse(
        answer=result.explanation,
        sql=result.sql,
        columns=result.columns,
        result_text=result.result_text,
    )
