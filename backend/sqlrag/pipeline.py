"""The question -> SQL -> rows -> explanation run.

Stages advance strictly in order::

    INIT -> SCHEMA_LOADED -> METADATA_LOADED -> QUERY_SYNTHESIZED
         -> QUERY_EXECUTED -> EXPLAINED

Any failure except a missing or broken metadata file ends the run with a
``PipelineError`` that names the stage being attempted, the last stage
completed, and chains the cause.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Callable, Optional

from .core.config import DatabaseConnection, Settings
from .core.db import Database, get_db_connection
from .core.exceptions import PipelineError, SqlRagError
from .core.results import execute_query, format_result_set
from .core.retry import Deadline
from .llm.answer_composer import compose_answer
from .llm.client import ModelClient
from .llm.sql_generator import generate_sql
from .schema.descriptor import SchemaDescriptor, format_schema, load_schema
from .schema.metadata import load_extra_metadata_or_empty

logger = logging.getLogger(__name__)

DatabaseFactory = Callable[[DatabaseConnection, Optional[Deadline]], AbstractContextManager[Database]]


class Stage(str, Enum):
    INIT = "init"
    SCHEMA_LOADED = "schema_loaded"
    METADATA_LOADED = "metadata_loaded"
    QUERY_SYNTHESIZED = "query_synthesized"
    QUERY_EXECUTED = "query_executed"
    EXPLAINED = "explained"


RUN_ORDER = (
    Stage.INIT,
    Stage.SCHEMA_LOADED,
    Stage.METADATA_LOADED,
    Stage.QUERY_SYNTHESIZED,
    Stage.QUERY_EXECUTED,
    Stage.EXPLAINED,
)


@dataclass
class PipelineResult:
    question: str
    sql: str
    columns: list[str]
    result_text: str
    explanation: str
    stage: Stage = Stage.EXPLAINED
    schema: SchemaDescriptor = field(default_factory=SchemaDescriptor, repr=False)


class RunProgress:
    """Stage tracking for a single run; never shared between runs."""

    def __init__(self) -> None:
        self.completed = Stage.INIT

    @property
    def attempting(self) -> Stage:
        """The stage the run is working towards."""
        index = RUN_ORDER.index(self.completed)
        return RUN_ORDER[min(index + 1, len(RUN_ORDER) - 1)]

    def advance(self, stage: Stage) -> None:
        logger.debug(f"Pipeline stage: {self.completed.value} -> {stage.value}")
        self.completed = stage


class RagPipeline:
    """Runs one question end to end against the configured database and model.

    The pipeline holds only configuration and collaborators, so a single
    instance can serve concurrent runs.

    Args:
        settings: Explicit configuration for this pipeline
        client: Model client; built from ``settings`` when omitted
        database_factory: Callable returning a context manager that yields a
            ``Database``; defaults to a pyodbc connection
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[ModelClient] = None,
        database_factory: Optional[DatabaseFactory] = None,
    ) -> None:
        self.settings = settings
        self.client = client or ModelClient.from_settings(settings)
        self.database_factory = database_factory or get_db_connection

    def describe_schema(self, deadline: Optional[Deadline] = None) -> SchemaDescriptor:
        """Connect and read the schema only, without any model call."""
        try:
            with self.database_factory(self.settings.connection, deadline) as db:
                return load_schema(db, deadline=deadline)
        except SqlRagError as e:
            raise PipelineError(Stage.SCHEMA_LOADED.value, e, completed_stage=Stage.INIT.value) from e

    def run(self, question: str, timeout: Optional[float] = None) -> PipelineResult:
        """Answer ``question``.

        Args:
            question: Natural-language request
            timeout: Optional total budget in seconds for every blocking call

        Raises:
            PipelineError: If any stage fails; ``stage`` names the stage that failed
        """
        progress = RunProgress()
        deadline = Deadline(timeout) if timeout is not None else None
        try:
            return self._run(question, deadline, progress)
        except SqlRagError as e:
            failed = progress.attempting
            logger.error(f"Pipeline failed at stage '{failed.value}': {e}")
            raise PipelineError(failed.value, e, completed_stage=progress.completed.value) from e

    def _run(self, question: str, deadline: Optional[Deadline], progress: RunProgress) -> PipelineResult:
        with self.database_factory(self.settings.connection, deadline) as db:
            logger.info("Connected to database")

            schema = load_schema(db, deadline=deadline)
            schema_text = format_schema(schema)
            progress.advance(Stage.SCHEMA_LOADED)
            logger.info(f"Retrieved schema ({len(schema)} tables)")

            metadata = load_extra_metadata_or_empty(self.settings.extra_metadata_path)
            progress.advance(Stage.METADATA_LOADED)
            logger.info("Loaded metadata")

            sql = generate_sql(question, schema_text, metadata, self.client, deadline=deadline)
            progress.advance(Stage.QUERY_SYNTHESIZED)
            logger.info(f"Got SQL query: {sql}")

            columns, result_set = execute_query(db, sql, deadline=deadline)
            result_text = format_result_set(result_set)
            progress.advance(Stage.QUERY_EXECUTED)

        explanation = compose_answer(
            question,
            sql,
            result_text,
            schema_text,
            metadata,
            self.client,
            deadline=deadline,
        )
        progress.advance(Stage.EXPLAINED)

        return PipelineResult(
            question=question,
            sql=sql,
            columns=columns,
            result_text=result_text,
            explanation=explanation,
            stage=progress.completed,
            schema=schema,
        )
