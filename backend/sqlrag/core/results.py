"""Conversion of raw query rows into flattened ``column: value`` text."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
import logging
from typing import Any, Optional, Sequence

from .db import Database
from .exceptions import RowScanError
from .retry import Deadline

logger = logging.getLogger(__name__)

# One row: ordered (column name, stringified value) pairs
ResultRow = tuple[tuple[str, str], ...]
ResultSet = list[ResultRow]

NULL_TEXT = "NULL"


class ValueKind(str, Enum):
    """Closed set of cell kinds, each with its own stringification rule."""
    TEXT = "text"
    NUMBER = "number"
    BINARY = "binary"
    NULL = "null"
    OTHER = "other"


def classify_value(value: Any) -> ValueKind:
    if value is None:
        return ValueKind.NULL
    if isinstance(value, str):
        return ValueKind.TEXT
    # bool is an int subclass but reads better as True/False
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return ValueKind.NUMBER
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    return ValueKind.OTHER


def stringify_value(value: Any) -> str:
    """Render one cell according to its kind."""
    kind = classify_value(value)
    if kind is ValueKind.NULL:
        return NULL_TEXT
    if kind is ValueKind.TEXT:
        return value
    if kind is ValueKind.BINARY:
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw.hex()
    return str(value)


def materialize_rows(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> ResultSet:
    """Pair every value with its column name, keeping declared column order."""
    result: ResultSet = []
    for index, row in enumerate(rows):
        if len(row) != len(columns):
            raise RowScanError(
                f"Row {index} has {len(row)} values but the query declared {len(columns)} columns"
            )
        result.append(tuple((column, stringify_value(value)) for column, value in zip(columns, row)))
    return result


def format_result_set(result_set: ResultSet) -> str:
    """Flatten rows into one ``column: value`` line per cell."""
    return "\n".join(f"{column}: {value}" for row in result_set for column, value in row)


def execute_query(database: Database, sql: str, deadline: Optional[Deadline] = None) -> tuple[list[str], ResultSet]:
    """Run ``sql`` and return its column names with the materialized rows."""
    columns, rows = database.query(sql, deadline=deadline)
    result_set = materialize_rows(columns, rows)
    logger.info(f"Query returned {len(result_set)} rows, {len(columns)} columns")
    return list(columns), result_set
