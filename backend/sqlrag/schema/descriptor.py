"""Schema introspection and its textual rendering for prompts."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from ..core.db import Database
from ..core.exceptions import DatabaseError, SchemaIntrospectionError
from ..core.retry import Deadline

logger = logging.getLogger(__name__)

SCHEMA_QUERY = """
    SELECT table_name, column_name
    FROM information_schema.columns
    WHERE table_schema = 'public'
    ORDER BY table_name, ordinal_position;
"""


class SchemaDescriptor(Mapping[str, tuple[str, ...]]):
    """Read-only mapping of table name to its columns in physical order."""

    def __init__(self, tables: Mapping[str, Sequence[str]] | None = None) -> None:
        frozen = {name: tuple(columns) for name, columns in (tables or {}).items()}
        self._tables = MappingProxyType(frozen)

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[str]]) -> "SchemaDescriptor":
        """Group ``(table_name, column_name)`` rows, keeping row order per table."""
        tables: dict[str, list[str]] = {}
        for table_name, column_name in rows:
            tables.setdefault(table_name, []).append(column_name)
        return cls(tables)

    def __getitem__(self, table: str) -> tuple[str, ...]:
        return self._tables[table]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def __repr__(self) -> str:
        return f"SchemaDescriptor({dict(self._tables)!r})"


def load_schema(database: Database, deadline: Optional[Deadline] = None) -> SchemaDescriptor:
    """Read tables and columns of the ``public`` schema.

    Raises:
        SchemaIntrospectionError: If the catalog query fails
    """
    try:
        _, rows = database.query(SCHEMA_QUERY, deadline=deadline)
    except DatabaseError as e:
        logger.error(f"Failed to retrieve schema: {e}")
        raise SchemaIntrospectionError(f"Failed to retrieve schema: {e}") from e

    try:
        schema = SchemaDescriptor.from_rows(rows)
    except ValueError as e:
        raise SchemaIntrospectionError(f"Unexpected schema row shape: {e}") from e

    logger.debug(f"Schema has {len(schema)} tables")
    return schema


def format_schema(schema: Mapping[str, Sequence[str]]) -> str:
    """Render one ``Table:``/``Columns:`` block per table, sorted by table name."""
    return "".join(
        f"Table: {table}\nColumns: {', '.join(schema[table])}\n"
        for table in sorted(schema)
    )
