"""Schema management module.

Contains schema introspection, schema formatting and extra metadata loading.
"""

from .descriptor import SCHEMA_QUERY, SchemaDescriptor, format_schema, load_schema
from .metadata import EMPTY_METADATA, load_extra_metadata, load_extra_metadata_or_empty, render_metadata

__all__ = [
    "SCHEMA_QUERY",
    "SchemaDescriptor",
    "format_schema",
    "load_schema",
    "EMPTY_METADATA",
    "load_extra_metadata",
    "load_extra_metadata_or_empty",
    "render_metadata",
]
