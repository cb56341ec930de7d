"""Optional extra metadata: free-form hints that the schema cannot express."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from ..core.exceptions import MetadataLoadError

logger = logging.getLogger(__name__)

EMPTY_METADATA: Mapping[str, str] = MappingProxyType({})


def load_extra_metadata(path: str | Path) -> Mapping[str, str]:
    """Load a JSON object of string keys and values.

    Raises:
        MetadataLoadError: If the file is missing, unreadable or not a string mapping
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise MetadataLoadError(f"Cannot read metadata file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise MetadataLoadError(f"Metadata file {path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise MetadataLoadError(f"Metadata file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MetadataLoadError(f"Metadata file {path} must contain a JSON object")
    for key, value in data.items():
        if not isinstance(value, str):
            raise MetadataLoadError(f"Metadata value for '{key}' must be a string")

    return MappingProxyType(dict(data))


def load_extra_metadata_or_empty(path: str | Path) -> Mapping[str, str]:
    """Like ``load_extra_metadata`` but degrades to an empty mapping."""
    try:
        metadata = load_extra_metadata(path)
    except MetadataLoadError as e:
        logger.warning(f"No extra metadata found, continuing without it ({e})")
        return EMPTY_METADATA
    logger.info(f"Loaded {len(metadata)} extra metadata entries from {path}")
    return metadata


def render_metadata(metadata: Mapping[str, str]) -> str:
    """Native mapping form used inside prompts; ``{}`` when empty."""
    return repr(dict(metadata))
