"""Locating and decoding the ``{"query": ...}`` object in model output.

Models asked for pure JSON still tend to wrap it in a markdown fence or add a
sentence around it. Decoding is split in two phases:

1. ``find_json`` cuts from the first ``{`` to the last ``}``. It never raises
   and does no brace balancing: it assumes the JSON object is the only place
   with curly braces.
2. ``decode_query`` strictly validates the candidate against ``{"query": str}``
   and reports the outcome as a value instead of an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from pydantic import ValidationError

from ..core.models import GeneratedQuery

logger = logging.getLogger(__name__)


def find_json(content: str) -> str:
    """Return ``content[first '{' : last '}' + 1]`` or ``content`` unchanged.

    Extraction only happens when the opening brace is *after* position 0, so
    text that already starts with ``{`` is returned as is, trailing prose
    included.
    """
    start = content.find("{")
    if start > 0:
        end = content.rfind("}")
        if end > start:
            return content[start : end + 1]
    return content


@dataclass(frozen=True)
class QueryDecodeResult:
    """Either a decoded ``query`` or the ``reason`` decoding failed."""
    query: str | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None


def decode_query(candidate: str) -> QueryDecodeResult:
    """Strictly decode ``candidate`` as ``{"query": "<SQL>"}``."""
    try:
        parsed = GeneratedQuery.model_validate_json(candidate)
    except ValidationError as e:
        reason = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        logger.debug(f"Candidate did not decode as a query object: {reason}")
        return QueryDecodeResult(reason=reason)
    return QueryDecodeResult(query=parsed.query)
