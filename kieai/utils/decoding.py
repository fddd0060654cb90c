"""Lenient JSON decoding for opaque string fields of task records.

The service stores request parameters and results as JSON-encoded strings.
A record with a malformed field is still more useful than an exception, so
these helpers never raise: they fall back to a documented default instead.
"""

from __future__ import annotations

import json
from typing import Any

from kieai.utils.logging import get_logger

logger = get_logger(__name__)


def decode_optional(raw: Any) -> Any | None:
    """Decode *raw* as JSON, returning ``None`` when absent or malformed.

    Values that are already decoded (dicts, lists) pass through unchanged.
    """
    if raw is None or raw == "":
        return None
    if not isinstance(raw, (str, bytes, bytearray)):
        return raw
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.debug("lenient_decode_failed", error=str(exc))
        return None


def decode_mapping(raw: Any) -> dict[str, Any]:
    """Decode *raw* as a JSON object, returning ``{}`` on any failure."""
    value = decode_optional(raw)
    if isinstance(value, dict):
        return value
    return {}
