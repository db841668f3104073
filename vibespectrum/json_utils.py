"""JSON helpers for persisted spectrum payloads.

Spectra are numpy-heavy; these helpers turn arrays and numpy scalars into
plain Python and replace non-finite floats with ``None`` so payloads always
serialise with ``allow_nan=False``.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

__all__ = [
    "safe_json_dumps",
    "safe_json_loads",
    "sanitize_value",
]

LOGGER = logging.getLogger(__name__)


def sanitize_value(value: Any) -> Any:
    """Recursively convert numpy types and replace NaN/Inf with ``None``."""
    if hasattr(value, "tolist") and hasattr(value, "ndim"):
        value = value.tolist()
    elif hasattr(value, "item"):
        value = value.item()
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {k: sanitize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_value(item) for item in value]
    return value


def safe_json_dumps(value: Any) -> str:
    return json.dumps(sanitize_value(value), ensure_ascii=False, allow_nan=False)


def safe_json_loads(value: str | None, *, context: str) -> Any | None:
    """Deserialise a JSON string, returning ``None`` on empty/invalid input.

    Logs a warning (with traceback) instead of raising on malformed JSON::

        safe_json_loads(raw, context="spectrum 2026-01-01")
    """
    if not value:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        LOGGER.warning("Skipping invalid JSON payload while reading %s", context, exc_info=True)
        return None
