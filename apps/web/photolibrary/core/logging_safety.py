"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any

_BODY_LOG_LIMIT = 512


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def truncate_body(body: str, *, limit: int = _BODY_LOG_LIMIT) -> str:
    """Clip an upstream response body so it can be logged on a single line."""
    flat = " ".join(body.split())
    if len(flat) <= limit:
        return flat
    return f"{flat[:limit]}...(+{len(flat) - limit} chars)"
