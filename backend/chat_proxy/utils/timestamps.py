"""Timestamp helpers shared by response payloads."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
