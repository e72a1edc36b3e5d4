"""Shared service-layer helper functions."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime


def today_iso() -> str:
    """Today's date as YYYY-MM-DD."""
    return datetime.now(UTC).strftime("%Y-%m-%d")


def parse_iso_date(value: str) -> str:
    """Normalize a calendar date to YYYY-MM-DD.

    Raises:
        ValueError: If *value* is not a real ``YYYY-MM-DD`` date.
    """
    return datetime.strptime(value.strip(), "%Y-%m-%d").date().isoformat()


def now_iso() -> str:
    """Current UTC time as standard ISO 8601."""
    return datetime.now(UTC).isoformat()


def new_id() -> str:
    """Default identifier source: a random UUID4 as 32 hex chars."""
    return uuid.uuid4().hex
