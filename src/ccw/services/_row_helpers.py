"""Typed accessors for ``user_projects`` rows converted to dicts."""

from __future__ import annotations

from datetime import datetime

Row = dict[str, object]


def row_str(row: Row, key: str, default: str = "") -> str:
    value = row.get(key)
    return str(value) if value else default


def row_optional_int(row: Row, key: str) -> int | None:
    """Integer column value, or None when it is NULL or not numeric."""
    value = row.get(key)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return None


def row_int(row: Row, key: str) -> int:
    return row_optional_int(row, key) or 0


def row_flag(row: Row, key: str) -> bool:
    """SQLite stores booleans as 0/1."""
    return bool(row_int(row, key))


def row_datetime(row: Row, key: str) -> datetime | None:
    """Parse an ISO timestamp column; None when empty or malformed."""
    value = row.get(key)
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
