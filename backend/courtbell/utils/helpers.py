"""
Utility helper functions
"""
from datetime import date, datetime, time, timezone
from typing import Any
import uuid

from courtbell.utils.validators import parse_time


def generate_id() -> str:
    """Generate a document identifier (uuid4 hex)"""
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def combine_date_time(date_str: str, time_str: str) -> datetime:
    """
    Combine separately stored YYYY-MM-DD and HH:MM strings into a naive
    local datetime. Raises ValueError on malformed input.
    """
    return datetime.combine(date.fromisoformat(date_str), parse_time(time_str))


def to_portable(value: Any) -> Any:
    """Recursively convert date/time values to ISO-8601 strings."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_portable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_portable(v) for v in value]
    return value


def truncate_text(text: str, length: int = 100) -> str:
    """Truncate text to specified length"""
    if len(text) <= length:
        return text
    return text[:length] + "..."
