"""Display and coercion helpers for recording metadata."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional


def coerce_timestamp(ts_value: Any, _logger_obj: logging.Logger | None = None) -> Optional[datetime]:
    """
    Convert a datetime, ISO string or epoch number to a local-time datetime.

    Aware values are converted to local time, so month/day match what the
    user sees on the device. Returns None when the value cannot be parsed.
    """
    if ts_value is None:
        return None
    try:
        if isinstance(ts_value, datetime):
            dt_obj = ts_value
        elif isinstance(ts_value, (int, float)) and not isinstance(ts_value, bool):
            return datetime.fromtimestamp(ts_value)
        elif isinstance(ts_value, str):
            dt_obj = datetime.fromisoformat(ts_value.strip().replace("Z", "+00:00"))
        else:
            return None

        if dt_obj.tzinfo is not None:
            dt_obj = dt_obj.astimezone()
        return dt_obj
    except (ValueError, OverflowError, OSError) as e:
        if _logger_obj:
            _logger_obj.debug(f"Could not parse timestamp '{ts_value}': {e}")
        return None


def format_duration(seconds: float) -> str:
    """Format seconds as M:SS, or H:MM:SS from one hour up."""
    total = max(int(seconds or 0), 0)
    hrs, rem = divmod(total, 3600)
    mins, secs = divmod(rem, 60)
    if hrs > 0:
        return f"{hrs}:{mins:02d}:{secs:02d}"
    return f"{mins}:{secs:02d}"


def format_size_kb(size_bytes: Optional[int]) -> str:
    return f"{(size_bytes or 0) / 1024:.1f}KB"


def format_date(ts_value: Any) -> str:
    dt_obj = coerce_timestamp(ts_value)
    if dt_obj is None:
        return "N/A"
    return dt_obj.strftime("%Y-%m-%d")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
