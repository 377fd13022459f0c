"""Utility modules for swapquote."""

from swapquote.utils.time import (
    current_timestamp_ms,
    current_timestamp_seconds,
    timestamp_ms_to_seconds,
)

__all__ = ["current_timestamp_ms", "current_timestamp_seconds", "timestamp_ms_to_seconds"]
