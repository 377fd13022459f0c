"""Wall-clock helpers."""

import time


def current_timestamp_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


def current_timestamp_seconds() -> int:
    """Current wall-clock time in whole seconds."""
    return int(time.time())


def timestamp_ms_to_seconds(timestamp_ms: int) -> int:
    return timestamp_ms // 1000
