"""In-process metrics collector.

Named counters and timers are kept in memory and logged at debug level.
Timers hold running aggregates plus a bounded window of recent samples.
Emission is fire-and-forget: ``put_metric`` never raises.
"""

import logging
from collections import deque
from enum import Enum

logger = logging.getLogger(__name__)

# Recent samples retained per timer
MAX_TIMER_SAMPLES = 1000


class MetricUnit(str, Enum):
    """Unit attached to an emitted metric."""
    COUNT = "Count"
    MILLISECONDS = "Milliseconds"


class TimerStats:
    """Running count/sum/min/max for one timer and its recent samples."""

    def __init__(self, max_samples: int = MAX_TIMER_SAMPLES):
        self.count = 0
        self.total = 0.0
        self.minimum: float = float("inf")
        self.maximum: float = float("-inf")
        self.samples: deque[float] = deque(maxlen=max_samples)

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.minimum = min(self.minimum, value)
        self.maximum = max(self.maximum, value)
        self.samples.append(value)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "sum": self.total,
            "min": self.minimum,
            "max": self.maximum,
            "avg": self.total / self.count,
        }


class MetricsCollector:
    """Collects counters (summed) and timers (aggregated) by name."""

    def __init__(self, max_timer_samples: int = MAX_TIMER_SAMPLES):
        self._max_timer_samples = max_timer_samples
        self._counters: dict[str, float] = {}
        self._timers: dict[str, TimerStats] = {}

    def put_metric(self, name: str, value: float = 1, unit: MetricUnit = MetricUnit.COUNT) -> None:
        """Record a metric value."""
        try:
            if unit == MetricUnit.MILLISECONDS:
                stats = self._timers.get(name)
                if stats is None:
                    stats = self._timers[name] = TimerStats(self._max_timer_samples)
                stats.add(value)
            else:
                self._counters[name] = self._counters.get(name, 0) + value
            logger.debug(f"metric {name}={value} {unit.value}")
        except Exception as e:
            logger.warning(f"Failed to record metric {name}: {e}")

    def count(self, name: str) -> float:
        """Current counter value (0 if never emitted)."""
        return self._counters.get(name, 0)

    def timings(self, name: str) -> list[float]:
        """Most recent timer samples recorded under ``name``."""
        stats = self._timers.get(name)
        return list(stats.samples) if stats is not None else []

    def timer_stats(self, name: str) -> dict:
        """Aggregates for a timer; empty if never emitted."""
        stats = self._timers.get(name)
        return stats.to_dict() if stats is not None else {}

    def snapshot(self) -> dict:
        """Copy of all counters and timer aggregates."""
        return {
            "counters": dict(self._counters),
            "timers": {name: stats.to_dict() for name, stats in self._timers.items()},
        }

    def reset(self) -> None:
        """Clear all recorded metrics."""
        self._counters.clear()
        self._timers.clear()


# Process-wide collector
metrics = MetricsCollector()
