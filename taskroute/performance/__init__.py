"""Task outcome tracking."""

from taskroute.performance.tracker import PerformanceTracker, aggregate_history

__all__ = ["PerformanceTracker", "aggregate_history"]
