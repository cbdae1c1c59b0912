"""Invocation log - track action invocations for observability.

This module provides:
1. InvocationRecord - Data class for a single invocation
2. InvocationStats - Aggregated statistics for an action
3. InvocationLog - In-memory log a Registry can record into

The log observes but never affects dispatch. It is per-process and
bounded by ``invocations.max_records``; the oldest records are dropped
first.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..config import get


@dataclass
class InvocationRecord:
    """Record of a single action invocation.

    Attributes:
        action: Name of the invoked action
        success: Whether the invocation succeeded
        duration_ms: Execution time in milliseconds
        error: Failure message if failed
        timestamp: ISO timestamp of invocation
    """
    action: str
    success: bool
    duration_ms: float
    error: str | None = None
    timestamp: str = ""

    def __post_init__(self) -> None:
        """Set timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "action": self.action,
            "success": self.success,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "timestamp": self.timestamp,
        }


@dataclass
class InvocationStats:
    """Aggregated invocation statistics for an action.

    Attributes:
        total_invocations: Total number of invocations
        successful: Number of successful invocations
        failed: Number of failed invocations
        success_rate: Ratio of successful to total (0.0-1.0)
        avg_duration_ms: Average execution time in milliseconds
        failures: Count of each failure message
    """
    total_invocations: int = 0
    successful: int = 0
    failed: int = 0
    success_rate: float = 0.0
    avg_duration_ms: float = 0.0
    failures: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "total_invocations": self.total_invocations,
            "successful": self.successful,
            "failed": self.failed,
            "success_rate": self.success_rate,
            "avg_duration_ms": self.avg_duration_ms,
            "failures": self.failures,
        }


class InvocationLog:
    """In-memory log of action invocations.

    Usage:
        log = InvocationLog()
        registry = Registry(invocation_log=log)
        registry.invoke("echo", ["hi"])
        stats = log.stats_for("echo")
    """

    def __init__(self, max_records: int | None = None) -> None:
        """Initialize an empty log.

        Args:
            max_records: Cap on stored records; defaults to
                ``invocations.max_records`` (0 = unbounded)
        """
        if max_records is None:
            max_records = int(get("invocations.max_records", 0))
        self._records: deque[InvocationRecord] = deque(maxlen=max_records or None)

    def record(self, record: InvocationRecord) -> None:
        """Add an invocation record."""
        self._records.append(record)

    def stats_for(self, action: str) -> InvocationStats:
        """Get aggregated statistics for an action."""
        relevant = [r for r in self._records if r.action == action]

        if not relevant:
            return InvocationStats()

        total = len(relevant)
        successful = sum(1 for r in relevant if r.success)

        failures: dict[str, int] = {}
        for r in relevant:
            if not r.success and r.error:
                failures[r.error] = failures.get(r.error, 0) + 1

        return InvocationStats(
            total_invocations=total,
            successful=successful,
            failed=total - successful,
            success_rate=successful / total,
            avg_duration_ms=sum(r.duration_ms for r in relevant) / total,
            failures=failures,
        )

    def all_stats(self) -> dict[str, InvocationStats]:
        """Statistics for every action seen in the log."""
        names = dict.fromkeys(r.action for r in self._records)
        return {name: self.stats_for(name) for name in names}

    def records_for(
        self,
        action: str | None = None,
        success: bool | None = None,
        limit: int = 100,
    ) -> list[InvocationRecord]:
        """Get filtered invocation records, oldest first.

        Args:
            action: Filter by action name (optional)
            success: Filter by success status (optional)
            limit: Maximum number of records to return (most recent kept)
        """
        if limit <= 0:
            return []
        results = list(self._records)

        if action is not None:
            results = [r for r in results if r.action == action]

        if success is not None:
            results = [r for r in results if r.success == success]

        return results[-limit:] if results else []

    def clear(self) -> None:
        """Clear all records."""
        self._records.clear()

    def count(self) -> int:
        """Get total number of stored records."""
        return len(self._records)
