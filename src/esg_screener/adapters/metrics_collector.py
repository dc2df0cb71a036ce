"""
In-Memory Metrics Collector.

Keeps every recorded sample in memory and summarizes per metric name.
Thread-safe, so parallel evaluation workers may record concurrently.
"""

from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional


class InMemoryMetricsCollector:
    """Simple in-memory metrics collector."""

    def __init__(self) -> None:
        self._samples: Dict[str, List[Dict[str, Any]]] = {}
        self._lock = Lock()

    def record_timing(
        self,
        name: str,
        duration_seconds: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record a timing metric."""
        self._record(name, "timing", duration_seconds, tags)

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record a count metric."""
        self._record(name, "count", value, tags)

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record a gauge metric."""
        self._record(name, "gauge", value, tags)

    def get_metrics(self) -> Dict[str, Any]:
        """
        Summarize all metrics.

        Returns:
            name -> {type, count, total, min, max, last}. Gauges report
            their latest value as ``last``; ``total`` is only meaningful
            for counts and timings.
        """
        with self._lock:
            summary: Dict[str, Any] = {}
            for name, samples in self._samples.items():
                values = [s["value"] for s in samples]
                summary[name] = {
                    "type": samples[-1]["type"],
                    "count": len(values),
                    "total": sum(values),
                    "min": min(values),
                    "max": max(values),
                    "last": values[-1],
                }
            return summary

    def get_samples(
        self, name: str, tags: Optional[Dict[str, str]] = None
    ) -> List[Dict[str, Any]]:
        """Raw samples for ``name``, optionally only those carrying all ``tags``."""
        with self._lock:
            samples = list(self._samples.get(name, []))
        if not tags:
            return samples
        return [
            s for s in samples if all(s["tags"].get(k) == v for k, v in tags.items())
        ]

    def clear(self) -> None:
        """Clear all metrics."""
        with self._lock:
            self._samples.clear()

    def _record(
        self,
        name: str,
        metric_type: str,
        value: Any,
        tags: Optional[Dict[str, str]],
    ) -> None:
        with self._lock:
            self._samples.setdefault(name, []).append(
                {
                    "type": metric_type,
                    "value": value,
                    "tags": dict(tags or {}),
                    "timestamp": datetime.now().isoformat(),
                }
            )
