"""
Metrics collector for backing-store fetches and resolution passes.

Accumulates counters and duration histograms in-process for export
to dashboards (Prometheus, Grafana).
"""

from __future__ import annotations

import threading
from collections import defaultdict
from functools import lru_cache
from typing import Any


class MetricsCollector:
    """
    Thread-safe in-process metrics collector.

    Counts fetches per source (``parameters``, ``secrets``,
    ``feature_config``) and per resolution pass.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

        # Counters
        self._source_calls: dict[str, int] = defaultdict(int)
        self._source_errors: dict[str, int] = defaultdict(int)
        self._resolutions = 0
        self._resolution_errors = 0

        # Histograms (recent durations)
        self._source_durations: dict[str, list[float]] = defaultdict(list)
        self._resolution_durations: list[float] = []

    # ── Recording ────────────────────────────────────────────────

    def record_source_fetch(self, source: str, duration_seconds: float, success: bool) -> None:
        with self._lock:
            self._source_calls[source] += 1
            if not success:
                self._source_errors[source] += 1
            self._source_durations[source].append(duration_seconds)

    def record_resolution(self, duration_seconds: float, success: bool) -> None:
        with self._lock:
            self._resolutions += 1
            if not success:
                self._resolution_errors += 1
            self._resolution_durations.append(duration_seconds)

    # ── Querying ─────────────────────────────────────────────────

    def get_source_summary(self) -> dict[str, Any]:
        """Return aggregated per-source metrics for dashboard export."""
        with self._lock:
            summary = {}
            for source in self._source_calls:
                durations = self._source_durations[source]
                total = self._source_calls[source]
                errors = self._source_errors[source]
                summary[source] = {
                    "total_calls": total,
                    "error_count": errors,
                    "success_rate": (total - errors) / total if total else 0.0,
                    "avg_duration_ms": (sum(durations) / len(durations) * 1000) if durations else 0.0,
                    "p95_duration_ms": self._percentile(durations, 0.95) * 1000 if durations else 0.0,
                    "max_duration_ms": max(durations) * 1000 if durations else 0.0,
                }
            return summary

    def get_resolution_summary(self) -> dict[str, Any]:
        with self._lock:
            durations = self._resolution_durations
            total = self._resolutions
            return {
                "total_calls": total,
                "error_count": self._resolution_errors,
                "success_rate": (total - self._resolution_errors) / total if total else 0.0,
                "p95_duration_ms": self._percentile(durations, 0.95) * 1000 if durations else 0.0,
            }

    # ── Helpers ──────────────────────────────────────────────────

    @staticmethod
    def _percentile(data: list[float], pct: float) -> float:
        if not data:
            return 0.0
        sorted_data = sorted(data)
        idx = int(len(sorted_data) * pct)
        idx = min(idx, len(sorted_data) - 1)
        return sorted_data[idx]


@lru_cache(maxsize=1)
def get_metrics_collector() -> MetricsCollector:
    return MetricsCollector()
