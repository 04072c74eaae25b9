"""Per-key call metrics: counts, errors, durations and cost.

The collector is keyed by an arbitrary string (the executor uses the
agent version) and is owned by whoever records into it; there is no
module-level instance.

Usage:
    metrics = MetricsCollector()
    metrics.record("v2.1", duration_ms=812.0, cost_usd=0.004)
    metrics.record("v2.1", duration_ms=95.0, is_error=True)
    metrics.get_summary()["by_key"]["v2.1"]["error_rate"]  # "50.0%"
"""

import logging
import threading
import time
from collections import defaultdict
from typing import Any

from pydantic import BaseModel, PrivateAttr

logger = logging.getLogger(__name__)


class CallMetrics(BaseModel):
    """Running totals for one key."""

    call_count: int = 0
    error_count: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float = 0.0
    total_cost_usd: float = 0.0

    @property
    def avg_duration_ms(self) -> float:
        if self.call_count == 0:
            return 0.0
        return self.total_duration_ms / self.call_count

    @property
    def error_rate(self) -> float:
        if self.call_count == 0:
            return 0.0
        return self.error_count / self.call_count

    def record_call(
        self, duration_ms: float, cost_usd: float = 0.0, is_error: bool = False
    ) -> None:
        self.call_count += 1
        self.total_duration_ms += duration_ms
        self.max_duration_ms = max(self.max_duration_ms, duration_ms)
        self.total_cost_usd += cost_usd
        if is_error:
            self.error_count += 1

    def to_dict(self) -> dict[str, Any]:
        """Rounded, serializable view."""
        return {
            "call_count": self.call_count,
            "error_count": self.error_count,
            "error_rate": f"{self.error_rate:.1%}",
            "avg_duration_ms": round(self.avg_duration_ms, 2),
            "max_duration_ms": round(self.max_duration_ms, 2),
            "total_cost_usd": round(self.total_cost_usd, 6),
        }


class MetricsCollector(BaseModel):
    """Collects CallMetrics per key. Safe to record from several threads."""

    _metrics: dict[str, CallMetrics] = PrivateAttr(
        default_factory=lambda: defaultdict(CallMetrics)
    )
    _started_at: float = PrivateAttr(default_factory=time.time)
    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def record(
        self,
        key: str,
        duration_ms: float,
        cost_usd: float = 0.0,
        is_error: bool = False,
    ) -> None:
        with self._lock:
            self._metrics[key].record_call(duration_ms, cost_usd, is_error)

    def get(self, key: str) -> CallMetrics | None:
        """Copy of the metrics for one key, or None if nothing was recorded."""
        with self._lock:
            metrics = self._metrics.get(key)
            return metrics.model_copy() if metrics is not None else None

    def get_summary(self) -> dict[str, Any]:
        with self._lock:
            by_key = dict(self._metrics)
            total_calls = sum(m.call_count for m in by_key.values())
            total_errors = sum(m.error_count for m in by_key.values())
            total_duration = sum(m.total_duration_ms for m in by_key.values())
            total_cost = sum(m.total_cost_usd for m in by_key.values())

            return {
                "uptime_seconds": round(time.time() - self._started_at, 2),
                "total_calls": total_calls,
                "total_errors": total_errors,
                "total_cost_usd": round(total_cost, 6),
                "avg_duration_ms": round(total_duration / max(1, total_calls), 2),
                "by_key": {key: m.to_dict() for key, m in sorted(by_key.items())},
            }

    def log_summary(self, level: int = logging.INFO) -> None:
        summary = self.get_summary()
        logger.log(
            level,
            "Execution metrics: %d calls, %d errors, $%.4f",
            summary["total_calls"],
            summary["total_errors"],
            summary["total_cost_usd"],
        )

    def reset(self) -> None:
        with self._lock:
            self._metrics.clear()
            self._started_at = time.time()
