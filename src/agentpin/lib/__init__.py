"""Parametric utilities with no knowledge of agents or versions.

Modules:
- metrics: Per-key call counts, errors, durations and cost
- throttle: Async concurrency limiting with optional start spacing
"""

from agentpin.lib.metrics import CallMetrics, MetricsCollector
from agentpin.lib.throttle import Throttle

__all__ = [
    # Metrics
    "CallMetrics",
    "MetricsCollector",
    # Throttle
    "Throttle",
]
