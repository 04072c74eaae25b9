"""Destinations for execution log entries.

The executor forwards one AgentLogEntry per request to a LogSink and
does not depend on the sink succeeding.

- InMemoryLogSink: keeps entries in a list and supports filtered queries
  (tests, demos, short-lived processes)
- LoggingLogSink: emits each entry as JSON through the ``logging`` module
"""

import json
import logging
import threading
from datetime import datetime
from typing import Protocol, runtime_checkable

from agentpin.agent.models import AgentLogEntry, ExecutionResult, new_execution_id
from agentpin.versioning.models import ExecutionContext

logger = logging.getLogger(__name__)


@runtime_checkable
class LogSink(Protocol):
    def log_execution(self, entry: AgentLogEntry) -> None: ...

    def query_logs(
        self,
        *,
        user_id: str | None = None,
        tenant_id: str | None = None,
        version: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> list[AgentLogEntry]: ...


class InMemoryLogSink:
    """Unbounded in-process sink with filtered queries."""

    def __init__(self) -> None:
        self._entries: list[AgentLogEntry] = []
        self._lock = threading.Lock()

    def log_execution(self, entry: AgentLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def query_logs(
        self,
        *,
        user_id: str | None = None,
        tenant_id: str | None = None,
        version: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> list[AgentLogEntry]:
        """Entries matching every given filter; time bounds are inclusive."""
        with self._lock:
            entries = list(self._entries)

        return [
            e
            for e in entries
            if (user_id is None or e.user_id == user_id)
            and (tenant_id is None or e.tenant_id == tenant_id)
            and (version is None or e.version == version)
            and (start_time is None or e.timestamp >= start_time)
            and (end_time is None or e.timestamp <= end_time)
        ]

    def all_logs(self) -> list[AgentLogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class LoggingLogSink:
    """Writes a compact JSON summary of each entry to a logger.

    Successful executions log at INFO, failed ones at ERROR. Inputs and
    outputs are reduced to their lengths.
    """

    def __init__(self, logger_name: str = "agentpin.executions") -> None:
        self._logger = logging.getLogger(logger_name)

    def log_execution(self, entry: AgentLogEntry) -> None:
        record = {
            "id": entry.id,
            "timestamp": entry.timestamp.isoformat(),
            "user_id": entry.user_id,
            "tenant_id": entry.tenant_id,
            "version": entry.version,
            "cost": entry.cost.amount,
            "duration_ms": round(entry.duration_ms, 2),
            "input_length": len(entry.input),
            "output_length": len(entry.output),
            "error": entry.error,
        }
        level = logging.ERROR if entry.error else logging.INFO
        self._logger.log(level, "agent_execution %s", json.dumps(record))

    def query_logs(
        self,
        *,
        user_id: str | None = None,
        tenant_id: str | None = None,
        version: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> list[AgentLogEntry]:
        logger.warning("LoggingLogSink does not support querying logs")
        return []


def create_log_entry(
    context: ExecutionContext,
    result: ExecutionResult,
    error: BaseException | None = None,
) -> AgentLogEntry:
    """Build the log entry for one execution (successful or not)."""
    return AgentLogEntry(
        id=new_execution_id(),
        timestamp=result.metadata.timestamp,
        user_id=context.user_id,
        tenant_id=context.tenant_id,
        version=result.version,
        input=context.input,
        output=result.output,
        cost=result.cost,
        duration_ms=result.metadata.duration_ms,
        error=str(error) if error is not None else None,
        metadata=dict(context.context or {}),
    )
