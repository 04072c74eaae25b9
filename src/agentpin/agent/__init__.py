"""Execution layer on top of the versioning core.

- config.py: Settings via pydantic-settings
- models.py: ExecuteRequest, ExecutionResult, ExecutionCost, AgentLogEntry
- providers.py: CompletionProvider protocol, OpenAI/Anthropic providers
- sinks.py: LogSink protocol, in-memory and logging-backed sinks
- executor.py: AgentExecutor (resolve -> complete -> record)
"""

from agentpin.agent.executor import AgentExecutor
from agentpin.agent.models import (
    AgentLogEntry,
    CompletionResult,
    ExecuteRequest,
    ExecutionCost,
    ExecutionMetadata,
    ExecutionResult,
)
from agentpin.agent.providers import (
    AnthropicProvider,
    CompletionProvider,
    OpenAIProvider,
    ProviderMismatchError,
    UnsupportedProviderError,
    create_provider,
)
from agentpin.agent.sinks import (
    InMemoryLogSink,
    LoggingLogSink,
    LogSink,
    create_log_entry,
)

__all__ = [
    "AgentExecutor",
    "AgentLogEntry",
    "AnthropicProvider",
    "CompletionProvider",
    "CompletionResult",
    "ExecuteRequest",
    "ExecutionCost",
    "ExecutionMetadata",
    "ExecutionResult",
    "InMemoryLogSink",
    "LogSink",
    "LoggingLogSink",
    "OpenAIProvider",
    "ProviderMismatchError",
    "UnsupportedProviderError",
    "create_log_entry",
    "create_provider",
]
